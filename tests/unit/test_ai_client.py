"""Tests for the chat-completions client."""
from unittest.mock import Mock

import pytest
import requests

from core.ai_client import AIClient
from core.exceptions import UpstreamError


def _response(status=200, json_body=None, text="", headers=None):
    resp = Mock()
    resp.status_code = status
    resp.ok = 200 <= status < 300
    resp.headers = headers or {}
    resp.text = text
    if json_body is None:
        resp.json.side_effect = ValueError("no json")
    else:
        resp.json.return_value = json_body
    return resp


def _completion(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


@pytest.fixture
def session():
    return Mock(spec=requests.Session)


@pytest.fixture
def client(session):
    instance = AIClient(api_key="sk-test", api_url="https://llm.test/v1/chat/completions",
                        model="test-model", app_url="https://lammah.test", app_name="Lammah AI",
                        timeout=5, max_retries=2, session=session)
    instance.sleep = Mock()
    return instance


class TestGenerate:
    def test_returns_assistant_text(self, client, session):
        session.post.return_value = _response(json_body=_completion("  مرحبا  "))

        assert client.generate("system", "user", max_tokens=100, temperature=0.2) == "مرحبا"

        _, kwargs = session.post.call_args
        assert kwargs["json"] == {
            "model": "test-model",
            "messages": [
                {"role": "system", "content": "system"},
                {"role": "user", "content": "user"},
            ],
            "max_tokens": 100,
            "temperature": 0.2,
        }
        assert kwargs["headers"]["Authorization"] == "Bearer sk-test"
        assert kwargs["headers"]["HTTP-Referer"] == "https://lammah.test"
        assert kwargs["headers"]["X-Title"] == "Lammah AI"
        assert kwargs["timeout"] == 5

    def test_legacy_text_field(self, client, session):
        session.post.return_value = _response(json_body={"choices": [{"text": "نص"}]})
        assert client.generate("s", "u") == "نص"

    def test_missing_api_key(self, session):
        client = AIClient(api_key=None, session=session)
        with pytest.raises(UpstreamError) as exc_info:
            client.generate("s", "u")
        assert exc_info.value.kind == UpstreamError.AUTH_FAILED
        session.post.assert_not_called()


class TestErrors:
    def test_unauthorized(self, client, session):
        session.post.return_value = _response(status=401, text="bad key")

        with pytest.raises(UpstreamError) as exc_info:
            client.generate("s", "u")

        assert exc_info.value.kind == UpstreamError.AUTH_FAILED
        assert session.post.call_count == 1

    def test_server_error_keeps_truncated_body(self, client, session):
        session.post.return_value = _response(status=503, text="x" * 2000)

        with pytest.raises(UpstreamError) as exc_info:
            client.generate("s", "u")

        error = exc_info.value
        assert error.kind == UpstreamError.UPSTREAM_ERROR
        assert error.status == 503
        assert len(error.body) == 500
        assert session.post.call_count == 1

    def test_timeout(self, client, session):
        session.post.side_effect = requests.Timeout("slow")

        with pytest.raises(UpstreamError) as exc_info:
            client.generate("s", "u")

        assert exc_info.value.kind == UpstreamError.TIMEOUT
        client.sleep.assert_not_called()

    def test_connection_error(self, client, session):
        session.post.side_effect = requests.ConnectionError("refused")
        with pytest.raises(UpstreamError) as exc_info:
            client.generate("s", "u")
        assert exc_info.value.kind == UpstreamError.UPSTREAM_ERROR

    def test_empty_content(self, client, session):
        session.post.return_value = _response(json_body=_completion("   "))
        with pytest.raises(UpstreamError):
            client.generate("s", "u")

    def test_non_json_body(self, client, session):
        session.post.return_value = _response(text="<html>")
        with pytest.raises(UpstreamError):
            client.generate("s", "u")

    def test_error_is_500_with_arabic_message(self, client, session):
        session.post.return_value = _response(status=500, text="boom")
        with pytest.raises(UpstreamError) as exc_info:
            client.generate("s", "u")
        assert exc_info.value.status_code == 500
        assert "boom" not in exc_info.value.public_message


class TestRateLimitRetry:
    def test_retries_then_succeeds(self, client, session):
        session.post.side_effect = [
            _response(status=429, headers={"Retry-After": "3"}),
            _response(json_body=_completion("تم")),
        ]

        assert client.generate("s", "u") == "تم"
        assert session.post.call_count == 2
        client.sleep.assert_called_once_with(3.0)

    def test_exponential_backoff_without_retry_after(self, client, session):
        session.post.side_effect = [
            _response(status=429),
            _response(status=429),
            _response(json_body=_completion("تم")),
        ]

        client.generate("s", "u")

        assert [c.args[0] for c in client.sleep.call_args_list] == [1, 2]

    def test_gives_up_after_max_retries(self, client, session):
        session.post.return_value = _response(status=429)

        with pytest.raises(UpstreamError) as exc_info:
            client.generate("s", "u")

        assert exc_info.value.kind == UpstreamError.RATE_LIMITED
        assert session.post.call_count == 3

    def test_retry_after_is_capped(self, client, session):
        session.post.side_effect = [
            _response(status=429, headers={"Retry-After": "3600"}),
            _response(json_body=_completion("تم")),
        ]
        client.generate("s", "u")
        client.sleep.assert_called_once_with(30)


class TestChat:
    def test_sends_full_history(self, client, session):
        session.post.return_value = _response(json_body=_completion("أهلاً"))
        messages = [
            {"role": "system", "content": "s"},
            {"role": "user", "content": "مرحبا"},
            {"role": "assistant", "content": "أهلاً"},
            {"role": "user", "content": "اشرح"},
        ]

        client.chat(messages, max_tokens=1000)

        _, kwargs = session.post.call_args
        assert kwargs["json"]["messages"] == messages
        assert kwargs["json"]["max_tokens"] == 1000
