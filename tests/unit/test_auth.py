"""Tests for bearer-token verification against the auth provider."""
from unittest.mock import Mock

import pytest
import requests

from core.auth import AuthProviderClient, get_bearer_token
from core.exceptions import AuthError, ServiceError


@pytest.fixture
def session():
    return Mock(spec=requests.Session)


@pytest.fixture
def provider(session):
    return AuthProviderClient(base_url="https://auth.test/auth/v1/", service_key="anon-key",
                              timeout=3, session=session)


def _response(status=200, json_body=None):
    resp = Mock()
    resp.status_code = status
    resp.ok = 200 <= status < 300
    resp.text = ""
    resp.json.return_value = json_body
    return resp


class TestGetBearerToken:
    def test_reads_bearer_token(self, rf):
        request = rf.get("/", HTTP_AUTHORIZATION="Bearer abc.def")
        assert get_bearer_token(request) == "abc.def"

    @pytest.mark.parametrize("header", ["", "Basic abc", "Bearer ", "Bearer"])
    def test_missing_or_other_scheme(self, rf, header):
        request = rf.get("/", HTTP_AUTHORIZATION=header)
        assert get_bearer_token(request) is None


class TestAuthProviderClient:
    def test_returns_user_id(self, provider, session):
        session.get.return_value = _response(json_body={"id": "u-123", "email": "a@b.test"})

        assert provider.get_user_id("tok") == "u-123"

        session.get.assert_called_once_with(
            "https://auth.test/auth/v1/user",
            headers={"Authorization": "Bearer tok", "apikey": "anon-key"},
            timeout=3,
        )

    def test_missing_token(self, provider, session):
        with pytest.raises(AuthError):
            provider.get_user_id(None)
        session.get.assert_not_called()

    @pytest.mark.parametrize("status", [401, 403])
    def test_rejected_token(self, provider, session, status):
        session.get.return_value = _response(status=status)
        with pytest.raises(AuthError) as exc_info:
            provider.get_user_id("expired")
        assert exc_info.value.status_code == 401

    def test_provider_unreachable(self, provider, session):
        session.get.side_effect = requests.ConnectionError("down")
        with pytest.raises(ServiceError) as exc_info:
            provider.get_user_id("tok")
        assert exc_info.value.status_code == 500

    def test_response_without_id(self, provider, session):
        session.get.return_value = _response(json_body={})
        with pytest.raises(AuthError):
            provider.get_user_id("tok")
