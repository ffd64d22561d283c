import logging
import time
from functools import lru_cache
from typing import Dict, List, Optional

import requests
from django.conf import settings

from core.exceptions import UpstreamError

logger = logging.getLogger(__name__)
DEFAULT_TIMEOUT = 60
DEFAULT_MAX_RETRIES = 2
DEFAULT_API_URL = "https://openrouter.ai/api/v1/chat/completions"
MAX_ERROR_BODY = 500
MAX_BACKOFF_SECONDS = 30


def _parse_retry_after(resp) -> Optional[float]:
    value = resp.headers.get("Retry-After")
    if not value:
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        # HTTP-date form is not worth supporting here
        return None


class AIClient:
    """
    Client for an OpenAI-compatible chat-completions endpoint.

    One request per call, bearer-token auth plus the attribution headers the
    provider asks for. HTTP failures are mapped to UpstreamError kinds; only
    rate limiting is retried, with bounded exponential backoff.
    """

    def __init__(self, api_key: Optional[str] = None, api_url: Optional[str] = None,
                 model: Optional[str] = None, app_url: Optional[str] = None,
                 app_name: Optional[str] = None, timeout: Optional[float] = None,
                 max_retries: Optional[int] = None, session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.api_url = api_url or DEFAULT_API_URL
        self.model = model
        self.app_url = app_url
        self.app_name = app_name or "Lammah"
        self.timeout = timeout or DEFAULT_TIMEOUT
        self.max_retries = DEFAULT_MAX_RETRIES if max_retries is None else max_retries
        self.session = session or requests.Session()
        self.sleep = time.sleep

        logger.info(f"LLM API Key: {'Set' if self.api_key else 'Not set'}")
        logger.info(f"AIClient initialized with model {self.model} at {self.api_url}")

    def generate(self, system_message: str, user_message: str, max_tokens: int = 2000,
                 temperature: float = 0.7) -> str:
        """Run one system/user exchange and return the assistant text."""
        messages = [
            {"role": "system", "content": system_message},
            {"role": "user", "content": user_message},
        ]
        return self.chat(messages, max_tokens=max_tokens, temperature=temperature)

    def chat(self, messages: List[Dict[str, str]], max_tokens: int = 1000,
             temperature: float = 0.7) -> str:
        if not self.api_key:
            raise UpstreamError("LLM_API_KEY is not configured", kind=UpstreamError.AUTH_FAILED)

        payload = {
            "model": self.model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }

        attempt = 0
        while True:
            try:
                return self._post(payload)
            except UpstreamError as e:
                if e.kind != UpstreamError.RATE_LIMITED or attempt >= self.max_retries:
                    raise
                delay = self._backoff_delay(attempt, getattr(e, "retry_after", None))
                attempt += 1
                logger.warning(f"LLM rate limited, retry {attempt}/{self.max_retries} in {delay:.1f}s")
                self.sleep(delay)

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
            "X-Title": self.app_name,
        }
        if self.app_url:
            headers["HTTP-Referer"] = self.app_url
        return headers

    @staticmethod
    def _backoff_delay(attempt: int, retry_after: Optional[float]) -> float:
        if retry_after is not None:
            return min(retry_after, MAX_BACKOFF_SECONDS)
        return min(2 ** attempt, MAX_BACKOFF_SECONDS)

    def _post(self, payload: dict) -> str:
        try:
            resp = self.session.post(self.api_url, headers=self._headers(), json=payload, timeout=self.timeout)
        except requests.Timeout as e:
            raise UpstreamError(f"LLM request timed out after {self.timeout}s",
                                kind=UpstreamError.TIMEOUT) from e
        except requests.RequestException as e:
            raise UpstreamError(f"LLM request failed: {e}") from e

        if resp.status_code == 401:
            raise UpstreamError("LLM API rejected the API key", kind=UpstreamError.AUTH_FAILED,
                                status=401, body=resp.text[:MAX_ERROR_BODY])
        if resp.status_code == 429:
            error = UpstreamError("LLM API rate limit reached", kind=UpstreamError.RATE_LIMITED,
                                  status=429, body=resp.text[:MAX_ERROR_BODY])
            error.retry_after = _parse_retry_after(resp)
            raise error
        if not resp.ok:
            body = resp.text[:MAX_ERROR_BODY]
            raise UpstreamError(f"LLM API error {resp.status_code}: {body}",
                                status=resp.status_code, body=body)

        try:
            data = resp.json()
        except ValueError as e:
            raise UpstreamError(f"LLM API returned non-JSON body: {resp.text[:MAX_ERROR_BODY]}") from e

        text = self._extract_text(data)
        if not text or not text.strip():
            raise UpstreamError(f"LLM API returned no content: {str(data)[:MAX_ERROR_BODY]}")
        return text.strip()

    @staticmethod
    def _extract_text(resp) -> Optional[str]:
        """
        Pull the assistant text out of a chat-completions body.
        Handles `choices[0].message.content` and the older `choices[0].text`.
        """
        if not isinstance(resp, dict):
            return None
        choices = resp.get("choices")
        if not isinstance(choices, list) or not choices:
            return None
        choice = choices[0]
        if not isinstance(choice, dict):
            return None
        message = choice.get("message")
        if isinstance(message, dict) and isinstance(message.get("content"), str):
            return message["content"]
        if isinstance(choice.get("text"), str):
            return choice["text"]
        return None


@lru_cache(maxsize=1)
def get_ai_client() -> AIClient:
    """Process-wide client, constructed from settings on first use."""
    return AIClient(
        api_key=settings.LLM_API_KEY,
        api_url=settings.LLM_API_URL,
        model=settings.LLM_MODEL,
        app_url=settings.APP_URL,
        app_name=settings.APP_NAME,
        timeout=settings.LLM_TIMEOUT,
        max_retries=settings.LLM_MAX_RETRIES,
    )
