# core/auth.py
import logging
from functools import lru_cache, wraps

import requests
from django.conf import settings

from .exceptions import AuthError, ServiceError
from .http import service_error_response

logger = logging.getLogger(__name__)


def get_bearer_token(request):
    """Return the token from `Authorization: Bearer <token>`, or None."""
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


class AuthProviderClient:
    """
    Verifies user access tokens against the hosted auth provider.
    Users live entirely in the provider; we only keep their id.
    """

    def __init__(self, base_url=None, service_key=None, timeout=None, session=None):
        self.base_url = (base_url or "").rstrip("/")
        self.service_key = service_key
        self.timeout = timeout or 10
        self.session = session or requests.Session()
        logger.info(f"Auth provider URL: {'Set' if self.base_url else 'Not set'}")

    def get_user_id(self, token) -> str:
        if not token:
            raise AuthError("Missing bearer token")
        if not self.base_url:
            raise ServiceError("AUTH_API_URL is not configured")

        headers = {"Authorization": f"Bearer {token}"}
        if self.service_key:
            headers["apikey"] = self.service_key

        try:
            resp = self.session.get(f"{self.base_url}/user", headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise ServiceError(f"Auth provider unreachable: {e}") from e

        if resp.status_code in (401, 403):
            raise AuthError("Invalid or expired token", public_message="الجلسة غير صالحة، يرجى تسجيل الدخول مجددًا")
        if not resp.ok:
            raise ServiceError(f"Auth provider returned {resp.status_code}: {resp.text[:200]}")

        try:
            user_id = (resp.json() or {}).get("id")
        except ValueError:
            user_id = None
        if not user_id:
            raise AuthError("Auth provider returned no user id")
        return str(user_id)


@lru_cache(maxsize=1)
def get_auth_client() -> AuthProviderClient:
    """Process-wide auth client, built from settings on first use."""
    return AuthProviderClient(
        base_url=settings.AUTH_API_URL,
        service_key=settings.DATABASE_SERVICE_KEY,
        timeout=settings.AUTH_TIMEOUT,
    )


def bearer_auth_required(view_func):
    """
    Resolve the caller from the bearer token before the view runs and
    store it on `request.auth_user_id`. Responds 401 without calling the view.
    """
    @wraps(view_func)
    def _wrapped(request, *args, **kwargs):
        try:
            request.auth_user_id = get_auth_client().get_user_id(get_bearer_token(request))
        except ServiceError as e:
            return service_error_response(e)
        return view_func(request, *args, **kwargs)

    return _wrapped
