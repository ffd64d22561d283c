# core/http.py
import json
import logging
from django.http import JsonResponse

from .exceptions import ServiceError, ValidationError

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "حدث خطأ غير متوقع أثناء المعالجة"


def parse_json_body(request) -> dict:
    """Decode a JSON object body or raise ValidationError."""
    try:
        data = json.loads(request.body or b"{}")
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError("صيغة البيانات غير صالحة (JSON)")
    if not isinstance(data, dict):
        raise ValidationError("صيغة البيانات غير صالحة (JSON)")
    return data


def service_error_response(error: ServiceError) -> JsonResponse:
    """
    Convert a ServiceError into the public JSON error shape.
    The full cause goes to the log; only the localized message is returned.
    """
    if error.status_code >= 500:
        logger.error(f"Request failed: {error}", exc_info=error.__cause__ is not None)
    else:
        logger.info(f"Request rejected ({error.status_code}): {error}")
    return JsonResponse({"error": error.public_message}, status=error.status_code)


def unexpected_error_response(error: Exception) -> JsonResponse:
    logger.error(f"Unexpected error: {error}", exc_info=True)
    return JsonResponse({"error": GENERIC_ERROR_MESSAGE}, status=500)


def parse_pagination(request, default_limit: int = 10, max_limit: int = 100):
    """Read `page` and `limit` query params; returns (offset, limit)."""
    try:
        page = int(request.GET.get("page", 1))
        limit = int(request.GET.get("limit", default_limit))
    except (TypeError, ValueError):
        raise ValidationError("قيم الترقيم غير صالحة")
    if page < 1 or limit < 1:
        raise ValidationError("قيم الترقيم غير صالحة")
    limit = min(limit, max_limit)
    return (page - 1) * limit, limit
