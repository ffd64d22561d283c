# chatbot/views.py
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods
from django.http import JsonResponse
import logging

from core.auth import bearer_auth_required
from core.exceptions import ServiceError
from core.http import parse_json_body, service_error_response, unexpected_error_response
from .chatbot_service import get_chatbot_service

logger = logging.getLogger(__name__)


@csrf_exempt
@require_http_methods(["POST"])
@bearer_auth_required
def chatbot_api(request):
    """ {message, chatHistory?} -> {response} """
    try:
        data = parse_json_body(request)
        response_message = get_chatbot_service().generate_response(
            data.get('message'),
            chat_history=data.get('chatHistory'),
        )
        return JsonResponse({"response": response_message})
    except ServiceError as e:
        return service_error_response(e)
    except Exception as e:
        return unexpected_error_response(e)
