# materials/views.py
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods
import logging

from core.auth import bearer_auth_required
from core.exceptions import ServiceError, ValidationError
from core.http import parse_json_body, service_error_response, unexpected_error_response
from .services import MaterialService

logger = logging.getLogger(__name__)


@csrf_exempt
@require_http_methods(["GET", "POST"])
@bearer_auth_required
def document_list(request):
    """
    GET lists the caller's documents; POST uploads one (multipart field `file`).
    """
    try:
        if request.method == "GET":
            documents = MaterialService.list_documents(request.auth_user_id)
            return JsonResponse({'files': [d.to_dict() for d in documents]})

        if 'file' not in request.FILES:
            raise ValidationError('لم يتم رفع أي ملف')
        document = MaterialService.upload_document(request.FILES['file'], request.auth_user_id)
        return JsonResponse({'file': document.to_dict()}, status=201)
    except ServiceError as e:
        return service_error_response(e)
    except Exception as e:
        return unexpected_error_response(e)


@csrf_exempt
@require_http_methods(["GET", "PATCH", "DELETE"])
@bearer_auth_required
def document_detail(request, document_id):
    try:
        document = MaterialService.get_owned_document(document_id, request.auth_user_id)

        if request.method == "GET":
            return JsonResponse({'file': document.to_dict()})

        if request.method == "PATCH":
            data = parse_json_body(request)
            document = MaterialService.rename_document(document, data.get('name'))
            logger.info(f"Renamed document {document.id}")
            return JsonResponse({'file': document.to_dict()})

        MaterialService.delete_document(document)
        logger.info(f"Deleted document {document_id} for user {request.auth_user_id}")
        return JsonResponse({'success': True})
    except ServiceError as e:
        return service_error_response(e)
    except Exception as e:
        return unexpected_error_response(e)
