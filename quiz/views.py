# quiz/views.py
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods
import logging

from core.auth import bearer_auth_required
from core.exceptions import ServiceError
from core.http import parse_json_body, parse_pagination, service_error_response, unexpected_error_response
from .pipeline import get_pipeline
from .services import StudyMaterialGateway

logger = logging.getLogger(__name__)


@csrf_exempt
@require_http_methods(["GET", "POST"])
def process(request):
    """
    GET is a health check. POST runs the generation pipeline:
    {fileId, action, fileContent?, fileUrl?, difficulty?} -> {result}.
    """
    if request.method == "GET":
        return JsonResponse({'status': 'ok'})
    return _process(request)


@bearer_auth_required
def _process(request):
    try:
        data = parse_json_body(request)
        result = get_pipeline().process(data, request.auth_user_id)
        return JsonResponse({'result': result})
    except ServiceError as e:
        return service_error_response(e)
    except Exception as e:
        return unexpected_error_response(e)


def _page(total, offset, limit):
    return {'total': total, 'page': offset // limit + 1, 'limit': limit}


# -----------------------------
# Quizzes
# -----------------------------
@csrf_exempt
@require_http_methods(["GET"])
@bearer_auth_required
def quiz_list(request):
    try:
        offset, limit = parse_pagination(request)
        total, quizzes = StudyMaterialGateway.list_quizzes(request.auth_user_id, offset, limit)
        return JsonResponse({
            'quizzes': [q.to_dict(include_questions=False) for q in quizzes],
            'pagination': _page(total, offset, limit),
        })
    except ServiceError as e:
        return service_error_response(e)
    except Exception as e:
        return unexpected_error_response(e)


@csrf_exempt
@require_http_methods(["GET", "PUT", "DELETE"])
@bearer_auth_required
def quiz_detail(request, quiz_id):
    try:
        quiz = StudyMaterialGateway.get_owned_quiz(quiz_id, request.auth_user_id)

        if request.method == "GET":
            return JsonResponse({'quiz': quiz.to_dict()})

        if request.method == "PUT":
            quiz = StudyMaterialGateway.update_quiz(quiz, parse_json_body(request))
            logger.info(f"Updated quiz {quiz.id}")
            return JsonResponse({'quiz': quiz.to_dict()})

        StudyMaterialGateway.delete(quiz)
        logger.info(f"Deleted quiz {quiz_id}")
        return JsonResponse({'success': True})
    except ServiceError as e:
        return service_error_response(e)
    except Exception as e:
        return unexpected_error_response(e)


# -----------------------------
# Flashcards
# -----------------------------
@csrf_exempt
@require_http_methods(["GET"])
@bearer_auth_required
def flashcard_list(request):
    try:
        offset, limit = parse_pagination(request, default_limit=20)
        total, flashcards = StudyMaterialGateway.list_flashcards(
            request.auth_user_id, request.GET.get('fileId'), offset, limit)
        return JsonResponse({
            'flashcards': [f.to_dict() for f in flashcards],
            'pagination': _page(total, offset, limit),
        })
    except ServiceError as e:
        return service_error_response(e)
    except Exception as e:
        return unexpected_error_response(e)


@csrf_exempt
@require_http_methods(["GET", "PUT", "DELETE"])
@bearer_auth_required
def flashcard_detail(request, flashcard_id):
    try:
        flashcard = StudyMaterialGateway.get_owned_flashcard(flashcard_id, request.auth_user_id)

        if request.method == "GET":
            return JsonResponse({'flashcard': flashcard.to_dict()})

        if request.method == "PUT":
            flashcard = StudyMaterialGateway.update_flashcard(flashcard, parse_json_body(request))
            return JsonResponse({'flashcard': flashcard.to_dict()})

        StudyMaterialGateway.delete(flashcard)
        return JsonResponse({'success': True})
    except ServiceError as e:
        return service_error_response(e)
    except Exception as e:
        return unexpected_error_response(e)


# -----------------------------
# Summaries
# -----------------------------
@csrf_exempt
@require_http_methods(["GET"])
@bearer_auth_required
def summary_list(request):
    try:
        summaries = StudyMaterialGateway.list_summaries(request.auth_user_id, request.GET.get('fileId'))
        return JsonResponse({'summaries': [s.to_dict() for s in summaries]})
    except ServiceError as e:
        return service_error_response(e)
    except Exception as e:
        return unexpected_error_response(e)


@csrf_exempt
@require_http_methods(["GET", "DELETE"])
@bearer_auth_required
def summary_detail(request, summary_id):
    try:
        summary = StudyMaterialGateway.get_owned_summary(summary_id, request.auth_user_id)
        if request.method == "GET":
            return JsonResponse({'summary': summary.to_dict()})

        StudyMaterialGateway.delete(summary)
        return JsonResponse({'success': True})
    except ServiceError as e:
        return service_error_response(e)
    except Exception as e:
        return unexpected_error_response(e)
