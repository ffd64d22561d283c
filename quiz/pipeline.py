# quiz/pipeline.py
"""
The document-to-study-material pipeline behind POST /api/process.

Steps run strictly in order within a request:
Validating -> Extracting (only when no text was sent) -> Generating ->
Parsing -> Persisting. Any step may end the request as Failed(kind);
there is no resumption, the client retries the whole request.
"""
import logging
import uuid
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable, Optional
from urllib.parse import urlparse

from django.conf import settings

from core.ai_client import AIClient, get_ai_client
from core.exceptions import ExtractionError, PersistenceError, ValidationError
from materials.arabic import is_valid_arabic_text, normalize_arabic_text
from materials.extraction import DocumentSource, TextExtractor, get_text_extractor
from .parsers import parse_flashcards, parse_quiz
from .prompts import ARTIFACT_TYPES, build_prompt, quiz_title, validate_difficulty
from .services import StudyMaterialGateway

logger = logging.getLogger(__name__)


@dataclass
class GenerationRequest:
    file_id: uuid.UUID
    action: str
    file_content: Optional[str] = None
    file_url: Optional[str] = None
    difficulty: Optional[str] = None

    @classmethod
    def from_payload(cls, data: dict) -> 'GenerationRequest':
        file_id = data.get('fileId')
        if not file_id:
            raise ValidationError('معرف الملف مطلوب')
        try:
            file_id = uuid.UUID(str(file_id))
        except ValueError:
            raise ValidationError('معرف الملف غير صالح')

        action = data.get('action')
        if not action:
            raise ValidationError('نوع العملية مطلوب')
        if action not in ARTIFACT_TYPES:
            raise ValidationError('نوع العملية غير صالح')

        file_content = data.get('fileContent')
        file_url = data.get('fileUrl')
        if file_content is not None and not isinstance(file_content, str):
            raise ValidationError('محتوى الملف غير صالح')
        if file_url is not None and not isinstance(file_url, str):
            raise ValidationError('رابط الملف غير صالح')
        if not (file_content or '').strip() and not (file_url or '').strip():
            raise ValidationError('محتوى الملف أو رابطه مطلوب')

        difficulty = data.get('difficulty')
        if action == 'quiz':
            difficulty = validate_difficulty(difficulty)
        elif difficulty not in (None, ''):
            validate_difficulty(difficulty)

        return cls(file_id=file_id, action=action, file_content=file_content,
                   file_url=file_url, difficulty=difficulty)


class GenerationPipeline:
    """
    Sequences extraction, prompt building, generation, parsing and
    persistence for one request. Collaborators are injected so tests can
    swap the upstream services.
    """

    def __init__(self, extractor: TextExtractor, ai_client: AIClient,
                 gateway: StudyMaterialGateway, require_arabic: bool = True,
                 allowed_fetch_hosts: Iterable[str] = ()):
        self.extractor = extractor
        self.ai_client = ai_client
        self.gateway = gateway
        self.require_arabic = require_arabic
        self.allowed_fetch_hosts = {host.lower() for host in allowed_fetch_hosts}

    def process(self, payload: dict, user_id: str) -> dict:
        logger.info(f"[process] Received request from user {user_id}")
        self._transition('Validating')
        request = GenerationRequest.from_payload(payload)
        document = self.gateway.get_owned_document(request.file_id, user_id)

        try:
            result = self._run(request, document)
        except Exception as e:
            kind = getattr(e, 'kind', None) or type(e).__name__
            self._transition(f'Failed({kind})', document.id)
            self._record(document, request.action, kind)
            raise

        self._record(document, request.action)
        self._transition('Responded', document.id)
        return result

    def _run(self, request: GenerationRequest, document) -> dict:
        text = self._resolve_text(request, document)

        if self.require_arabic and not is_valid_arabic_text(text):
            raise ExtractionError('Document content is not predominantly Arabic',
                                  kind=ExtractionError.NOT_ARABIC_CONTENT,
                                  public_message='يجب أن يكون محتوى الملف باللغة العربية')

        self._transition('Generating', document.id)
        prompt = build_prompt(request.action, text, request.difficulty)
        raw = self.ai_client.generate(prompt.system_message, prompt.user_message,
                                      max_tokens=prompt.max_tokens, temperature=prompt.temperature)

        self._transition('Parsing', document.id)
        if request.action == 'quiz':
            questions = parse_quiz(raw)
            title = quiz_title(request.difficulty)
            self._transition('Persisting', document.id)
            quiz_id = self.gateway.save_quiz(document, title, request.difficulty, questions)
            return {'quizId': str(quiz_id), 'title': title, 'totalQuestions': len(questions)}

        if request.action == 'flashcards':
            cards = parse_flashcards(raw)
            self._transition('Persisting', document.id)
            flashcards = self.gateway.save_flashcards(document, cards)
            return {'flashcards': [{'question': f.question, 'answer': f.answer} for f in flashcards]}

        summary = raw.strip()
        self._transition('Persisting', document.id)
        self.gateway.save_summary(document, summary)
        return {'summary': summary}

    def _resolve_text(self, request: GenerationRequest, document) -> str:
        if (request.file_content or '').strip():
            text = normalize_arabic_text(request.file_content)
            if not text:
                raise ExtractionError('Submitted content is empty after normalization',
                                      kind=ExtractionError.NO_TEXT_FOUND,
                                      public_message='لم يتم العثور على محتوى نصي في الملف')
            return text

        source = self._document_source(request.file_url.strip(), document)
        self._transition('Extracting', document.id)
        extracted = self.extractor.extract(source)
        if extracted.error:
            logger.warning(f"[process] Document {document.id} recovered via OCR: {extracted.error}")
        return extracted.text

    def _document_source(self, file_url: str, document) -> DocumentSource:
        """
        The URL must name the owned document: its own storage URL, or a file
        on one of the configured storage hosts. Anything else is refused
        before a request leaves the server.
        """
        mime_type = document.mime_type or None
        if file_url == document.storage_url and document.file:
            try:
                with document.file.open('rb') as fh:
                    data = fh.read()
            except OSError as e:
                raise ExtractionError(f'Stored file for document {document.id} is unreadable: {e}',
                                      kind=ExtractionError.FETCH_FAILED,
                                      public_message='فشل في قراءة الملف المخزن') from e
            return DocumentSource(buffer=data, mime_type=mime_type, name=document.name)

        if file_url == document.storage_url or self._is_allowed_host(file_url):
            return DocumentSource(url=file_url, mime_type=mime_type, name=document.name)

        logger.warning(f"[process] Refused fileUrl {file_url!r} for document {document.id}")
        raise ValidationError(f'fileUrl {file_url!r} does not belong to document {document.id}',
                              public_message='رابط الملف لا يخص الملف المحدد')

    def _is_allowed_host(self, url: str) -> bool:
        try:
            parsed = urlparse(url)
            host = parsed.hostname or ''
        except ValueError:
            return False
        return parsed.scheme in ('http', 'https') and host in self.allowed_fetch_hosts

    def _record(self, document, action, failure_kind=None):
        try:
            self.gateway.record_processing(document, action, failure_kind)
        except PersistenceError as e:
            # a failed outcome row never replaces the request's own result or error
            logger.error(f"[process] {e}")

    @staticmethod
    def _transition(state, document_id=None):
        suffix = f" for document {document_id}" if document_id else ""
        logger.info(f"[process] -> {state}{suffix}")


@lru_cache(maxsize=1)
def get_pipeline() -> GenerationPipeline:
    """Process-wide pipeline wired to the settings-built clients."""
    return GenerationPipeline(
        extractor=get_text_extractor(),
        ai_client=get_ai_client(),
        gateway=StudyMaterialGateway(),
        require_arabic=settings.REQUIRE_ARABIC_CONTENT,
        allowed_fetch_hosts=settings.FETCH_ALLOWED_HOSTS,
    )
