# quiz/services.py
import logging
import uuid
from typing import List, Optional

from django.db import DatabaseError, transaction
from django.utils import timezone

from core.exceptions import NotFoundError, OwnershipError, ParseError, PersistenceError, ValidationError
from materials.models import Document
from materials.services import MaterialService
from .models import Flashcard, ProcessingRecord, Quiz, QuizQuestion, Summary
from .parsers import ParsedFlashcard, ParsedQuestion, questions_from_records
from .prompts import validate_difficulty

logger = logging.getLogger(__name__)


class StudyMaterialGateway:
    """
    Reads and writes generated study material for one acting user's documents.

    Every write gets a fresh UUID, multi-row writes are atomic, and database
    failures surface as PersistenceError with the cause kept for the log.
    """

    # -----------------------------
    # Ownership
    # -----------------------------
    @staticmethod
    def get_owned_document(document_id, user_id) -> Document:
        return MaterialService.get_owned_document(document_id, user_id)

    @staticmethod
    def _get_owned(model, pk, user_id, not_found_message):
        try:
            record = model.objects.filter(pk=uuid.UUID(str(pk))).first()
        except (TypeError, ValueError):
            record = None
        if record is None:
            raise NotFoundError(f"{model.__name__} {pk} not found", public_message=not_found_message)
        if not record.is_owned_by(user_id):
            raise OwnershipError(f"User {user_id} does not own {model.__name__} {pk}")
        return record

    # -----------------------------
    # Generation results
    # -----------------------------
    @staticmethod
    def save_quiz(document: Document, title: str, difficulty: str,
                  questions: List[ParsedQuestion]) -> uuid.UUID:
        try:
            with transaction.atomic():
                quiz = Quiz.objects.create(
                    owner_id=document.owner_id,
                    document=document,
                    title=title,
                    difficulty=difficulty,
                )
                QuizQuestion.objects.bulk_create([
                    QuizQuestion(quiz=quiz, position=position, text=q.text,
                                 choices=q.choices, correct_answer=q.correct_answer)
                    for position, q in enumerate(questions)
                ])
        except DatabaseError as e:
            raise PersistenceError(f"Failed to save quiz for document {document.id}: {e}") from e

        logger.info(f"Saved quiz {quiz.id} with {len(questions)} questions for document {document.id}")
        return quiz.id

    @staticmethod
    def save_flashcards(document: Document, cards: List[ParsedFlashcard]) -> List[Flashcard]:
        try:
            with transaction.atomic():
                flashcards = Flashcard.objects.bulk_create([
                    Flashcard(owner_id=document.owner_id, document=document, position=position,
                              question=card.question, answer=card.answer)
                    for position, card in enumerate(cards)
                ])
        except DatabaseError as e:
            raise PersistenceError(f"Failed to save flashcards for document {document.id}: {e}") from e

        logger.info(f"Saved {len(flashcards)} flashcards for document {document.id}")
        return flashcards

    @staticmethod
    def save_summary(document: Document, content: str) -> Summary:
        try:
            summary = Summary.objects.create(owner_id=document.owner_id, document=document, content=content)
        except DatabaseError as e:
            raise PersistenceError(f"Failed to save summary for document {document.id}: {e}") from e
        logger.info(f"Saved summary {summary.id} for document {document.id}")
        return summary

    @staticmethod
    def record_processing(document: Document, action: str, failure_kind: Optional[str] = None) -> ProcessingRecord:
        """Write the outcome row for one generation request."""
        try:
            return ProcessingRecord.objects.create(
                owner_id=document.owner_id,
                document=document,
                action=action,
                status=ProcessingRecord.STATUS_FAILED if failure_kind else ProcessingRecord.STATUS_COMPLETED,
                failure_kind=failure_kind or '',
                completed_at=timezone.now(),
            )
        except DatabaseError as e:
            raise PersistenceError(f"Failed to record processing for document {document.id}: {e}") from e

    # -----------------------------
    # Quizzes
    # -----------------------------
    @staticmethod
    def list_quizzes(user_id, offset=0, limit=10):
        queryset = Quiz.objects.filter(owner_id=str(user_id)).select_related('document')
        return queryset.count(), list(queryset[offset:offset + limit])

    @staticmethod
    def get_owned_quiz(quiz_id, user_id) -> Quiz:
        return StudyMaterialGateway._get_owned(Quiz, quiz_id, user_id, "الاختبار غير موجود")

    @staticmethod
    def update_quiz(quiz: Quiz, data: dict) -> Quiz:
        """Apply `title`, `difficulty` and `questions` from an edit request."""
        questions = None
        if 'questions' in data:
            try:
                questions = questions_from_records(data['questions'])
            except ParseError as e:
                message = f"السؤال رقم {e.position} غير صالح" if e.position else "قائمة الأسئلة غير صالحة"
                raise ValidationError(message) from e

        if 'title' in data:
            title = str(data['title'] or '').strip()
            if not title:
                raise ValidationError('عنوان الاختبار مطلوب')
            quiz.title = title[:255]
        if 'difficulty' in data:
            quiz.difficulty = validate_difficulty(data['difficulty'])

        try:
            with transaction.atomic():
                quiz.save()
                if questions is not None:
                    quiz.questions.all().delete()
                    QuizQuestion.objects.bulk_create([
                        QuizQuestion(quiz=quiz, position=position, text=q.text,
                                     choices=q.choices, correct_answer=q.correct_answer)
                        for position, q in enumerate(questions)
                    ])
        except DatabaseError as e:
            raise PersistenceError(f"Failed to update quiz {quiz.id}: {e}") from e
        return quiz

    # -----------------------------
    # Flashcards
    # -----------------------------
    @staticmethod
    def list_flashcards(user_id, document_id=None, offset=0, limit=10):
        queryset = Flashcard.objects.filter(owner_id=str(user_id))
        if document_id:
            document = StudyMaterialGateway.get_owned_document(document_id, user_id)
            queryset = queryset.filter(document=document)
        return queryset.count(), list(queryset[offset:offset + limit])

    @staticmethod
    def get_owned_flashcard(flashcard_id, user_id) -> Flashcard:
        return StudyMaterialGateway._get_owned(Flashcard, flashcard_id, user_id, "البطاقة غير موجودة")

    @staticmethod
    def update_flashcard(flashcard: Flashcard, data: dict) -> Flashcard:
        for field in ('question', 'answer'):
            if field in data:
                value = str(data[field] or '').strip()
                if not value:
                    raise ValidationError('السؤال والجواب مطلوبان')
                setattr(flashcard, field, value)
        try:
            flashcard.save()
        except DatabaseError as e:
            raise PersistenceError(f"Failed to update flashcard {flashcard.id}: {e}") from e
        return flashcard

    # -----------------------------
    # Summaries
    # -----------------------------
    @staticmethod
    def list_summaries(user_id, document_id=None):
        queryset = Summary.objects.filter(owner_id=str(user_id))
        if document_id:
            document = StudyMaterialGateway.get_owned_document(document_id, user_id)
            queryset = queryset.filter(document=document)
        return list(queryset)

    @staticmethod
    def get_owned_summary(summary_id, user_id) -> Summary:
        return StudyMaterialGateway._get_owned(Summary, summary_id, user_id, "الملخص غير موجود")

    @staticmethod
    def delete(record):
        try:
            record.delete()
        except DatabaseError as e:
            raise PersistenceError(f"Failed to delete {type(record).__name__} {record.pk}: {e}") from e
