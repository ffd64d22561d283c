# materials/services.py
import logging
import uuid

from django.conf import settings
from django.db import DatabaseError, transaction

from core.exceptions import NotFoundError, OwnershipError, PersistenceError, ValidationError
from .extraction import guess_mime_type, normalize_mime_type
from .models import Document

logger = logging.getLogger(__name__)


class MaterialService:
    """
    A service class for the business logic around uploaded documents:
    validation on upload, ownership lookups, rename and delete.
    """

    @staticmethod
    def get_owned_document(document_id, user_id) -> Document:
        """
        Fetch a document for the acting user.

        Raises:
            NotFoundError: no such document (or a malformed id).
            OwnershipError: the document belongs to someone else.
        """
        try:
            document_uuid = uuid.UUID(str(document_id))
        except (TypeError, ValueError):
            raise NotFoundError(f"Malformed document id {document_id!r}",
                                public_message="الملف غير موجود")

        document = Document.objects.filter(pk=document_uuid).first()
        if document is None:
            raise NotFoundError(f"Document {document_id} not found", public_message="الملف غير موجود")
        if not document.is_owned_by(user_id):
            raise OwnershipError(f"User {user_id} does not own document {document_id}")
        return document

    @staticmethod
    def list_documents(user_id):
        return Document.objects.filter(owner_id=str(user_id))

    @staticmethod
    def upload_document(file, user_id) -> Document:
        """
        Store an uploaded file and create its Document row.

        Args:
            file: The Django UploadedFile object.
            user_id: Owner id from the auth provider.
        """
        if file.size > settings.MAX_UPLOAD_SIZE:
            raise ValidationError('حجم الملف كبير جدًا (الحد الأقصى 10 ميجابايت)')

        mime_type = normalize_mime_type(getattr(file, 'content_type', ''))
        if not mime_type or mime_type == 'application/octet-stream':
            mime_type = guess_mime_type(file.name)
        if mime_type not in settings.ALLOWED_UPLOAD_TYPES and not mime_type.startswith('image/'):
            raise ValidationError('نوع الملف غير مدعوم')

        try:
            document = Document.objects.create(
                owner_id=str(user_id),
                name=file.name[:255],
                file=file,
                size=file.size,
                mime_type=mime_type,
            )
        except DatabaseError as e:
            raise PersistenceError(f"Failed to save document {file.name}: {e}") from e

        logger.info(f"Uploaded document {document.id} ({mime_type}, {file.size} bytes) for user {user_id}")
        return document

    @staticmethod
    def rename_document(document: Document, name: str) -> Document:
        name = (name or '').strip()
        if not name:
            raise ValidationError('اسم الملف مطلوب')
        document.name = name[:255]
        try:
            document.save(update_fields=['name', 'updated_at'])
        except DatabaseError as e:
            raise PersistenceError(f"Failed to rename document {document.id}: {e}") from e
        return document

    @staticmethod
    def delete_document(document: Document):
        """Delete the row (derived artifacts cascade) and then the stored file."""
        stored_file = document.file.name if document.file else None
        try:
            with transaction.atomic():
                document.delete()
        except DatabaseError as e:
            raise PersistenceError(f"Failed to delete document {document.pk}: {e}") from e

        if stored_file:
            try:
                document.file.storage.delete(stored_file)
            except OSError as e:
                # the row is gone; an orphaned blob is only worth a warning
                logger.warning(f"Could not delete stored file {stored_file}: {e}")
