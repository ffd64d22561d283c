# materials/models.py
from django.db import models
from core.models import OwnedModel


class Document(OwnedModel):
    """An uploaded study document. Only the display name changes after upload."""
    name = models.CharField(max_length=255)
    file = models.FileField(upload_to='uploads/%Y/%m/', blank=True)
    url = models.URLField(max_length=1024, blank=True, help_text="Storage URL when the file lives outside MEDIA_ROOT.")
    size = models.PositiveBigIntegerField(default=0, help_text="Size in bytes")
    mime_type = models.CharField(max_length=150, blank=True)

    class Meta:
        db_table = 'uploaded_files'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.name} ({self.owner_id})"

    @property
    def uploaded_at(self):
        return self.created_at

    @property
    def storage_url(self) -> str:
        if self.url:
            return self.url
        if self.file:
            return self.file.url
        return ''

    def to_dict(self):
        return {
            'id': str(self.id),
            'name': self.name,
            'url': self.storage_url,
            'size': self.size,
            'type': self.mime_type,
            'uploadedAt': self.created_at.isoformat(),
        }
