# core/models.py
from django.db import models
import uuid

# Every Lammah table inherits from this. Records get a UUID primary key
# generated in Python, so an id is known before the row is written.
class BaseModel(models.Model):
    """
    An abstract base class model that provides UUID primary key,
    created_at, and updated_at fields.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class OwnedModel(BaseModel):
    """
    Base for rows that belong to a user of the external auth provider.
    Users are not modelled locally; only their opaque id is stored.
    """
    owner_id = models.CharField(max_length=64, db_column='user_id', db_index=True)

    class Meta:
        abstract = True

    def is_owned_by(self, user_id) -> bool:
        return bool(user_id) and self.owner_id == str(user_id)
