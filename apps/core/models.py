"""
Abstract base models for NexCart applications
"""
import uuid
from django.db import models


class BaseModel(models.Model):
    """
    Abstract base model with common fields for all entities.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ['-created_at']

    def __str__(self):
        return str(self.id)


class SoftDeleteQuerySet(models.QuerySet):
    """
    Queryset for soft-deletable records.

    Reads opt in to hidden rows explicitly; the default manager is never
    rewritten to filter them.
    """

    def visible(self, include_deleted: bool = False):
        if include_deleted:
            return self
        return self.filter(is_deleted=False)


class SoftDeleteModel(BaseModel):
    """
    Abstract model with a soft-delete flag.
    """
    is_deleted = models.BooleanField(default=False, db_index=True)

    objects = SoftDeleteQuerySet.as_manager()

    class Meta(BaseModel.Meta):
        abstract = True
