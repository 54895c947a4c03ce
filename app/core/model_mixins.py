"""
Model mixins providing reusable functionality for Django models.

Available Mixins:
    UUIDPrimaryKeyMixin: Use UUID as primary key
    MetadataMixin: Flexible JSON metadata storage

Usage:
    from core.models import BaseModel
    from core.model_mixins import MetadataMixin, UUIDPrimaryKeyMixin

    class PurchaseRecord(UUIDPrimaryKeyMixin, MetadataMixin, BaseModel):
        ...

Note:
    - Always list mixins before BaseModel in inheritance
    - Mixins are abstract and don't create database tables
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from django.db import models

if TYPE_CHECKING:
    from typing import Any


class UUIDPrimaryKeyMixin(models.Model):
    """
    Use UUID as primary key instead of auto-increment integer.

    Account, credential and purchase identifiers are exposed to API
    clients, so they must not reveal record counts or ordering.

    Fields:
        id: UUIDField as primary key (auto-generated)
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for this record",
    )

    class Meta:
        abstract = True


class MetadataMixin(models.Model):
    """
    Flexible JSON metadata storage.

    Fields:
        metadata: JSONField holding arbitrary key/value data

    Usage:
        record.set_metadata("channel", "mobile")
        record.get_metadata("channel")  # "mobile"
    """

    metadata = models.JSONField(
        default=dict,
        blank=True,
        help_text="Arbitrary structured data for extensibility",
    )

    class Meta:
        abstract = True

    def get_metadata(self, key: str, default: Any = None) -> Any:
        """Return a metadata value, or ``default`` when the key is absent."""
        return (self.metadata or {}).get(key, default)

    def set_metadata(self, key: str, value: Any) -> None:
        """
        Set a metadata value in memory.

        Does not save; callers persist with ``update_fields=["metadata", ...]``.
        """
        if self.metadata is None:
            self.metadata = {}
        self.metadata[key] = value
