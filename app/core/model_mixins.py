"""
Model mixins providing reusable functionality for Django models.

Available Mixins:
    UUIDPrimaryKeyMixin: Use UUID as primary key

Usage:
    from core.models import BaseModel
    from core.model_mixins import UUIDPrimaryKeyMixin

    class Message(UUIDPrimaryKeyMixin, BaseModel):
        content = models.TextField()

Note:
    - Always list mixins before BaseModel in inheritance
    - Mixins are abstract and don't create database tables
"""

from __future__ import annotations

import uuid

from django.db import models


class UUIDPrimaryKeyMixin(models.Model):
    """
    Use UUID as primary key instead of auto-increment integer.

    Identifiers are non-guessable and safe to expose in URLs and
    WebSocket payloads (they don't reveal record count or order).

    Fields:
        id: UUIDField as primary key (auto-generated)

    Note:
        UUIDs carry no ordering meaning. Chronological queries must
        order by created_at first and use id only as a tie-breaker.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for this record",
    )

    class Meta:
        abstract = True
