"""
Messaging models.

This module defines the data models for direct messaging:
- Conversation: Thread between two users, optionally about one item
- Message: A single text message from one user to another

Conversation identity:
    A conversation is identified by the unordered pair of its participants
    plus its item scope. participant_low/participant_high hold the pair in
    ascending id order so (A, B) and (B, A) resolve to the same row.
    participant_1 and participant_2 keep who opened the thread.

    Items live in the catalog service; only their UUID is stored here.
    A conversation without an item is its own scope, distinct from every
    item-scoped conversation between the same users.

Messages:
    Messages are not linked to a conversation row. The conversation's
    messages are derived from (pair, item scope); see managers.py.

Related files:
    - managers.py: Pair normalization and scope querysets
    - services.py: Find-or-create and read-state logic
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.db.models import F, Q

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel
from messaging.managers import ConversationQuerySet, MessageQuerySet


class Conversation(UUIDPrimaryKeyMixin, BaseModel):
    """
    A thread between two users, optionally scoped to a marketplace item.

    Created implicitly by the first message between the pair for the item
    scope. Only last_message_at changes afterwards.

    Fields:
        participant_1: User who sent the first message
        participant_2: User who received the first message
        participant_low: Participant with the lower id
        participant_high: Participant with the higher id
        item_id: Optional catalog item the thread is about
        last_message_at: created_at of the most recent message

    Constraints:
        - participant_low_id < participant_high_id
        - One conversation per (pair, item) when item_id is set
        - One conversation per pair when item_id is NULL
    """

    participant_1 = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="conversations_started",
        help_text="User who sent the first message",
    )
    participant_2 = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="conversations_received",
        help_text="User who received the first message",
    )

    participant_low = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="+",
        help_text="Participant with the lower id (canonical pair order)",
    )
    participant_high = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="+",
        help_text="Participant with the higher id (canonical pair order)",
    )

    item_id = models.UUIDField(
        null=True,
        blank=True,
        db_index=True,
        help_text="Catalog item this conversation is about, if any",
    )

    last_message_at = models.DateTimeField(
        db_index=True,
        help_text="Timestamp of the most recent message",
    )

    objects = ConversationQuerySet.as_manager()

    class Meta:
        db_table = "messaging_conversation"
        ordering = ["-last_message_at", "-created_at", "-id"]
        constraints = [
            models.CheckConstraint(
                condition=Q(participant_low_id__lt=F("participant_high_id")),
                name="messaging_conversation_low_lt_high",
            ),
            models.UniqueConstraint(
                fields=["participant_low", "participant_high", "item_id"],
                condition=Q(item_id__isnull=False),
                name="messaging_conversation_unique_pair_item",
            ),
            models.UniqueConstraint(
                fields=["participant_low", "participant_high"],
                condition=Q(item_id__isnull=True),
                name="messaging_conversation_unique_pair_no_item",
            ),
        ]
        indexes = [
            models.Index(
                fields=["participant_1", "-last_message_at"],
                name="messaging_conv_p1_recent_idx",
            ),
            models.Index(
                fields=["participant_2", "-last_message_at"],
                name="messaging_conv_p2_recent_idx",
            ),
        ]

    def __str__(self) -> str:
        scope = f" about {self.item_id}" if self.item_id else ""
        return f"Conversation({self.participant_1_id} <-> {self.participant_2_id}{scope})"

    def has_participant(self, user) -> bool:
        """Return True if the user is one of the two participants."""
        user_id = getattr(user, "id", user)
        return user_id in (self.participant_1_id, self.participant_2_id)

    def other_participant_id(self, user):
        """Return the id of the participant who is not ``user``."""
        user_id = getattr(user, "id", user)
        if user_id == self.participant_1_id:
            return self.participant_2_id
        return self.participant_1_id

    def get_other_participant(self, user):
        if getattr(user, "id", user) == self.participant_1_id:
            return self.participant_2
        return self.participant_1


class Message(UUIDPrimaryKeyMixin, BaseModel):
    """
    A text message from one user to another.

    Content is stored trimmed and never edited. is_read flips from False
    to True once and never back.

    Fields:
        from_user: Sender
        to_user: Recipient
        item_id: Item scope of the conversation the message belongs to
        content: Message text
        is_read: Whether the recipient has read the message
    """

    from_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="messages_sent",
        help_text="User who sent the message",
    )
    to_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="messages_received",
        help_text="User the message is addressed to",
    )

    item_id = models.UUIDField(
        null=True,
        blank=True,
        help_text="Catalog item the message is about, if any",
    )

    content = models.TextField(
        help_text="Message text (trimmed, never empty)",
    )

    is_read = models.BooleanField(
        default=False,
        help_text="Whether the recipient has read this message",
    )

    objects = MessageQuerySet.as_manager()

    class Meta:
        db_table = "messaging_message"
        ordering = ["created_at", "id"]
        constraints = [
            models.CheckConstraint(
                condition=~Q(from_user=F("to_user")),
                name="messaging_message_not_self",
            ),
        ]
        indexes = [
            models.Index(
                fields=["from_user", "to_user", "created_at"],
                name="messaging_msg_pair_time_idx",
            ),
            models.Index(
                fields=["to_user", "is_read"],
                name="messaging_msg_unread_idx",
            ),
        ]

    def __str__(self) -> str:
        preview = self.content[:50] + "..." if len(self.content) > 50 else self.content
        return f"{self.from_user_id} -> {self.to_user_id}: {preview}"
