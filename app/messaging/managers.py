"""
QuerySets for messaging models.

Messages carry no conversation foreign key. A conversation's messages are
those exchanged between its two participants (either direction) with the
exact same item scope, where a missing item only matches a missing item.

Usage:
    Message.objects.for_conversation(conversation)
    Conversation.objects.for_pair(user_a.id, user_b.id, item_id)
    Conversation.objects.for_user(user).with_activity(user)
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from django.apps import apps
from django.db import models
from django.db.models import F, Func, IntegerField, OuterRef, Q, Subquery, UUIDField, Value
from django.db.models.functions import Coalesce

if TYPE_CHECKING:
    from messaging.models import Conversation


# Stands in for a missing item when item scopes are compared in SQL
NO_ITEM_SCOPE = Value(UUID(int=0), output_field=UUIDField())

# Message columns copied onto conversations by ConversationQuerySet.with_activity()
LATEST_MESSAGE_FIELDS = ("id", "from_user_id", "content", "is_read", "created_at")


def normalize_pair(user_a_id: UUID, user_b_id: UUID) -> tuple[UUID, UUID]:
    """Return the two ids in ascending order."""
    return (user_a_id, user_b_id) if user_a_id < user_b_id else (user_b_id, user_a_id)


def item_scope_q(item_id: UUID | None, field: str = "item_id") -> Q:
    """Exact item scope match. None matches only rows without an item."""
    if item_id is None:
        return Q(**{f"{field}__isnull": True})
    return Q(**{field: item_id})


class ConversationQuerySet(models.QuerySet):
    def for_pair(self, user_a_id, user_b_id, item_id=None):
        """Conversations for the unordered pair and exact item scope (0 or 1 rows)."""
        low, high = normalize_pair(user_a_id, user_b_id)
        return self.filter(
            item_scope_q(item_id),
            participant_low_id=low,
            participant_high_id=high,
        )

    def for_user(self, user):
        """Conversations the user takes part in, most recent activity first."""
        return self.filter(
            Q(participant_1=user) | Q(participant_2=user)
        ).order_by("-last_message_at", "-created_at", "-id")

    def with_activity(self, user):
        """
        Annotate unread_count for ``user`` and the latest message's fields.

        Messages have no conversation foreign key, so both are correlated
        subqueries over the pair (either direction) and exact item scope.
        Annotations: unread_count, latest_message_<field> for each of
        LATEST_MESSAGE_FIELDS (all None when the conversation is empty).
        """
        Message = apps.get_model("messaging", "Message")
        first, second = OuterRef("participant_1_id"), OuterRef("participant_2_id")
        scoped = Message.objects.annotate(
            scope=Coalesce("item_id", NO_ITEM_SCOPE, output_field=UUIDField())
        ).filter(
            Q(from_user_id=first, to_user_id=second)
            | Q(from_user_id=second, to_user_id=first),
            scope=Coalesce(OuterRef("item_id"), NO_ITEM_SCOPE, output_field=UUIDField()),
        )

        unread = (
            scoped.filter(to_user_id=user.pk, is_read=False)
            .order_by()
            .annotate(total=Func(F("id"), function="COUNT", output_field=IntegerField()))
            .values("total")
        )
        latest = scoped.order_by("-created_at", "-id")

        return self.annotate(
            unread_count=Coalesce(
                Subquery(unread, output_field=IntegerField()),
                Value(0),
                output_field=IntegerField(),
            ),
            **{
                f"latest_message_{field}": Subquery(latest.values(field)[:1])
                for field in LATEST_MESSAGE_FIELDS
            },
        )


class MessageQuerySet(models.QuerySet):
    def for_conversation(self, conversation: Conversation):
        """Messages of the conversation, oldest first."""
        first, second = conversation.participant_1_id, conversation.participant_2_id
        pair = Q(from_user_id=first, to_user_id=second) | Q(
            from_user_id=second, to_user_id=first
        )
        return self.filter(pair, item_scope_q(conversation.item_id)).order_by(
            "created_at", "id"
        )

    def unread_for(self, user):
        """Messages addressed to the user that are still unread."""
        return self.filter(to_user=user, is_read=False)
