"""
Serializers for messaging API.

Serializer Hierarchy:
    MessageSerializer: Flat message (ids only)
    MessageDetailSerializer: Message with sender/recipient expanded
    MessageCreateSerializer: Send request body
    ConversationSerializer: Conversation with per-user computed fields

Design Decisions:
    - Read and write serializers are separate for clarity
    - MessageCreateSerializer checks shape only; MessageService owns the
      content/recipient/item rules so HTTP and WebSocket report the same
      error codes
    - Computed fields use SerializerMethodField and the request user
"""

from __future__ import annotations

from rest_framework import serializers

from authentication.serializers import UserSummarySerializer
from messaging.constants import MESSAGE_CONFIG
from messaging.managers import LATEST_MESSAGE_FIELDS
from messaging.models import Conversation, Message
from messaging.services import MessageService


# =============================================================================
# Message Serializers
# =============================================================================


class MessageSerializer(serializers.ModelSerializer):
    """Read serializer for a message, participants as ids."""

    from_user_id = serializers.UUIDField(read_only=True)
    to_user_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = Message
        fields = [
            "id",
            "from_user_id",
            "to_user_id",
            "item_id",
            "content",
            "is_read",
            "created_at",
        ]
        read_only_fields = fields


class MessageDetailSerializer(MessageSerializer):
    """
    Message with sender and recipient expanded.

    Used by the conversation history endpoint. Expects from_user/to_user
    profiles to be select_related by the caller.
    """

    from_user = UserSummarySerializer(read_only=True)
    to_user = UserSummarySerializer(read_only=True)

    class Meta(MessageSerializer.Meta):
        fields = MessageSerializer.Meta.fields + ["from_user", "to_user"]
        read_only_fields = fields


class MessagePreviewSerializer(serializers.ModelSerializer):
    """Minimal message for conversation list previews."""

    from_user_id = serializers.UUIDField(read_only=True)
    content = serializers.SerializerMethodField()

    class Meta:
        model = Message
        fields = ["id", "from_user_id", "content", "is_read", "created_at"]
        read_only_fields = fields

    def get_content(self, obj: Message) -> str:
        limit = MESSAGE_CONFIG.PREVIEW_LENGTH
        return obj.content if len(obj.content) <= limit else obj.content[:limit] + "..."


class MessageCreateSerializer(serializers.Serializer):
    """
    Serializer for sending messages.

    Fields are accepted as strings; identifier and content rules are
    enforced by MessageService.send_message().
    """

    recipient_id = serializers.CharField(
        required=False,
        allow_blank=True,
        help_text="UUID of the user receiving the message",
    )
    content = serializers.CharField(
        required=False,
        allow_blank=True,
        trim_whitespace=False,
        default="",
        help_text=f"Message text (max {MESSAGE_CONFIG.MAX_CONTENT_LENGTH:,} characters after trimming)",
    )
    item_id = serializers.CharField(
        required=False,
        allow_blank=True,
        allow_null=True,
        default=None,
        help_text="UUID of the item the conversation is about (optional)",
    )

    # camelCase spellings also accepted; the snake_case key wins if both are sent
    KEY_ALIASES = {"recipientId": "recipient_id", "itemId": "item_id"}

    def to_internal_value(self, data):
        if hasattr(data, "items"):
            data = dict(data.items())
            for alias, field in self.KEY_ALIASES.items():
                if alias in data:
                    data.setdefault(field, data.pop(alias))
        return super().to_internal_value(data)


# =============================================================================
# Conversation Serializers
# =============================================================================


class ConversationSerializer(serializers.ModelSerializer):
    """
    Serializer for conversations.

    Includes computed fields for the requesting user:
    - other_participant: The user on the other side
    - unread_count: Messages addressed to the requester not yet read
    - last_message: Preview of the most recent message
    """

    participant_1_id = serializers.UUIDField(read_only=True)
    participant_2_id = serializers.UUIDField(read_only=True)
    other_participant = serializers.SerializerMethodField(
        help_text="The other user in the conversation"
    )
    unread_count = serializers.SerializerMethodField(
        help_text="Number of unread messages addressed to you"
    )
    last_message = serializers.SerializerMethodField(
        help_text="Most recent message preview"
    )

    class Meta:
        model = Conversation
        fields = [
            "id",
            "participant_1_id",
            "participant_2_id",
            "item_id",
            "other_participant",
            "unread_count",
            "last_message",
            "last_message_at",
            "created_at",
        ]
        read_only_fields = fields

    def _request_user(self):
        request = self.context.get("request")
        if request is None or not request.user.is_authenticated:
            return None
        return request.user

    def get_other_participant(self, obj: Conversation) -> dict | None:
        user = self._request_user()
        if user is None:
            return None
        return UserSummarySerializer(obj.get_other_participant(user)).data

    def get_unread_count(self, obj: Conversation) -> int:
        user = self._request_user()
        if user is None:
            return 0
        # Set by ConversationService.list_for_user() for the requesting user
        if hasattr(obj, "unread_count"):
            return obj.unread_count
        return MessageService.get_unread_count(obj, user)

    def get_last_message(self, obj: Conversation) -> dict | None:
        if hasattr(obj, "latest_message_id"):
            last_message = _annotated_last_message(obj)
        else:
            last_message = MessageService.get_last_message(obj)
        if last_message is None:
            return None
        return MessagePreviewSerializer(last_message).data


def _annotated_last_message(conversation: Conversation) -> Message | None:
    """Build an unsaved Message from the latest_message_* annotations."""
    if conversation.latest_message_id is None:
        return None
    return Message(
        **{
            field: getattr(conversation, f"latest_message_{field}")
            for field in LATEST_MESSAGE_FIELDS
        }
    )
