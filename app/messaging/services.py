"""
Messaging service layer.

This module provides the business logic for direct messaging, covering
conversation resolution, message storage and read state.

Services:
    ConversationService: Find-or-create by pair and item scope, listing, access
    MessageService: Send, list, mark read, unread counts

Design Principles:
    - Services are stateless (use class methods)
    - Expected failures raise core.exceptions (ValidationError, NotFoundError,
      PermissionDeniedError); datastore failures surface as PersistenceError
    - A send stores the message and updates its conversation in one transaction
    - Realtime delivery is announced only after that transaction commits

Usage:
    from messaging.services import ConversationService, MessageService

    message = MessageService.send_message(
        sender=user,
        recipient_id=other_user.id,
        content="Hi! Is this still for sale?",
        item_id=item_id,
    )

    conversations = ConversationService.list_for_user(user)
    messages = MessageService.list_messages(conversations[0])
    MessageService.mark_read(conversations[0], user)
"""

from __future__ import annotations

import uuid
from functools import partial
from typing import TYPE_CHECKING

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import DateTimeField, F, Value
from django.db.models.functions import Greatest
from django.utils import timezone

from core.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from core.services import BaseService
from messaging.constants import ERROR_CODES, MESSAGE_CONFIG
from messaging.managers import normalize_pair
from messaging.models import Conversation, Message
from messaging.signals import message_created

if TYPE_CHECKING:
    from datetime import datetime

    from django.db.models import QuerySet

    from authentication.models import User


def _coerce_uuid(value, field: str, error_code: str, label: str) -> uuid.UUID:
    """Parse a UUID from user input or raise ValidationError for ``field``."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        raise ValidationError(
            f"{label} is not a valid identifier",
            error_code=error_code,
            details={field: [f"'{value}' is not a valid UUID."]},
        )


class ConversationService(BaseService):
    """
    Service for conversation resolution and access.

    Methods:
        get_or_create_for_pair: Open (or reuse) the thread for a pair and item
        touch_for_message: Upsert the conversation a new message belongs to
        find_for_pair: Look up the thread for a pair and item
        list_for_user: All threads of a user, most recent first
        get_for_participant: Fetch a thread, enforcing participation
    """

    @classmethod
    def get_or_create_for_pair(
        cls,
        user_a: User,
        user_b: User,
        item_id: uuid.UUID | None = None,
    ) -> tuple[Conversation, bool]:
        """
        Get or create the conversation between two users for an item scope.

        user_a becomes participant_1 if the row is created. An existing
        conversation is returned untouched (last_message_at is not bumped).

        Concurrent callers may both miss the lookup; the unique constraints
        let only one insert succeed and the other reads the winner's row.

        Returns:
            (conversation, created)

        Error codes:
            SAME_USER: Cannot open a conversation with yourself
        """
        if user_a.id == user_b.id:
            raise ValidationError(
                "Cannot start a conversation with yourself",
                error_code=ERROR_CODES.SAME_USER,
                details={"recipient_id": ["Recipient must be a different user."]},
            )

        with cls.atomic("opening conversation"):
            existing = cls.find_for_pair(user_a.id, user_b.id, item_id)
            if existing is not None:
                return existing, False

            try:
                with transaction.atomic():
                    conversation = cls._create(user_a.id, user_b.id, item_id, timezone.now())
            except IntegrityError:
                cls.get_logger().info(
                    f"Conversation for {user_a.id}/{user_b.id} created concurrently; "
                    f"using existing row"
                )
                return Conversation.objects.for_pair(user_a.id, user_b.id, item_id).get(), False

        return conversation, True

    @classmethod
    def touch_for_message(cls, message: Message) -> Conversation:
        """
        Record a new message on its conversation, creating it if needed.

        Must run inside the caller's transaction. last_message_at only moves
        forward: an older timestamp never overwrites a newer one.

        Args:
            message: The freshly stored message

        Returns:
            The conversation the message belongs to
        """
        scope = Conversation.objects.for_pair(
            message.from_user_id, message.to_user_id, message.item_id
        )

        if cls._advance(scope, message.created_at):
            return scope.get()

        try:
            with transaction.atomic():
                return cls._create(
                    message.from_user_id,
                    message.to_user_id,
                    message.item_id,
                    message.created_at,
                )
        except IntegrityError:
            # Another send created the row between our update and insert
            cls.get_logger().info(
                f"Conversation for message {message.id} created concurrently; retrying update"
            )
            cls._advance(scope, message.created_at)
            return scope.get()

    @classmethod
    def find_for_pair(
        cls,
        user_a_id: uuid.UUID,
        user_b_id: uuid.UUID,
        item_id: uuid.UUID | None = None,
    ) -> Conversation | None:
        """Return the conversation for the unordered pair and exact item scope, if any."""
        return Conversation.objects.for_pair(user_a_id, user_b_id, item_id).first()

    @classmethod
    def list_for_user(cls, user: User) -> QuerySet[Conversation]:
        """
        Return every conversation the user participates in.

        Ordered by last_message_at descending, then created_at and id
        descending so the order is stable for equal timestamps. Each row
        carries unread_count and latest_message_* annotations so listings
        need no per-conversation queries.
        """
        return Conversation.objects.for_user(user).with_activity(user).select_related(
            "participant_1__profile",
            "participant_2__profile",
        )

    @classmethod
    def get_for_participant(cls, conversation_id, user: User) -> Conversation:
        """
        Fetch a conversation the user takes part in.

        Raises:
            NotFoundError: Unknown (or malformed) conversation id
            PermissionDeniedError: User is not a participant
        """
        try:
            conversation = Conversation.objects.select_related(
                "participant_1__profile",
                "participant_2__profile",
            ).get(pk=uuid.UUID(str(conversation_id)))
        except (ValueError, Conversation.DoesNotExist):
            raise NotFoundError(
                "Conversation not found",
                error_code=ERROR_CODES.CONVERSATION_NOT_FOUND,
                details={"conversation_id": str(conversation_id)},
            )

        if not conversation.has_participant(user):
            raise PermissionDeniedError(
                "You are not a participant in this conversation",
                error_code=ERROR_CODES.NOT_PARTICIPANT,
            )

        return conversation

    @staticmethod
    def _advance(scope, timestamp: datetime) -> int:
        return scope.update(
            last_message_at=Greatest(
                F("last_message_at"), Value(timestamp, output_field=DateTimeField())
            ),
            updated_at=timezone.now(),
        )

    @classmethod
    def _create(cls, first_id, second_id, item_id, last_message_at) -> Conversation:
        low, high = normalize_pair(first_id, second_id)
        conversation = Conversation.objects.create(
            participant_1_id=first_id,
            participant_2_id=second_id,
            participant_low_id=low,
            participant_high_id=high,
            item_id=item_id,
            last_message_at=last_message_at,
        )
        cls.get_logger().info(
            f"Created conversation {conversation.id} between {first_id} and {second_id}"
            + (f" for item {item_id}" if item_id else "")
        )
        return conversation


class MessageService(BaseService):
    """
    Service for message operations.

    Methods:
        send_message: Validate, store and announce a message
        list_messages: Chronological history of a conversation
        mark_read: Flip the reader's unread messages in a conversation
        get_unread_count: Unread messages addressed to a user
        get_last_message: Most recent message of a conversation
    """

    @classmethod
    def send_message(
        cls,
        sender: User,
        recipient_id,
        content: str,
        item_id=None,
    ) -> Message:
        """
        Send a message, creating the conversation on first contact.

        The message insert and the conversation upsert share one
        transaction. message_created is sent only after it commits.

        Args:
            sender: Authenticated user sending the message
            recipient_id: UUID (or UUID string) of the recipient
            content: Message text; surrounding whitespace is stripped
            item_id: Optional UUID of the item the conversation is about

        Returns:
            The stored Message

        Raises:
            ValidationError: Bad input (see error codes)
            PersistenceError: Datastore unavailable; nothing was stored

        Error codes:
            INVALID_SENDER: Sender is anonymous or inactive
            EMPTY_CONTENT: Content missing or blank
            INVALID_CONTENT: Content contains a null character
            CONTENT_TOO_LONG: Content exceeds MESSAGE_CONFIG.MAX_CONTENT_LENGTH
            INVALID_RECIPIENT: Malformed, unknown or inactive recipient
            SAME_USER: Recipient is the sender
            INVALID_ITEM: item_id is not a UUID
        """
        if sender is None or not sender.is_authenticated or not sender.is_active:
            raise ValidationError(
                "Sender is not allowed to send messages",
                error_code=ERROR_CODES.INVALID_SENDER,
                details={"sender": ["An active, authenticated user is required."]},
            )

        text = content.strip() if isinstance(content, str) else ""
        if len(text) < MESSAGE_CONFIG.MIN_CONTENT_LENGTH:
            raise ValidationError(
                "Message content cannot be empty",
                error_code=ERROR_CODES.EMPTY_CONTENT,
                details={"content": ["This field may not be blank."]},
            )
        # PostgreSQL text columns reject NUL
        if "\x00" in text:
            raise ValidationError(
                "Message content contains invalid characters",
                error_code=ERROR_CODES.INVALID_CONTENT,
                details={"content": ["Null characters are not allowed."]},
            )
        if len(text) > MESSAGE_CONFIG.MAX_CONTENT_LENGTH:
            raise ValidationError(
                "Message content is too long",
                error_code=ERROR_CODES.CONTENT_TOO_LONG,
                details={
                    "content": [
                        f"Ensure this field has no more than "
                        f"{MESSAGE_CONFIG.MAX_CONTENT_LENGTH} characters."
                    ]
                },
            )

        if recipient_id in (None, ""):
            raise ValidationError(
                "Recipient is required",
                error_code=ERROR_CODES.INVALID_RECIPIENT,
                details={"recipient_id": ["This field is required."]},
            )
        recipient_uuid = _coerce_uuid(
            recipient_id, "recipient_id", ERROR_CODES.INVALID_RECIPIENT, "Recipient"
        )
        item_uuid = (
            None
            if item_id in (None, "")
            else _coerce_uuid(item_id, "item_id", ERROR_CODES.INVALID_ITEM, "Item")
        )

        if recipient_uuid == sender.id:
            raise ValidationError(
                "You cannot send a message to yourself",
                error_code=ERROR_CODES.SAME_USER,
                details={"recipient_id": ["Recipient must be a different user."]},
            )

        with cls.atomic("sending message"):
            recipient = (
                get_user_model()
                .objects.filter(pk=recipient_uuid, is_active=True)
                .first()
            )
            if recipient is None:
                raise ValidationError(
                    "Recipient does not exist",
                    error_code=ERROR_CODES.INVALID_RECIPIENT,
                    details={"recipient_id": ["No active user with this id."]},
                )

            message = Message.objects.create(
                from_user=sender,
                to_user=recipient,
                item_id=item_uuid,
                content=text,
                is_read=False,
            )
            conversation = ConversationService.touch_for_message(message)

            transaction.on_commit(
                partial(message_created.send, sender=Message, message=message)
            )

        cls.get_logger().debug(
            f"User {sender.id} sent message {message.id} to {recipient.id} "
            f"in conversation {conversation.id}"
        )

        return message

    @classmethod
    def list_messages(cls, conversation: Conversation) -> QuerySet[Message]:
        """
        Return the conversation's messages, oldest first.

        Includes both directions between the participants, restricted to
        the conversation's exact item scope. Sender and recipient profiles
        are joined for the expanded representation.
        """
        return Message.objects.for_conversation(conversation).select_related(
            "from_user__profile",
            "to_user__profile",
        )

    @classmethod
    def mark_read(cls, conversation: Conversation, reader: User) -> int:
        """
        Mark the reader's unread messages in this conversation as read.

        Only messages addressed to the reader within the conversation's pair
        and item scope change. Calling again returns 0.

        Returns:
            Number of messages that went from unread to read

        Raises:
            PermissionDeniedError: Reader is not a participant
        """
        if not conversation.has_participant(reader):
            raise PermissionDeniedError(
                "You are not a participant in this conversation",
                error_code=ERROR_CODES.NOT_PARTICIPANT,
            )

        with cls.atomic("marking messages read"):
            updated = (
                Message.objects.for_conversation(conversation)
                .unread_for(reader)
                .update(is_read=True, updated_at=timezone.now())
            )

        if updated:
            cls.get_logger().debug(
                f"User {reader.id} read {updated} message(s) in conversation {conversation.id}"
            )

        return updated

    @classmethod
    def get_unread_count(cls, conversation: Conversation, user: User) -> int:
        """Count unread messages addressed to ``user`` in the conversation."""
        return Message.objects.for_conversation(conversation).unread_for(user).count()

    @classmethod
    def get_last_message(cls, conversation: Conversation) -> Message | None:
        return (
            Message.objects.for_conversation(conversation)
            .order_by("-created_at", "-id")
            .first()
        )
