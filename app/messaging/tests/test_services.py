"""
Tests for the messaging service layer.

This module tests:
- ConversationService: Find-or-create by pair and item scope, access checks
- MessageService: Send, list, mark read, unread counts

Test Organization:
    - Each service method has its own test class
    - Test names follow: test_<scenario>_<expected_outcome>

Testing Philosophy:
    Tests assert on observable behavior: raised exceptions and their error
    codes, rows in the database, and the commit-time dispatch of
    message_created.
"""

import uuid
from datetime import timedelta

import pytest
from django.db import DatabaseError

from authentication.tests.factories import UserFactory
from core.exceptions import (
    NotFoundError,
    PermissionDeniedError,
    PersistenceError,
    ValidationError,
)
from messaging.constants import ERROR_CODES, MESSAGE_CONFIG
from messaging.models import Conversation, Message
from messaging.services import ConversationService, MessageService
from messaging.tests.factories import ConversationFactory, MessageFactory


# =============================================================================
# TestSendMessage
# =============================================================================


class TestSendMessage:
    """
    Tests for MessageService.send_message().

    Verifies:
    - First contact creates exactly one message and one conversation
    - Replies reuse the conversation and advance last_message_at
    - Item scope separates conversations between the same pair
    - Invalid input raises ValidationError and stores nothing
    """

    def test_first_message_creates_conversation(self, db, buyer, seller):
        message = MessageService.send_message(buyer, seller.id, "Is this available?")

        assert Message.objects.count() == 1
        assert message.from_user == buyer
        assert message.to_user == seller
        assert message.is_read is False

        conversation = Conversation.objects.get()
        assert conversation.participant_1 == buyer
        assert conversation.participant_2 == seller
        assert conversation.item_id is None
        assert conversation.last_message_at == message.created_at

    def test_reply_reuses_conversation(self, db, buyer, seller):
        MessageService.send_message(buyer, seller.id, "Is this available?")
        reply = MessageService.send_message(seller, buyer.id, "Yes, still available")

        assert Message.objects.count() == 2
        conversation = Conversation.objects.get()
        # Initiator stays participant_1
        assert conversation.participant_1 == buyer
        assert conversation.last_message_at == reply.created_at

    def test_accepts_recipient_id_as_string(self, db, buyer, seller):
        message = MessageService.send_message(buyer, str(seller.id), "Hi")

        assert message.to_user == seller

    def test_content_is_trimmed(self, db, buyer, seller):
        message = MessageService.send_message(buyer, seller.id, "  Still for sale?  \n")

        assert message.content == "Still for sale?"

    def test_item_scope_creates_separate_conversations(self, db, buyer, seller):
        first_item, second_item = uuid.uuid4(), uuid.uuid4()

        MessageService.send_message(buyer, seller.id, "About the bike", item_id=first_item)
        MessageService.send_message(buyer, seller.id, "About the desk", item_id=second_item)
        MessageService.send_message(buyer, seller.id, "Unrelated")
        MessageService.send_message(seller, buyer.id, "Bike reply", item_id=str(first_item))

        assert Conversation.objects.count() == 3
        assert Message.objects.count() == 4
        assert Conversation.objects.filter(item_id=first_item).count() == 1

    def test_empty_content_fails(self, db, buyer, seller):
        with pytest.raises(ValidationError) as exc_info:
            MessageService.send_message(buyer, seller.id, "")

        assert exc_info.value.error_code == ERROR_CODES.EMPTY_CONTENT
        assert Message.objects.count() == 0
        assert Conversation.objects.count() == 0

    @pytest.mark.parametrize("content", ["   ", "\n\t", None])
    def test_blank_content_fails(self, db, buyer, seller, content):
        with pytest.raises(ValidationError) as exc_info:
            MessageService.send_message(buyer, seller.id, content)

        assert exc_info.value.error_code == ERROR_CODES.EMPTY_CONTENT

    def test_null_character_in_content_fails(self, db, buyer, seller):
        with pytest.raises(ValidationError) as exc_info:
            MessageService.send_message(buyer, seller.id, "hi\x00")

        assert exc_info.value.error_code == ERROR_CODES.INVALID_CONTENT
        assert Message.objects.count() == 0
        assert Conversation.objects.count() == 0

    def test_content_at_limit_accepted(self, db, buyer, seller):
        content = "a" * MESSAGE_CONFIG.MAX_CONTENT_LENGTH

        message = MessageService.send_message(buyer, seller.id, content)

        assert len(message.content) == MESSAGE_CONFIG.MAX_CONTENT_LENGTH

    def test_content_over_limit_fails(self, db, buyer, seller):
        content = "a" * (MESSAGE_CONFIG.MAX_CONTENT_LENGTH + 1)

        with pytest.raises(ValidationError) as exc_info:
            MessageService.send_message(buyer, seller.id, content)

        assert exc_info.value.error_code == ERROR_CODES.CONTENT_TOO_LONG
        assert Message.objects.count() == 0

    def test_message_to_self_fails(self, db, buyer):
        with pytest.raises(ValidationError) as exc_info:
            MessageService.send_message(buyer, buyer.id, "hello")

        assert exc_info.value.error_code == ERROR_CODES.SAME_USER
        assert Message.objects.count() == 0
        assert Conversation.objects.count() == 0

    @pytest.mark.parametrize("recipient_id", [None, "", "not-a-uuid"])
    def test_malformed_recipient_fails(self, db, buyer, recipient_id):
        with pytest.raises(ValidationError) as exc_info:
            MessageService.send_message(buyer, recipient_id, "hello")

        assert exc_info.value.error_code == ERROR_CODES.INVALID_RECIPIENT

    def test_unknown_recipient_fails(self, db, buyer):
        with pytest.raises(ValidationError) as exc_info:
            MessageService.send_message(buyer, uuid.uuid4(), "hello")

        assert exc_info.value.error_code == ERROR_CODES.INVALID_RECIPIENT
        assert Message.objects.count() == 0

    def test_inactive_recipient_fails(self, db, buyer):
        inactive = UserFactory(is_active=False)

        with pytest.raises(ValidationError) as exc_info:
            MessageService.send_message(buyer, inactive.id, "hello")

        assert exc_info.value.error_code == ERROR_CODES.INVALID_RECIPIENT

    def test_inactive_sender_fails(self, db, seller):
        sender = UserFactory(is_active=False)

        with pytest.raises(ValidationError) as exc_info:
            MessageService.send_message(sender, seller.id, "hello")

        assert exc_info.value.error_code == ERROR_CODES.INVALID_SENDER

    def test_malformed_item_fails(self, db, buyer, seller):
        with pytest.raises(ValidationError) as exc_info:
            MessageService.send_message(buyer, seller.id, "hello", item_id="bike-42")

        assert exc_info.value.error_code == ERROR_CODES.INVALID_ITEM
        assert exc_info.value.details == {"item_id": ["'bike-42' is not a valid UUID."]}

    def test_database_failure_raises_persistence_error(self, db, buyer, seller, mocker):
        mocker.patch.object(
            Message.objects, "create", side_effect=DatabaseError("connection lost")
        )

        with pytest.raises(PersistenceError) as exc_info:
            MessageService.send_message(buyer, seller.id, "hello")

        assert exc_info.value.status_code == 503
        assert Conversation.objects.count() == 0

    def test_failed_conversation_update_rolls_back_message(self, db, buyer, seller, mocker):
        mocker.patch.object(
            ConversationService,
            "touch_for_message",
            side_effect=DatabaseError("deadlock detected"),
        )

        with pytest.raises(PersistenceError):
            MessageService.send_message(buyer, seller.id, "hello")

        assert Message.objects.count() == 0


# =============================================================================
# TestSendMessageDispatch
# =============================================================================


class TestSendMessageDispatch:
    """
    Tests for the commit-time realtime hand-off.

    Verifies:
    - Nothing is queued before the transaction commits
    - Exactly one delivery is queued per stored message
    - Broker failures never surface to the sender
    """

    def test_nothing_queued_before_commit(
        self, db, buyer, seller, mocker, django_capture_on_commit_callbacks
    ):
        apply_async = mocker.patch("messaging.tasks.deliver_message_created.apply_async")

        with django_capture_on_commit_callbacks(execute=False) as callbacks:
            MessageService.send_message(buyer, seller.id, "hello")

        assert len(callbacks) == 1
        apply_async.assert_not_called()

    def test_delivery_queued_after_commit(
        self, db, buyer, seller, mocker, django_capture_on_commit_callbacks
    ):
        apply_async = mocker.patch("messaging.tasks.deliver_message_created.apply_async")

        with django_capture_on_commit_callbacks(execute=True):
            message = MessageService.send_message(buyer, seller.id, "hello")

        apply_async.assert_called_once()
        payload = apply_async.call_args.kwargs["args"][0]
        assert payload["id"] == str(message.id)
        assert payload["to_user_id"] == str(seller.id)
        assert apply_async.call_args.kwargs["retry"] is False

    def test_failed_send_queues_nothing(self, db, buyer, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            with pytest.raises(ValidationError):
                MessageService.send_message(buyer, buyer.id, "hello")

        assert callbacks == []

    def test_broker_failure_does_not_fail_send(
        self, db, buyer, seller, mocker, django_capture_on_commit_callbacks, caplog
    ):
        mocker.patch(
            "messaging.tasks.deliver_message_created.apply_async",
            side_effect=ConnectionError("broker down"),
        )

        with django_capture_on_commit_callbacks(execute=True):
            message = MessageService.send_message(buyer, seller.id, "hello")

        assert Message.objects.filter(pk=message.pk).exists()
        assert "Could not queue realtime delivery" in caplog.text


# =============================================================================
# TestConversationResolution
# =============================================================================


class TestGetOrCreateForPair:
    """Tests for ConversationService.get_or_create_for_pair()."""

    def test_creates_new_conversation(self, db, buyer, seller):
        conversation, created = ConversationService.get_or_create_for_pair(buyer, seller)

        assert created is True
        assert conversation.participant_1 == buyer
        assert conversation.participant_2 == seller

    def test_returns_existing_regardless_of_order(self, db, buyer, seller):
        first, _ = ConversationService.get_or_create_for_pair(buyer, seller)
        second, created = ConversationService.get_or_create_for_pair(seller, buyer)

        assert created is False
        assert second.id == first.id
        assert Conversation.objects.count() == 1

    def test_item_scopes_are_distinct(self, db, buyer, seller, item_id):
        plain, _ = ConversationService.get_or_create_for_pair(buyer, seller)
        scoped, created = ConversationService.get_or_create_for_pair(buyer, seller, item_id)

        assert created is True
        assert plain.id != scoped.id

    def test_same_user_fails(self, db, buyer):
        with pytest.raises(ValidationError) as exc_info:
            ConversationService.get_or_create_for_pair(buyer, buyer)

        assert exc_info.value.error_code == ERROR_CODES.SAME_USER

    def test_concurrent_insert_returns_winner(self, db, buyer, seller, mocker):
        winner = ConversationFactory(participant_1=seller, participant_2=buyer)
        # Simulate losing the race: lookup misses, insert hits the constraint
        mocker.patch.object(ConversationService, "find_for_pair", return_value=None)

        conversation, created = ConversationService.get_or_create_for_pair(buyer, seller)

        assert created is False
        assert conversation.id == winner.id
        assert Conversation.objects.count() == 1


class TestTouchForMessage:
    """Tests for ConversationService.touch_for_message()."""

    def test_older_message_does_not_move_last_message_at_back(self, db, buyer, seller):
        latest = MessageService.send_message(buyer, seller.id, "newest")
        stale = MessageFactory(from_user=seller, to_user=buyer)
        Message.objects.filter(pk=stale.pk).update(
            created_at=latest.created_at - timedelta(minutes=5)
        )
        stale.refresh_from_db()

        conversation = ConversationService.touch_for_message(stale)

        assert conversation.last_message_at == latest.created_at

    def test_newer_message_advances_last_message_at(self, db, buyer, seller):
        conversation = ConversationFactory(
            participant_1=buyer,
            participant_2=seller,
            last_message_at=buyer.date_joined - timedelta(days=1),
        )
        message = MessageFactory(from_user=seller, to_user=buyer)

        touched = ConversationService.touch_for_message(message)

        assert touched.id == conversation.id
        assert touched.last_message_at == message.created_at

    def test_concurrent_create_retries_update(self, db, buyer, seller, mocker):
        existing = ConversationFactory(
            participant_1=buyer,
            participant_2=seller,
            last_message_at=buyer.date_joined - timedelta(days=1),
        )
        message = MessageFactory(from_user=buyer, to_user=seller)

        real_advance = ConversationService._advance
        calls = []

        def advance_missing_first(scope, timestamp):
            calls.append(timestamp)
            if len(calls) == 1:
                return 0
            return real_advance(scope, timestamp)

        mocker.patch.object(
            ConversationService, "_advance", side_effect=advance_missing_first
        )

        conversation = ConversationService.touch_for_message(message)

        assert len(calls) == 2
        assert conversation.id == existing.id
        assert conversation.last_message_at == message.created_at
        assert Conversation.objects.count() == 1


class TestConversationLookup:
    """Tests for list_for_user(), find_for_pair() and get_for_participant()."""

    def test_list_for_user_most_recent_first(self, db, buyer, seller, outsider):
        MessageService.send_message(buyer, seller.id, "first")
        MessageService.send_message(outsider, buyer.id, "second")

        conversations = list(ConversationService.list_for_user(buyer))

        assert [c.participant_1 for c in conversations] == [outsider, buyer]

    def test_list_for_user_excludes_other_pairs(self, db, buyer, seller, outsider):
        MessageService.send_message(buyer, seller.id, "hello")

        assert list(ConversationService.list_for_user(outsider)) == []

    def test_find_for_pair_symmetric(self, db, buyer, seller):
        MessageService.send_message(buyer, seller.id, "hello")

        assert ConversationService.find_for_pair(seller.id, buyer.id) is not None
        assert ConversationService.find_for_pair(buyer.id, seller.id, uuid.uuid4()) is None

    def test_get_for_participant(self, db, buyer, seller):
        conversation = ConversationFactory(participant_1=buyer, participant_2=seller)

        assert ConversationService.get_for_participant(conversation.id, seller) == conversation

    @pytest.mark.parametrize("conversation_id", [uuid.uuid4(), "not-a-uuid"])
    def test_get_for_participant_unknown_id(self, db, buyer, conversation_id):
        with pytest.raises(NotFoundError) as exc_info:
            ConversationService.get_for_participant(conversation_id, buyer)

        assert exc_info.value.error_code == ERROR_CODES.CONVERSATION_NOT_FOUND

    def test_get_for_participant_outsider_denied(self, db, buyer, seller, outsider):
        conversation = ConversationFactory(participant_1=buyer, participant_2=seller)

        with pytest.raises(PermissionDeniedError) as exc_info:
            ConversationService.get_for_participant(conversation.id, outsider)

        assert exc_info.value.error_code == ERROR_CODES.NOT_PARTICIPANT


# =============================================================================
# TestReadState
# =============================================================================


class TestMarkRead:
    """
    Tests for MessageService.mark_read() and get_unread_count().

    Verifies:
    - Only messages addressed to the reader change
    - Other item scopes and other pairs are untouched
    - A second call is a no-op
    """

    def test_marks_only_messages_to_reader(self, db, buyer, seller):
        MessageService.send_message(buyer, seller.id, "one")
        MessageService.send_message(buyer, seller.id, "two")
        MessageService.send_message(seller, buyer.id, "three")
        conversation = Conversation.objects.get()

        updated = MessageService.mark_read(conversation, seller)

        assert updated == 2
        assert MessageService.get_unread_count(conversation, seller) == 0
        assert MessageService.get_unread_count(conversation, buyer) == 1

    def test_is_idempotent(self, db, buyer, seller):
        MessageService.send_message(buyer, seller.id, "one")
        conversation = Conversation.objects.get()

        assert MessageService.mark_read(conversation, seller) == 1
        assert MessageService.mark_read(conversation, seller) == 0

    def test_other_item_scope_untouched(self, db, buyer, seller, item_id):
        MessageService.send_message(buyer, seller.id, "plain")
        MessageService.send_message(buyer, seller.id, "about item", item_id=item_id)
        plain = ConversationService.find_for_pair(buyer.id, seller.id)
        scoped = ConversationService.find_for_pair(buyer.id, seller.id, item_id)

        MessageService.mark_read(plain, seller)

        assert MessageService.get_unread_count(scoped, seller) == 1

    def test_other_pair_untouched(self, db, buyer, seller, outsider):
        MessageService.send_message(buyer, seller.id, "from buyer")
        MessageService.send_message(outsider, seller.id, "from outsider")
        with_buyer = ConversationService.find_for_pair(buyer.id, seller.id)
        with_outsider = ConversationService.find_for_pair(outsider.id, seller.id)

        updated = MessageService.mark_read(with_buyer, seller)

        assert updated == 1
        assert MessageService.get_unread_count(with_outsider, seller) == 1
        assert Message.objects.get(content="from outsider").is_read is False

    def test_outsider_denied(self, db, buyer, seller, outsider):
        MessageService.send_message(buyer, seller.id, "one")
        conversation = Conversation.objects.get()

        with pytest.raises(PermissionDeniedError):
            MessageService.mark_read(conversation, outsider)

        assert MessageService.get_unread_count(conversation, seller) == 1


class TestListMessages:
    """Tests for MessageService.list_messages() and get_last_message()."""

    def test_chronological_both_directions(self, db, buyer, seller):
        first = MessageService.send_message(buyer, seller.id, "first")
        second = MessageService.send_message(seller, buyer.id, "second")
        third = MessageService.send_message(buyer, seller.id, "third")
        conversation = Conversation.objects.get()

        messages = list(MessageService.list_messages(conversation))

        assert messages == [first, second, third]
        assert MessageService.get_last_message(conversation) == third

    def test_excludes_other_scopes(self, db, buyer, seller, item_id):
        MessageService.send_message(buyer, seller.id, "plain")
        MessageService.send_message(buyer, seller.id, "scoped", item_id=item_id)
        scoped = ConversationService.find_for_pair(buyer.id, seller.id, item_id)

        contents = [m.content for m in MessageService.list_messages(scoped)]

        assert contents == ["scoped"]

    def test_empty_conversation(self, db, buyer, seller):
        conversation, _ = ConversationService.get_or_create_for_pair(buyer, seller)

        assert list(MessageService.list_messages(conversation)) == []
        assert MessageService.get_last_message(conversation) is None
