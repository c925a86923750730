"""
ViewSets for messaging API.

This module provides REST API endpoints for direct messaging:
- ConversationViewSet: Conversation list/detail, history, read receipts
- MessageViewSet: Sending messages

URL Structure:
    /api/v1/messages/                          POST
    /api/v1/conversations/                     GET
    /api/v1/conversations/{id}/                GET
    /api/v1/conversations/{id}/messages/       GET
    /api/v1/conversations/{id}/read/           POST

Design Decisions:
    - Lists are returned as plain arrays (no pagination)
    - All operations go through the service layer
    - Service exceptions become responses in core.exception_handlers
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema, extend_schema_view
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.exceptions import ValidationError
from messaging.models import Conversation
from messaging.permissions import IsConversationParticipant
from messaging.serializers import (
    ConversationSerializer,
    MessageCreateSerializer,
    MessageDetailSerializer,
    MessageSerializer,
)
from messaging.services import ConversationService, MessageService


@extend_schema_view(
    list=extend_schema(
        operation_id="list_conversations",
        summary="List conversations",
        description="All conversations of the current user, most recent activity first.",
        tags=["Messaging - Conversations"],
    ),
    retrieve=extend_schema(
        operation_id="get_conversation",
        summary="Get conversation",
        responses={
            200: ConversationSerializer,
            403: OpenApiResponse(description="Not a participant in this conversation"),
            404: OpenApiResponse(description="Conversation not found"),
        },
        tags=["Messaging - Conversations"],
    ),
)
class ConversationViewSet(viewsets.ReadOnlyModelViewSet):
    """
    ViewSet for conversation operations.

    list:
        Get all conversations for the current user with unread counts
        and last message preview.

    retrieve:
        Get one conversation. 404 if unknown, 403 if not a participant.

    messages:
        Get the conversation history, oldest first, and mark the
        requester's unread messages in it as read.

    read:
        Mark the requester's unread messages in the conversation as read.
    """

    permission_classes = [IsAuthenticated, IsConversationParticipant]
    serializer_class = ConversationSerializer
    pagination_class = None

    def get_queryset(self):
        """Conversations where the user is a participant."""
        if not self.request.user.is_authenticated:
            return Conversation.objects.none()

        return ConversationService.list_for_user(self.request.user)

    def get_object(self):
        """Resolve the conversation, distinguishing unknown from forbidden."""
        conversation = ConversationService.get_for_participant(
            self.kwargs["pk"], self.request.user
        )
        self.check_object_permissions(self.request, conversation)
        return conversation

    @extend_schema(
        operation_id="list_conversation_messages",
        summary="List conversation messages",
        description=(
            "Chronological message history with sender and recipient expanded. "
            "Messages addressed to you are marked read after they are fetched; "
            "the response shows their state before that."
        ),
        responses={200: MessageDetailSerializer(many=True)},
        tags=["Messaging - Conversations"],
    )
    @action(detail=True, methods=["get"])
    def messages(self, request, pk=None):
        """Return the history and mark it read for the requester."""
        conversation = self.get_object()

        messages = list(MessageService.list_messages(conversation))
        MessageService.mark_read(conversation, request.user)

        serializer = MessageDetailSerializer(messages, many=True)
        return Response(serializer.data)

    @extend_schema(
        operation_id="mark_conversation_read",
        summary="Mark conversation as read",
        request=None,
        tags=["Messaging - Conversations"],
    )
    @action(detail=True, methods=["post"])
    def read(self, request, pk=None):
        """Mark conversation as read."""
        conversation = self.get_object()
        updated = MessageService.mark_read(conversation, request.user)
        return Response({"status": "read", "updated": updated})


@extend_schema_view(
    create=extend_schema(
        operation_id="send_message",
        summary="Send message",
        description=(
            "Send a message to another user, optionally about an item. "
            "The conversation is created on first contact and the recipient's "
            "open sockets receive a new_message event."
        ),
        request=MessageCreateSerializer,
        responses={
            201: MessageSerializer,
            400: OpenApiResponse(description="Invalid content, recipient or item"),
            503: OpenApiResponse(description="Datastore unavailable; nothing was stored"),
        },
        tags=["Messaging - Messages"],
    ),
)
class MessageViewSet(viewsets.GenericViewSet):
    """
    ViewSet for sending messages.

    create:
        Store a message from the current user and notify the recipient.
    """

    permission_classes = [IsAuthenticated]
    serializer_class = MessageCreateSerializer
    pagination_class = None

    def create(self, request):
        """Send a message."""
        serializer = self.get_serializer(data=request.data)
        if not serializer.is_valid():
            raise ValidationError(
                "Invalid message data",
                details=serializer.errors,
            )

        data = serializer.validated_data
        message = MessageService.send_message(
            sender=request.user,
            recipient_id=data.get("recipient_id"),
            content=data.get("content", ""),
            item_id=data.get("item_id"),
        )

        return Response(MessageSerializer(message).data, status=status.HTTP_201_CREATED)
