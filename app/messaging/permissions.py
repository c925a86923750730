"""
Permission classes for messaging API.

- IsConversationParticipant: User is one of the two participants

Design Decisions:
    - Conversations have exactly two participants and no roles
    - Object-level check; list endpoints filter by user instead
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rest_framework import permissions

from messaging.models import Conversation

if TYPE_CHECKING:
    from rest_framework.request import Request
    from rest_framework.views import APIView


class IsConversationParticipant(permissions.BasePermission):
    """Allows access only to the participants of the conversation."""

    message = "You are not a participant in this conversation."

    def has_object_permission(
        self, request: Request, view: APIView, obj: Conversation
    ) -> bool:
        if not request.user.is_authenticated:
            return False
        return obj.has_participant(request.user)
