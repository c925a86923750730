"""
Real-time delivery of messages to connected users.

Every authenticated WebSocket joins one channel layer group per user,
named "user_<uuid>". Pushing a message to a user means a group_send to
that group; the layer fans it out to each of the user's open sockets.
A user with no open socket simply receives nothing.

Delivery is best-effort. Layer failures are logged at WARNING and never
reach the caller; the message is already stored by then.

Related files:
    - consumers.py: Joins/leaves groups and relays events to sockets
    - tasks.py: Calls push_message_created_sync from a Celery worker
    - signals.py: Builds the payload after the send transaction commits
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

from messaging.constants import REALTIME_CONFIG

if TYPE_CHECKING:
    from messaging.models import Message

logger = logging.getLogger(__name__)


def user_group_name(user_id) -> str:
    """Channel layer group for a user's connections."""
    return f"{REALTIME_CONFIG.USER_GROUP_PREFIX}{user_id}"


def build_message_payload(message: Message) -> dict[str, Any]:
    """
    JSON-safe representation of a message for socket frames and task args.

    Example:
        {
            "id": "0b6c...",
            "from_user_id": "7d1e...",
            "to_user_id": "c2a9...",
            "item_id": null,
            "content": "Still available?",
            "is_read": false,
            "created_at": "2026-10-19T14:03:11.532Z"
        }
    """
    return {
        "id": str(message.id),
        "from_user_id": str(message.from_user_id),
        "to_user_id": str(message.to_user_id),
        "item_id": str(message.item_id) if message.item_id else None,
        "content": message.content,
        "is_read": message.is_read,
        "created_at": message.created_at.isoformat(),
    }


class RealtimeGateway:
    """
    Per-user connection registry backed by channel layer groups.

    The layer (Redis in deployment, in-memory in tests) holds the group
    membership, so the gateway itself is stateless and cheap to create.

    Usage:
        gateway = RealtimeGateway()
        await gateway.register_connection(user.id, self.channel_name)
        gateway.push_message_created_sync(build_message_payload(message))
    """

    def __init__(self, channel_layer=None):
        self._channel_layer = channel_layer

    @property
    def channel_layer(self):
        if self._channel_layer is None:
            self._channel_layer = get_channel_layer()
        return self._channel_layer

    async def register_connection(self, user_id, channel_name: str) -> None:
        """Add a socket to the user's group. A user may hold many sockets."""
        await self.channel_layer.group_add(user_group_name(user_id), channel_name)
        logger.debug(f"Registered connection {channel_name} for user {user_id}")

    async def deregister_connection(self, user_id, channel_name: str) -> None:
        """Remove a socket from the user's group. Unknown sockets are ignored."""
        await self.channel_layer.group_discard(user_group_name(user_id), channel_name)
        logger.debug(f"Deregistered connection {channel_name} for user {user_id}")

    async def push_message_created(self, payload: dict[str, Any]) -> bool:
        """
        Send a message.created event to the recipient's connections.

        Args:
            payload: Output of build_message_payload()

        Returns:
            True if the event was handed to the layer, False on failure.
            Having no connected sockets still returns True.
        """
        layer = self.channel_layer
        if layer is None:
            logger.warning("No channel layer configured; dropping realtime push")
            return False

        recipient_id = payload.get("to_user_id")
        try:
            await layer.group_send(
                user_group_name(recipient_id),
                {"type": REALTIME_CONFIG.MESSAGE_CREATED_EVENT, "message": payload},
            )
        except Exception as e:
            logger.warning(
                f"Realtime push of message {payload.get('id')} to user {recipient_id} failed: {e}"
            )
            return False

        return True

    def push_message_created_sync(self, payload: dict[str, Any]) -> bool:
        """Synchronous wrapper for Celery workers and other sync callers."""
        return async_to_sync(self.push_message_created)(payload)
