"""
WebSocket consumer for real-time messaging.

One socket per client session. After an authenticated connect the socket
is registered in its user's channel layer group and receives every new
message addressed to that user, whichever transport the sender used.

Consumers:
    MessagingConsumer: Handles ws/messages/ connections

Authentication:
    JWTAuthMiddleware attaches the user to self.scope["user"]. Anonymous
    connections are closed with code 4001 before accept.

Message Types (from client):
    - message: {"type": "message", "recipient_id", "content", "item_id"?}
    - read: {"type": "read", "conversation_id"}

Message Types (to client):
    - message_sent: Echo of a stored message to the socket that sent it
    - new_message: A message addressed to this user
    - read: Result of a read request
    - error: {"type": "error", "message", "error_code", "details"?}
"""

from __future__ import annotations

import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncJsonWebsocketConsumer

from core.exceptions import BaseApplicationError
from messaging.constants import ERROR_CODES, REALTIME_CONFIG
from messaging.realtime import RealtimeGateway, build_message_payload
from messaging.services import ConversationService, MessageService

logger = logging.getLogger(__name__)


class MessagingConsumer(AsyncJsonWebsocketConsumer):
    """
    WebSocket consumer for direct messages.

    Handles:
        - Registration of the socket under its user
        - Sending messages over the socket
        - Conversation read receipts
        - Relaying message.created events to the client

    Attributes:
        user_id: UUID of the connected user (None until registered)
        gateway: RealtimeGateway used for group membership
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.user_id = None
        self.gateway = RealtimeGateway()

    async def connect(self):
        """
        Handle WebSocket connection.

        Rejects anonymous users; otherwise joins the user's group and
        accepts. Clients that authenticated via the jwt subprotocol get
        it echoed back so browsers complete the handshake.
        """
        user = self.scope.get("user")

        if not user or not user.is_authenticated:
            logger.warning("Rejected unauthenticated messaging connection")
            await self.close(code=REALTIME_CONFIG.CLOSE_UNAUTHENTICATED)
            return

        await self.gateway.register_connection(user.id, self.channel_name)
        self.user_id = user.id

        subprotocol = (
            REALTIME_CONFIG.JWT_SUBPROTOCOL
            if REALTIME_CONFIG.JWT_SUBPROTOCOL in self.scope.get("subprotocols", [])
            else None
        )
        await self.accept(subprotocol=subprotocol)
        logger.info(f"User {user.id} connected to messaging")

    async def disconnect(self, close_code):
        """Leave the user's group if the socket was registered."""
        if self.user_id is None:
            return

        await self.gateway.deregister_connection(self.user_id, self.channel_name)
        logger.info(f"User {self.user_id} disconnected from messaging ({close_code})")
        self.user_id = None

    async def receive(self, text_data=None, bytes_data=None, **kwargs):
        """Reject frames that are not JSON objects without closing the socket."""
        try:
            content = await self.decode_json(text_data)
        except (TypeError, ValueError):
            await self._send_error(
                "Frame is not valid JSON", ERROR_CODES.INVALID_JSON
            )
            return

        if not isinstance(content, dict):
            await self._send_error(
                "Frame must be a JSON object", ERROR_CODES.INVALID_JSON
            )
            return

        await self.receive_json(content, **kwargs)

    async def receive_json(self, content, **kwargs):
        """
        Handle incoming WebSocket messages.

        Expected message format:
            {"type": "message", "recipient_id": "<uuid>", "content": "Hi"}
            {"type": "message", "recipient_id": "<uuid>", "content": "Hi", "item_id": "<uuid>"}
            {"type": "read", "conversation_id": "<uuid>"}
        """
        message_type = content.get("type")

        if message_type == "message":
            await self._handle_message(content)
        elif message_type == "read":
            await self._handle_read(content)
        else:
            await self._send_error(
                f"Unknown message type: {message_type}", ERROR_CODES.UNKNOWN_TYPE
            )

    async def _handle_message(self, content):
        """Store the message; the recipient is notified after commit."""
        try:
            payload = await self._send_message(
                recipient_id=content.get("recipient_id"),
                content=content.get("content"),
                item_id=content.get("item_id"),
            )
        except BaseApplicationError as e:
            await self._send_application_error(e)
            return

        await self.send_json({"type": "message_sent", "message": payload})

    async def _handle_read(self, content):
        conversation_id = content.get("conversation_id")
        try:
            updated = await self._mark_read(conversation_id)
        except BaseApplicationError as e:
            await self._send_application_error(e)
            return

        await self.send_json(
            {"type": "read", "conversation_id": str(conversation_id), "updated": updated}
        )

    async def message_created(self, event):
        """
        Handle message.created events from channel layer.

        Sends the message to the WebSocket client.
        """
        await self.send_json({"type": "new_message", "message": event["message"]})

    async def _send_application_error(self, exc: BaseApplicationError):
        await self._send_error(exc.message, exc.error_code, exc.details)

    async def _send_error(self, message: str, error_code: str, details=None):
        frame = {"type": "error", "message": message, "error_code": error_code}
        if details:
            frame["details"] = details
        await self.send_json(frame)

    @database_sync_to_async
    def _send_message(self, recipient_id, content, item_id) -> dict:
        message = MessageService.send_message(
            sender=self.scope["user"],
            recipient_id=recipient_id,
            content=content,
            item_id=item_id,
        )
        return build_message_payload(message)

    @database_sync_to_async
    def _mark_read(self, conversation_id) -> int:
        user = self.scope["user"]
        conversation = ConversationService.get_for_participant(conversation_id, user)
        return MessageService.mark_read(conversation, user)
