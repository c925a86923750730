"""
Messaging application.

Direct messages between marketplace users, optionally scoped to one
listed item, with real-time delivery to the recipient's open sockets.

Key components:
    - Conversation: One per unordered user pair and item scope
    - Message: Immutable text apart from the read flag
    - ConversationService / MessageService: Store operations
    - RealtimeGateway: Per-user groups on the Channels layer
    - MessagingConsumer: WebSocket endpoint at ws/messages/

Usage:
    from messaging.services import MessageService

    message = MessageService.send_message(
        sender=request.user,
        recipient_id=seller.id,
        content="Is the desk still available?",
        item_id=listing_id,
    )
"""
