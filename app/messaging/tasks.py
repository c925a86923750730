"""
Celery tasks for messaging.

This module defines async tasks for:
- Realtime delivery of new messages to the recipient's sockets

Related files:
    - signals.py: Queues deliver_message_created after commit
    - realtime.py: RealtimeGateway

Usage:
    from messaging.tasks import deliver_message_created

    deliver_message_created.apply_async(args=[payload], retry=False)
"""

import logging

from celery import shared_task

from messaging.realtime import RealtimeGateway

logger = logging.getLogger(__name__)


@shared_task(ignore_result=True)
def deliver_message_created(payload: dict) -> bool:
    """
    Push a message.created event to the recipient's connections.

    Never retried. A recipient with no open socket is not an error.

    Args:
        payload: JSON-safe message from build_message_payload()

    Returns:
        True if the event reached the channel layer
    """
    delivered = RealtimeGateway().push_message_created_sync(payload)
    if delivered:
        logger.debug(f"Delivered message {payload.get('id')} to user {payload.get('to_user_id')}")
    return delivered
