"""
Domain events for messaging.

Signals:
    message_created: Sent once per stored message, after the send
        transaction commits. Keyword args: message (Message instance).

Handlers:
    dispatch_message_created: Queues realtime delivery on Celery

Usage:
    Signals are automatically connected when the app is ready.
    See apps.py for the import that triggers connection.
"""

import logging

from django.dispatch import Signal, receiver

from messaging.realtime import build_message_payload

logger = logging.getLogger(__name__)

message_created = Signal()


@receiver(message_created)
def dispatch_message_created(sender, message, **kwargs):
    """
    Hand the new message to the delivery task.

    The broker publish is not retried. If the broker is down the push is
    skipped; the message stays stored and is visible on the next fetch.
    """
    from messaging.tasks import deliver_message_created

    payload = build_message_payload(message)
    try:
        deliver_message_created.apply_async(args=[payload], retry=False)
    except Exception as e:
        logger.warning(f"Could not queue realtime delivery for message {message.id}: {e}")
