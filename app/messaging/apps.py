"""
Messaging application configuration.

This app provides:
- Conversations keyed on an unordered user pair plus optional item
- Chronological message history derived from the pair and item scope
- Conversation-scoped read state
- Real-time push of new messages over WebSockets
"""

from django.apps import AppConfig


class MessagingConfig(AppConfig):
    """Configuration for the messaging application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "messaging"
    verbose_name = "Messaging"

    def ready(self):
        """Connect the message_created receiver."""
        from messaging import signals  # noqa: F401
