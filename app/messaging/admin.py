"""
Django admin configuration for messaging models.

Provides admin interfaces for:
- Conversation browsing
- Message moderation

Conversations and messages are never deleted by the application, so
delete permissions are withheld here as well.
"""

from django.contrib import admin

from messaging.models import Conversation, Message


@admin.register(Conversation)
class ConversationAdmin(admin.ModelAdmin):
    """Admin interface for Conversation model."""

    list_display = [
        "id",
        "participant_1",
        "participant_2",
        "item_id",
        "last_message_at",
        "created_at",
    ]
    list_filter = ["created_at"]
    search_fields = ["id", "item_id", "participant_1__email", "participant_2__email"]
    readonly_fields = [
        "participant_1",
        "participant_2",
        "participant_low",
        "participant_high",
        "item_id",
        "last_message_at",
        "created_at",
        "updated_at",
    ]
    ordering = ["-last_message_at"]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    """Admin interface for Message model."""

    list_display = [
        "id",
        "from_user",
        "to_user",
        "item_id",
        "content_preview",
        "is_read",
        "created_at",
    ]
    list_filter = ["is_read", "created_at"]
    search_fields = ["content", "from_user__email", "to_user__email"]
    readonly_fields = ["from_user", "to_user", "item_id", "content", "created_at", "updated_at"]
    ordering = ["-created_at"]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    @admin.display(description="Content Preview")
    def content_preview(self, obj: Message) -> str:
        """Return truncated content for list display."""
        max_length = 50
        if len(obj.content) > max_length:
            return obj.content[:max_length] + "..."
        return obj.content
