"""
URL configuration for messaging API.

URL Structure:
    Messages:
        /messages/                          POST

    Conversations:
        /conversations/                     GET
        /conversations/{id}/                GET
        /conversations/{id}/messages/       GET
        /conversations/{id}/read/           POST

All URLs are prefixed with /api/v1/ in the main URL configuration.
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from messaging.views import ConversationViewSet, MessageViewSet

router = DefaultRouter()
router.register(r"conversations", ConversationViewSet, basename="conversation")
router.register(r"messages", MessageViewSet, basename="message")

app_name = "messaging"

urlpatterns = [
    path("", include(router.urls)),
]
