"""
WebSocket URL routing for the messaging application.

URL Patterns:
    ws/messages/ - Per-user socket; receives every new message addressed
                   to the authenticated user and accepts sends/read receipts

Authentication:
    JWT access token as ?token=<jwt> or the ["jwt", <jwt>] subprotocol pair.
    JWTAuthMiddleware attaches the user to the consumer's scope.
"""

from django.urls import path

from messaging import consumers

websocket_urlpatterns = [
    path("ws/messages/", consumers.MessagingConsumer.as_asgi()),
]
