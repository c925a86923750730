"""
ASGI config for the campus marketplace backend.

This configuration supports:
- HTTP requests via Django
- WebSocket connections via Django Channels (ws/messages/)

Uvicorn (or Daphne) serves this entry point. The WebSocket stack is:
1. AllowedHostsOriginValidator - ensures origin matches ALLOWED_HOSTS
2. JWTAuthMiddleware - authenticates user via JWT token
3. URLRouter - routes to MessagingConsumer

For more information on this file, see:
https://docs.djangoproject.com/en/5.2/howto/deployment/asgi/
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

# Initialize Django ASGI application early to ensure settings are loaded
# before importing any models or other Django components
django_asgi_app = get_asgi_application()

from channels.routing import ProtocolTypeRouter, URLRouter  # noqa: E402
from channels.security.websocket import AllowedHostsOriginValidator  # noqa: E402

from messaging.middleware import JWTAuthMiddleware  # noqa: E402
from messaging.routing import websocket_urlpatterns  # noqa: E402

application = ProtocolTypeRouter(
    {
        "http": django_asgi_app,
        "websocket": AllowedHostsOriginValidator(
            JWTAuthMiddleware(URLRouter(websocket_urlpatterns))
        ),
    }
)
