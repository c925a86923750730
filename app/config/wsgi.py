"""
WSGI config for the campus marketplace backend.

Fallback for WSGI-only deployments. WebSockets need the ASGI entry point
(config.asgi); under WSGI only the REST API is served.

For more information on this file, see:
https://docs.djangoproject.com/en/5.2/howto/deployment/wsgi/
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

application = get_wsgi_application()
