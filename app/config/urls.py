"""
URL configuration for the campus marketplace backend.

URL Structure:
    /                                   - ReDoc API documentation
    /admin/                             - Django admin interface
    /health/                            - Health check endpoint (for load balancers, Docker)
    /schema/                            - OpenAPI schema (YAML)
    /api/v1/auth/                       - JWT token endpoints
        token/                          - Obtain access/refresh pair
        token/refresh/                  - Refresh access token
    /api/v1/                            - Messaging endpoints
        messages/                       - Send a message (POST)
        conversations/                  - Conversations of the current user
        conversations/{id}/             - Conversation detail
        conversations/{id}/messages/    - History (marks it read)
        conversations/{id}/read/        - Mark conversation as read

WebSocket routes live in messaging/routing.py (ws/messages/).

For more information, see:
https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView

from core.views import health_check

# =============================================================================
# API v1 Routes
# =============================================================================
# All routes here are prefixed with /api/v1/ automatically
api_v1_patterns = [
    path("auth/", include("authentication.urls")),
    path("", include("messaging.urls")),
]

urlpatterns = [
    # Documentation
    path("", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    # Admin
    path("admin/", admin.site.urls),
    # Health check (Docker, Kubernetes, load balancers)
    path("health/", health_check, name="health_check"),
    # API v1
    path("api/v1/", include(api_v1_patterns)),
]

# =============================================================================
# Admin Site Customization
# =============================================================================
admin.site.site_header = "Campus Marketplace Admin"
admin.site.site_title = "Marketplace Admin"
admin.site.index_title = "Users and messaging"
