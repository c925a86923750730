"""
URL configuration for authentication app.

URL structure:
    /api/v1/auth/token/           - Obtain access/refresh pair (email + password)
    /api/v1/auth/token/refresh/   - Exchange refresh token for a new access token

The access token is the bearer credential for REST calls and the
?token= / subprotocol credential for the messaging WebSocket.
"""

from django.urls import path
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

app_name = "authentication"

urlpatterns = [
    path("token/", TokenObtainPairView.as_view(), name="token-obtain"),
    path("token/refresh/", TokenRefreshView.as_view(), name="token-refresh"),
]
