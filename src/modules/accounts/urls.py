"""Account URL configuration."""

from __future__ import annotations

from django.urls import path
from rest_framework.routers import DefaultRouter

from modules.accounts.views import (
    EnvelopeTokenRefreshView,
    EnvelopeTokenVerifyView,
    LoginView,
    RegisterView,
    UserViewSet,
)

router = DefaultRouter(trailing_slash=True)
router.register("users", UserViewSet, basename="user")

urlpatterns = [
    path("auth/register/", RegisterView.as_view(), name="auth-register"),
    path("auth/login/", LoginView.as_view(), name="auth-login"),
    path("auth/token/refresh/", EnvelopeTokenRefreshView.as_view(), name="token-refresh"),
    path("auth/token/verify/", EnvelopeTokenVerifyView.as_view(), name="token-verify"),
    *router.urls,
]
