"""Account API views.

Registration and login issue SimpleJWT tokens; the user endpoints expose
``AccountService``.  Domain errors propagate to the envelope exception
handler.
"""

from __future__ import annotations

from typing import Any

from drf_spectacular.utils import extend_schema
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.viewsets import GenericViewSet
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenRefreshView, TokenVerifyView

from modules.accounts.authorization import Caller
from modules.accounts.dtos import LoginDTO, RegisterUserDTO
from modules.accounts.models import User
from modules.accounts.repositories.django_repository import UserDjangoRepository
from modules.accounts.serializers import (
    AuthTokenSerializer,
    LoginSerializer,
    RegisterSerializer,
    UserSerializer,
)
from modules.accounts.services import AccountService
from modules.core.exceptions import parse_dto
from modules.core.responses import created, envelope, ok

TOKEN_TYPE = "Bearer"


def _account_service() -> AccountService:
    return AccountService(repository=UserDjangoRepository())


def issue_tokens(user: User) -> dict[str, Any]:
    """Access/refresh pair plus the public user fields."""
    refresh = RefreshToken.for_user(user)
    refresh["role"] = user.role
    return {
        "access_token": str(refresh.access_token),
        "refresh_token": str(refresh),
        "token_type": TOKEN_TYPE,
        "user_id": str(user.id),
        "email": user.email,
        "name": user.name,
        "role": user.role,
    }


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------


class RegisterView(APIView):
    """POST /api/v1/auth/register/"""

    permission_classes = [AllowAny]
    throttle_scope = "auth"

    @extend_schema(request=RegisterSerializer, responses={201: AuthTokenSerializer})
    def post(self, request: Request) -> Response:
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto = parse_dto(RegisterUserDTO, **serializer.validated_data)

        user = _account_service().register(dto)
        return created(issue_tokens(user), "User registered successfully")


class LoginView(APIView):
    """POST /api/v1/auth/login/"""

    permission_classes = [AllowAny]
    throttle_scope = "auth"

    @extend_schema(request=LoginSerializer, responses={200: AuthTokenSerializer})
    def post(self, request: Request) -> Response:
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto = parse_dto(LoginDTO, **serializer.validated_data)

        user = _account_service().authenticate(dto)
        return ok(issue_tokens(user), "Login successful")


class EnvelopeTokenRefreshView(TokenRefreshView):
    """POST /api/v1/auth/token/refresh/"""

    throttle_scope = "auth"

    def post(self, request: Request, *args: Any, **kwargs: Any) -> Response:
        response = super().post(request, *args, **kwargs)
        response.data = envelope(data=response.data, message="Token refreshed")
        return response


class EnvelopeTokenVerifyView(TokenVerifyView):
    """POST /api/v1/auth/token/verify/"""

    throttle_scope = "auth"

    def post(self, request: Request, *args: Any, **kwargs: Any) -> Response:
        response = super().post(request, *args, **kwargs)
        response.data = envelope(data=None, message="Token is valid")
        return response


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class UserViewSet(GenericViewSet):
    """User administration plus the caller's own profile."""

    queryset = User.objects.all()
    serializer_class = UserSerializer

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._service = _account_service()

    def list(self, request: Request) -> Response:
        """GET /api/v1/users/ (ADMIN)"""
        users = self._service.list_users(Caller.from_user(request.user))
        return ok(UserSerializer(users, many=True).data, "Users retrieved successfully")

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/users/{pk}/ (ADMIN)"""
        user = self._service.get_user_for_caller(pk, Caller.from_user(request.user))
        return ok(UserSerializer(user).data, "User retrieved successfully")

    @action(detail=False, methods=["get"])
    def me(self, request: Request) -> Response:
        """GET /api/v1/users/me/"""
        user = self._service.get_user(request.user.id)
        return ok(UserSerializer(user).data, "Profile retrieved successfully")

    @action(detail=True, methods=["put"])
    def promote(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/users/{pk}/promote/ (ADMIN)"""
        user = self._service.promote_to_admin(pk, Caller.from_user(request.user))
        return ok(UserSerializer(user).data, "User promoted to admin successfully")
