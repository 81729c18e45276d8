"""Pydantic request/response schemas."""

from usergate.schemas.auth import LoginRequest, RegisterRequest, TokenResponse
from usergate.schemas.health import HealthResponse
from usergate.schemas.user import (
    UserCreateRequest,
    UserListResponse,
    UserResponse,
    UserUpdateRequest,
)

__all__ = [
    "HealthResponse",
    "LoginRequest",
    "RegisterRequest",
    "TokenResponse",
    "UserCreateRequest",
    "UserListResponse",
    "UserResponse",
    "UserUpdateRequest",
]
