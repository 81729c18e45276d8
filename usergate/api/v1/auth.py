"""Login and self-service registration endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from usergate.api.deps import get_auth_service
from usergate.schemas.auth import LoginRequest, RegisterRequest, TokenResponse
from usergate.schemas.user import UserResponse
from usergate.services.auth import AuthService

router = APIRouter()


@router.post("/login", response_model=TokenResponse)
def login(
    body: LoginRequest,
    auth: Annotated[AuthService, Depends(get_auth_service)],
) -> TokenResponse:
    """
    Authenticate with email and password; returns a JWT access token.
    Include the token in the Authorization header as: Bearer <access_token>
    """
    result = auth.login(body.email, body.password)
    return TokenResponse(access_token=result.access_token, expires_in=result.expires_in)


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    auth: Annotated[AuthService, Depends(get_auth_service)],
) -> UserResponse:
    """Create a 'user' account. Does not log the caller in."""
    user = auth.register(body.email, body.password)
    return UserResponse.model_validate(user)
