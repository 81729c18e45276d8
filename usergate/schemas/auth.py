"""Request/response schemas for login and registration."""

from pydantic import BaseModel, EmailStr, Field


class LoginRequest(BaseModel):
    """
    Credentials for login.

    email is not format-checked here: a malformed address gets the same 401
    as an unknown one.
    """

    email: str = Field(..., min_length=1, max_length=255, description="Email")
    password: str = Field(..., min_length=1, max_length=128, description="Password")


class RegisterRequest(BaseModel):
    """Self-service registration; always creates a 'user' account."""

    email: EmailStr = Field(..., description="Email address (unique)")
    password: str = Field(..., min_length=1, max_length=128, description="Password")


class TokenResponse(BaseModel):
    """JWT access token returned after successful login."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Seconds until the token expires")
