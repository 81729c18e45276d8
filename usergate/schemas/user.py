"""Request/response schemas for the user resource."""

from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from usergate.models.user import Role


class UserResponse(BaseModel):
    """Public representation of a user (never includes the password hash)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    role: Role


class UserCreateRequest(BaseModel):
    """Admin-only account creation. Role defaults to admin."""

    email: EmailStr = Field(..., description="Email address (unique)")
    password: str = Field(..., min_length=1, max_length=128, description="Password")
    role: Role = Field(default=Role.ADMIN, description="Role of the new account")


class UserUpdateRequest(BaseModel):
    """Partial update: only fields that are present and non-empty are applied."""

    email: EmailStr | None = None
    password: str | None = Field(default=None, max_length=128)
    role: Role | None = None

    @field_validator("email", "password", "role", mode="before")
    @classmethod
    def blank_as_missing(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class UserListResponse(BaseModel):
    """Paginated list of users (admin only)."""

    users: list[UserResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
    has_next: bool
    has_prev: bool
