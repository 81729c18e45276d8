"""User resource endpoints: read for any authenticated caller, writes for admins."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status

from usergate.api.deps import get_user_service
from usergate.api.guards import AdminIdentity, CurrentIdentity
from usergate.schemas.user import (
    UserCreateRequest,
    UserListResponse,
    UserResponse,
    UserUpdateRequest,
)
from usergate.services.users import MAX_PAGE_SIZE, UserService

router = APIRouter()


@router.get("", response_model=UserListResponse)
def list_users(
    _admin: AdminIdentity,
    users: Annotated[UserService, Depends(get_user_service)],
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=MAX_PAGE_SIZE)] = 10,
) -> UserListResponse:
    """List users ordered by id (admin only)."""
    items, total, total_pages = users.list_users(page=page, page_size=page_size)
    return UserListResponse(
        users=[UserResponse.model_validate(u) for u in items],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_prev=page > 1,
    )


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: int,
    _identity: CurrentIdentity,
    users: Annotated[UserService, Depends(get_user_service)],
) -> UserResponse:
    return UserResponse.model_validate(users.get(user_id))


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    body: UserCreateRequest,
    _admin: AdminIdentity,
    users: Annotated[UserService, Depends(get_user_service)],
) -> UserResponse:
    """Create an account with an explicit role (admin only; defaults to admin)."""
    user = users.create(body.email, body.password, role=body.role)
    return UserResponse.model_validate(user)


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    body: UserUpdateRequest,
    _admin: AdminIdentity,
    users: Annotated[UserService, Depends(get_user_service)],
) -> UserResponse:
    """Partially update email, password and/or role (admin only)."""
    user = users.update(user_id, email=body.email, password=body.password, role=body.role)
    return UserResponse.model_validate(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: int,
    admin: AdminIdentity,
    users: Annotated[UserService, Depends(get_user_service)],
) -> Response:
    """Delete another user's account (admin only). Self-deletion is refused."""
    users.delete(user_id, actor_id=admin.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
