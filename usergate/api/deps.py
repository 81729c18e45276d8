"""Dependency providers wiring request-scoped services to app-level singletons."""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from usergate.core.database import get_db
from usergate.core.security import PasswordHasher, TokenService
from usergate.services.auth import AuthService
from usergate.services.user_store import UserStore
from usergate.services.users import UserService


def get_hasher(request: Request) -> PasswordHasher:
    return request.app.state.hasher


def get_token_service(request: Request) -> TokenService:
    return request.app.state.tokens


def get_user_store(db: Annotated[Session, Depends(get_db)]) -> UserStore:
    return UserStore(db)


def get_auth_service(
    store: Annotated[UserStore, Depends(get_user_store)],
    hasher: Annotated[PasswordHasher, Depends(get_hasher)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> AuthService:
    return AuthService(store, hasher, tokens)


def get_user_service(
    store: Annotated[UserStore, Depends(get_user_store)],
    hasher: Annotated[PasswordHasher, Depends(get_hasher)],
    auth: Annotated[AuthService, Depends(get_auth_service)],
) -> UserService:
    return UserService(store, hasher, auth)
