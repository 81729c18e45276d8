"""Operations on the user resource: get, create, update, delete, list."""

import logging
import math

from usergate.core.errors import DuplicateEmail, ForbiddenSelfDelete, NotFound, ValidationError
from usergate.core.security import PasswordHasher
from usergate.models.user import Role, User
from usergate.services.auth import AuthService, password_is_valid, validate_email_address
from usergate.services.user_store import UserStore

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100

# users.id is a 32-bit INTEGER column; larger ids can never exist.
MAX_USER_ID = 2**31 - 1


class UserService:
    """User management; callers are responsible for authorization."""

    def __init__(self, store: UserStore, hasher: PasswordHasher, auth: AuthService) -> None:
        self.store = store
        self.hasher = hasher
        self.auth = auth

    def get(self, user_id: int) -> User:
        if user_id < 1 or user_id > MAX_USER_ID:
            raise NotFound()
        user = self.store.find_by_id(user_id)
        if user is None:
            raise NotFound()
        return user

    def create(self, email: str, password: str, role: Role = Role.ADMIN) -> User:
        """Admin creation path of registration; the caller picks the role."""
        user = self.auth.register(email, password, role=role)
        logger.info("User created by admin", extra={"user_id": user.id, "role": user.role.value})
        return user

    def update(
        self,
        user_id: int,
        email: str | None = None,
        password: str | None = None,
        role: Role | None = None,
    ) -> User:
        """
        Apply a partial update. Each field changes only when given and non-empty;
        a changed email is re-checked for uniqueness.
        """
        user = self.get(user_id)

        if email:
            email = validate_email_address(email)
            if email != user.email:
                if self.store.find_by_email(email) is not None:
                    raise DuplicateEmail("Email already in use")
                user.email = email
        if password:
            if not password_is_valid(password):
                raise ValidationError(["password"])
            user.password_hash = self.hasher.hash(password)
        if role is not None:
            user.role = Role(role)

        user = self.store.save(user)
        logger.info("User updated", extra={"user_id": user.id})
        return user

    def delete(self, user_id: int, actor_id: int) -> None:
        """Hard-delete a user. An actor can never delete their own account."""
        user = self.get(user_id)
        if user.id == actor_id:
            raise ForbiddenSelfDelete()
        self.store.delete(user)
        logger.info("User deleted", extra={"user_id": user_id, "actor_id": actor_id})

    def list_users(self, page: int = 1, page_size: int = 10) -> tuple[list[User], int, int]:
        """Return (users on page, total users, total pages)."""
        if page < 1:
            raise ValidationError(["page"])
        if page_size < 1 or page_size > MAX_PAGE_SIZE:
            raise ValidationError(["page_size"])
        total = self.store.count()
        users = self.store.list_page(offset=(page - 1) * page_size, limit=page_size)
        return users, total, math.ceil(total / page_size)
