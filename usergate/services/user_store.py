"""Persistence adapter for User records: lookups, create, save, delete."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from usergate.core.errors import DuplicateEmail, StorageError
from usergate.models.user import Role, User

logger = logging.getLogger(__name__)


class UserStore:
    """
    CRUD over the users table for one request-scoped Session.

    The unique index on users.email is the source of truth for uniqueness:
    a violation at commit time surfaces as DuplicateEmail. Any other database
    failure is rolled back, logged and raised as StorageError.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    @contextmanager
    def _storage(self, action: str) -> Iterator[None]:
        try:
            yield
        except IntegrityError as e:
            self.db.rollback()
            logger.info("Unique constraint violated during %s", action)
            raise DuplicateEmail() from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Storage failure during %s", action)
            raise StorageError() from e

    def find_by_id(self, user_id: int) -> User | None:
        with self._storage("find_by_id"):
            return self.db.get(User, user_id)

    def find_by_email(self, email: str) -> User | None:
        with self._storage("find_by_email"):
            return self.db.scalars(select(User).where(User.email == email)).first()

    def create(self, email: str, password_hash: str, role: Role) -> User:
        user = User(email=email, password_hash=password_hash, role=role)
        with self._storage("create"):
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
        return user

    def save(self, user: User) -> User:
        with self._storage("save"):
            self.db.commit()
            self.db.refresh(user)
        return user

    def delete(self, user: User) -> None:
        with self._storage("delete"):
            self.db.delete(user)
            self.db.commit()

    def count(self) -> int:
        with self._storage("count"):
            return self.db.scalar(select(func.count()).select_from(User)) or 0

    def list_page(self, offset: int, limit: int) -> list[User]:
        with self._storage("list_page"):
            return list(
                self.db.scalars(select(User).order_by(User.id).offset(offset).limit(limit))
            )
