"""SQLAlchemy ORM models."""

from usergate.models.base import Base
from usergate.models.user import Role, User

__all__ = ["Base", "Role", "User"]
