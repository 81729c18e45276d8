"""Core app configuration, database, security and errors."""

from usergate.core.config import Settings, get_settings
from usergate.core.database import create_session_factory, get_db

__all__ = ["Settings", "create_session_factory", "get_db", "get_settings"]
