"""Relational store connection and per-request session management."""

from collections.abc import Generator

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.orm import Session, sessionmaker

from usergate.core.config import Settings


def create_session_factory(settings: Settings) -> sessionmaker[Session]:
    """Build the engine and session factory once, at startup."""
    engine = create_engine(
        settings.database_url,
        pool_pre_ping=True,
        echo=settings.DEBUG,
    )
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db(request: Request) -> Generator[Session, None, None]:
    """Dependency that yields a DB session from the app's factory and closes it when done."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def check_db_connected(db: Session) -> bool:
    """Run a trivial query to verify the database is reachable."""
    try:
        db.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
