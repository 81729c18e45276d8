"""Shared test fixtures: explicit settings, in-memory SQLite store, app + client builders."""

from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from usergate.core.config import Settings
from usergate.core.security import PasswordHasher, TokenService
from usergate.main import create_app
from usergate.models import Base, Role, User
from usergate.services.auth import AuthService
from usergate.services.user_store import UserStore

TEST_SECRET = "test-secret-0123456789abcdef0123456789abcdef0123456789abcdef0123"
API = "/api/v1"


def make_settings(**overrides: object) -> Settings:
    """Settings that never read the environment's .env file; low bcrypt cost for speed."""
    values: dict[str, object] = {
        "DB_HOST": "localhost",
        "DB_USER": "usergate",
        "DB_PASSWORD": "usergate",
        "DB_NAME": "usergate_test",
        "JWT_SECRET": TEST_SECRET,
        "BCRYPT_ROUNDS": 4,
        "LOG_LEVEL": "WARNING",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_session_factory() -> sessionmaker[Session]:
    """Fresh in-memory SQLite database with the schema created."""
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def make_auth_service(db: Session, tokens: TokenService | None = None) -> AuthService:
    return AuthService(
        UserStore(db),
        PasswordHasher(rounds=4),
        tokens or TokenService(secret=TEST_SECRET),
    )


def build_client() -> tuple[TestClient, FastAPI]:
    app = create_app(settings=make_settings(), session_factory=make_session_factory())
    return TestClient(app), app


def seed_user(app: FastAPI, email: str, password: str, role: Role = Role.USER) -> User:
    """Insert a user directly through the app's store (e.g. the first admin)."""
    db = app.state.session_factory()
    try:
        return AuthService(UserStore(db), app.state.hasher, app.state.tokens).register(
            email, password, role=role
        )
    finally:
        db.close()


def login(client: TestClient, email: str, password: str) -> str:
    response = client.post(f"{API}/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["access_token"]


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
