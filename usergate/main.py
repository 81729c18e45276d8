"""FastAPI application factory. No business logic; only wiring, error translation and middleware."""

from dotenv import load_dotenv

load_dotenv()

import logging
from datetime import timedelta

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session, sessionmaker

from usergate import __version__
from usergate.api.v1 import router as v1_router
from usergate.core.config import Settings, get_settings
from usergate.core.database import create_session_factory
from usergate.core.errors import UserGateError
from usergate.core.security import PasswordHasher, TokenService

logger = logging.getLogger(__name__)


def _field_name(err: dict) -> str:
    """Pydantic error location without its source prefix: ('body', 'email') -> 'email'."""
    if err.get("type") == "json_invalid":
        return "body"
    parts = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
    return ".".join(parts) or "body"


async def handle_usergate_error(request: Request, exc: UserGateError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_body(),
        headers=exc.headers,
    )


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    fields = sorted({_field_name(err) for err in exc.errors()})
    return JSONResponse(
        status_code=400,
        content={"detail": "Validation error", "fields": fields},
    )


def create_app(
    settings: Settings | None = None,
    session_factory: sessionmaker[Session] | None = None,
) -> FastAPI:
    """
    Build the application. Settings are resolved here so a missing JWT_SECRET
    or database setting stops the process before it serves a request.

    Run with: uvicorn usergate.main:create_app --factory
    """
    settings = settings or get_settings()

    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )

    app = FastAPI(
        title="usergate API",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.state.settings = settings
    app.state.session_factory = session_factory or create_session_factory(settings)
    app.state.hasher = PasswordHasher(rounds=settings.BCRYPT_ROUNDS)
    app.state.tokens = TokenService(
        secret=settings.JWT_SECRET.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
        ttl=timedelta(minutes=settings.JWT_EXPIRE_MINUTES),
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.APP_ENV == "dev" else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(UserGateError, handle_usergate_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)

    app.include_router(v1_router, prefix=settings.API_V1_PREFIX)

    @app.get("/")
    def root() -> dict[str, str]:
        """Root route; minimal payload for discovery."""
        return {"message": "usergate API"}

    logger.info(
        "Application configured",
        extra={"environment": settings.APP_ENV, "api_prefix": settings.API_V1_PREFIX},
    )
    return app
