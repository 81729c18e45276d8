"""Domain errors raised by services and guards, translated to HTTP in usergate.main."""

from typing import Any


class UserGateError(Exception):
    """Base error carrying the HTTP status and a client-safe message."""

    status_code: int = 500
    default_detail: str = "Internal server error"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)

    @property
    def headers(self) -> dict[str, str] | None:
        return None

    def to_body(self) -> dict[str, Any]:
        return {"detail": self.detail}


class ValidationError(UserGateError):
    """Malformed or missing input fields."""

    status_code = 400
    default_detail = "Validation error"

    def __init__(self, fields: list[str], detail: str | None = None) -> None:
        self.fields = sorted(set(fields))
        super().__init__(detail)

    def to_body(self) -> dict[str, Any]:
        return {"detail": self.detail, "fields": self.fields}


class DuplicateEmail(UserGateError):
    status_code = 400
    default_detail = "Email already exists"


class InvalidCredentials(UserGateError):
    """Login failure. One message for unknown email and wrong password."""

    status_code = 401
    default_detail = "Invalid email or password"


class Unauthorized(UserGateError):
    status_code = 401
    default_detail = "Not authenticated"

    @property
    def headers(self) -> dict[str, str] | None:
        return {"WWW-Authenticate": "Bearer"}


class Forbidden(UserGateError):
    status_code = 403
    default_detail = "Admin access required"


class ForbiddenSelfDelete(Forbidden):
    default_detail = "You cannot delete yourself"


class NotFound(UserGateError):
    status_code = 404
    default_detail = "User not found"


class StorageError(UserGateError):
    """Database failure; logged where it happens, never retried."""

    status_code = 500
    default_detail = "Internal server error"
