"""Registration and login flows."""

import logging
from dataclasses import dataclass

from email_validator import EmailNotValidError, validate_email

from usergate.core.errors import DuplicateEmail, InvalidCredentials, ValidationError
from usergate.core.security import (
    EMAIL_MAX_LEN,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    PasswordHasher,
    TokenService,
)
from usergate.models.user import Role, User
from usergate.services.user_store import UserStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginResult:
    access_token: str
    expires_in: int


def validate_email_address(email: str | None) -> str:
    """Return the normalized address or raise ValidationError(['email'])."""
    if not email or not email.strip() or len(email) > EMAIL_MAX_LEN:
        raise ValidationError(["email"])
    try:
        return validate_email(email.strip(), check_deliverability=False).normalized
    except EmailNotValidError as e:
        raise ValidationError(["email"]) from e


def password_is_valid(password: str | None) -> bool:
    return bool(password) and PASSWORD_MIN_LEN <= len(password) <= PASSWORD_MAX_LEN


class AuthService:
    """Creates accounts and exchanges credentials for access tokens."""

    def __init__(
        self,
        store: UserStore,
        hasher: PasswordHasher,
        tokens: TokenService | None = None,
    ) -> None:
        self.store = store
        self.hasher = hasher
        self.tokens = tokens

    def register(self, email: str, password: str, role: Role = Role.USER) -> User:
        """
        Validate input, check the email is free, hash the password and persist.

        The public flow always passes Role.USER; only the admin-gated create
        path passes another role. No token is issued.
        """
        bad_fields: list[str] = []
        try:
            email = validate_email_address(email)
        except ValidationError:
            bad_fields.append("email")
        if not password_is_valid(password):
            bad_fields.append("password")
        if bad_fields:
            raise ValidationError(bad_fields)

        if self.store.find_by_email(email) is not None:
            raise DuplicateEmail()

        user = self.store.create(
            email=email,
            password_hash=self.hasher.hash(password),
            role=Role(role),
        )
        logger.info("User registered", extra={"user_id": user.id, "role": user.role.value})
        return user

    def login(self, email: str, password: str) -> LoginResult:
        """
        Verify credentials and issue an access token.
        Requires a TokenService; registration-only callers may omit it.

        Unknown email and wrong password raise the same InvalidCredentials;
        an unknown email still costs one bcrypt verification.
        """
        if self.tokens is None:
            raise RuntimeError("AuthService was built without a TokenService; login is unavailable")
        try:
            lookup_email: str | None = validate_email_address(email)
        except ValidationError:
            lookup_email = None
        user = self.store.find_by_email(lookup_email) if lookup_email else None
        if user is None:
            self.hasher.verify_dummy(password or "")
            logger.info("Login failed", extra={"reason": "unknown_email"})
            raise InvalidCredentials()
        if not self.hasher.verify(user.password_hash, password or ""):
            logger.info("Login failed", extra={"reason": "bad_password", "user_id": user.id})
            raise InvalidCredentials()

        token = self.tokens.issue(subject_id=user.id, email=user.email, role=user.role)
        logger.info("Login succeeded", extra={"user_id": user.id})
        return LoginResult(
            access_token=token,
            expires_in=int(self.tokens.ttl.total_seconds()),
        )
