"""Password hashing and JWT creation/verification for authentication."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt

from usergate.models.user import Role

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

# bcrypt only looks at the first 72 bytes of the input.
BCRYPT_MAX_BYTES = 72

EMAIL_MAX_LEN = 255
PASSWORD_MIN_LEN = 1
PASSWORD_MAX_LEN = 128


class PasswordHasher:
    """Salted one-way hashing of passwords with bcrypt."""

    def __init__(self, rounds: int = BCRYPT_ROUNDS) -> None:
        self.rounds = rounds
        self._dummy_hash: bytes | None = None

    def hash(self, plain_password: str) -> str:
        """Hash a plain-text password for storage. Do not store plain passwords."""
        pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
        return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, hashed: str, plain_password: str) -> bool:
        """Verify a plain password against a stored hash. Malformed hashes never match."""
        pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
        try:
            return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
        except (ValueError, TypeError):
            return False

    def verify_dummy(self, plain_password: str) -> None:
        """Spend one verification on a throwaway hash (unknown-account logins)."""
        if self._dummy_hash is None:
            self._dummy_hash = bcrypt.hashpw(b"usergate", bcrypt.gensalt(rounds=self.rounds))
        bcrypt.checkpw(plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES], self._dummy_hash)


class TokenError(Exception):
    """Base class for access token verification failures."""


class InvalidTokenSignature(TokenError):
    pass


class TokenExpired(TokenError):
    pass


class MalformedToken(TokenError):
    pass


class UnexpectedAlgorithm(TokenError):
    pass


@dataclass(frozen=True)
class TokenClaims:
    """Verified claims carried by an access token."""

    subject_id: int
    email: str | None
    role: Role
    expires_at: datetime


class TokenService:
    """
    Issue and verify HMAC-signed JWT access tokens.

    Exactly one algorithm is accepted per instance; tokens whose header names
    any other algorithm are rejected before the signature is checked.
    """

    def __init__(self, secret: str, algorithm: str = "HS256", ttl: timedelta = timedelta(minutes=10)) -> None:
        if not secret:
            raise ValueError("Token signing secret must be non-empty")
        self._secret = secret
        self.algorithm = algorithm
        self.ttl = ttl

    def issue(
        self,
        subject_id: int,
        email: str,
        role: Role,
        ttl: timedelta | None = None,
        now: datetime | None = None,
    ) -> str:
        """Create a JWT access token with sub (user id), email, role, iat and exp."""
        issued_at = now or datetime.now(UTC)
        expire = issued_at + (ttl if ttl is not None else self.ttl)
        payload: dict[str, Any] = {
            "sub": str(subject_id),
            "email": email,
            "role": Role(role).value,
            "iat": issued_at,
            "exp": expire,
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        """
        Decode and validate a JWT; return its claims.
        Raises a TokenError subclass describing why the token was rejected.
        """
        try:
            header = jwt.get_unverified_header(token)
        except jwt.PyJWTError as e:
            raise MalformedToken("Token could not be decoded") from e
        if header.get("alg") != self.algorithm:
            raise UnexpectedAlgorithm(f"Unexpected signing algorithm: {header.get('alg')!r}")

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["sub", "role", "exp"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpired("Token has expired") from e
        except jwt.InvalidSignatureError as e:
            raise InvalidTokenSignature("Token signature is invalid") from e
        except jwt.InvalidAlgorithmError as e:
            raise UnexpectedAlgorithm(str(e)) from e
        except jwt.PyJWTError as e:
            raise MalformedToken(str(e)) from e

        try:
            subject_id = int(payload["sub"])
            role = Role(payload["role"])
            expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=UTC)
        except (TypeError, ValueError) as e:
            raise MalformedToken("Invalid token payload") from e
        email = payload.get("email")
        return TokenClaims(
            subject_id=subject_id,
            email=email if isinstance(email, str) else None,
            role=role,
            expires_at=expires_at,
        )
