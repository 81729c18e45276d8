"""
Access guards for protected routes.

A GuardChain always authenticates the bearer token first and then runs its
role checks in the order given, so a role check can never see a request
that has not been authenticated.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from usergate.core.errors import Forbidden, Unauthorized
from usergate.core.security import TokenError, TokenService
from usergate.models.user import Role

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Identity:
    """Authenticated caller, taken from verified token claims."""

    user_id: int
    email: str | None
    role: Role


RoleCheck = Callable[[Identity], None]


def authenticate(
    credentials: HTTPAuthorizationCredentials | None,
    tokens: TokenService,
) -> Identity:
    """Verify the bearer token. Raises Unauthorized without saying which check failed."""
    if credentials is None or not credentials.credentials:
        raise Unauthorized("Not authenticated")
    try:
        claims = tokens.verify(credentials.credentials)
    except TokenError as e:
        logger.debug("Rejected access token: %s (%s)", type(e).__name__, e)
        raise Unauthorized("Invalid or expired token") from e
    return Identity(user_id=claims.subject_id, email=claims.email, role=claims.role)


def require_role(role: Role) -> RoleCheck:
    """Role check that raises Forbidden unless the caller has exactly this role."""

    def check(identity: Identity) -> None:
        if identity.role is not role:
            raise Forbidden(f"{role.value.capitalize()} access required")

    check.__name__ = f"require_{role.value}"
    return check


class GuardChain:
    """FastAPI dependency: authenticate, attach the identity to request.state, run checks."""

    def __init__(self, *checks: RoleCheck) -> None:
        self.checks = checks

    def __call__(
        self,
        request: Request,
        credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    ) -> Identity:
        identity = authenticate(credentials, request.app.state.tokens)
        request.state.identity = identity
        for check in self.checks:
            check(identity)
        return identity


authenticated = GuardChain()
admin_only = GuardChain(require_role(Role.ADMIN))

CurrentIdentity = Annotated[Identity, Depends(authenticated)]
AdminIdentity = Annotated[Identity, Depends(admin_only)]
