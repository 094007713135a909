"""Authentication and authorization utilities.

Operators authenticate with bearer tokens issued by the hosted auth
provider. Tokens are only verified here; this service never issues them.
"""

from dataclasses import dataclass
from typing import Annotated, Any

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from rbac_api.config import get_settings
from rbac_api.exceptions import AuthenticationError, AuthorizationError

ANONYMOUS_ROLE = "anon"

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Operator:
    """The caller performing administrative operations."""

    subject: str
    email: str | None = None
    role: str | None = None

    @property
    def is_anonymous(self) -> bool:
        return self.role == ANONYMOUS_ROLE


# Used when authentication is switched off for local development
DEVELOPMENT_OPERATOR = Operator(subject="development", role="service")


def decode_token(token: str) -> dict[str, Any]:
    """Decode and verify a JWT token.

    Args:
        token: JWT token string

    Returns:
        Token payload

    Raises:
        AuthenticationError: If token is invalid or expired
    """
    settings = get_settings()

    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
        )
    except JWTError as e:
        raise AuthenticationError("Invalid or expired token") from e


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)] = None,
) -> Operator:
    """Get the current operator from the bearer token.

    Args:
        credentials: HTTP Bearer credentials (optional when auth is disabled)

    Returns:
        Operator for the token subject

    Raises:
        AuthenticationError: If the token is missing, invalid or has no subject
    """
    if not get_settings().auth_enabled:
        return DEVELOPMENT_OPERATOR

    if credentials is None:
        raise AuthenticationError()

    payload = decode_token(credentials.credentials)
    subject = payload.get("sub")
    if not subject:
        raise AuthenticationError("Invalid token payload")

    return Operator(subject=str(subject), email=payload.get("email"), role=payload.get("role"))


async def require_operator(
    user: Annotated[Operator, Depends(get_current_user)],
) -> Operator:
    """Require an authenticated, non-anonymous operator.

    Raises:
        AuthorizationError: If the token belongs to an anonymous session
    """
    if user.is_anonymous:
        raise AuthorizationError("Anonymous sessions cannot manage access control")
    return user


# Type alias for dependency injection
OperatorUser = Annotated[Operator, Depends(require_operator)]
