from functools import lru_cache
from typing import Callable, Optional

import jwt
from fastapi import Depends, Header
from sqlalchemy.orm import Session

from api.core.config import get_settings
from api.core.database import get_db
from api.core.errors import Forbidden, Unauthorized
from api.models.user import User, UserRole


class IdentityGateway:
    """Turns a bearer credential into a stable user identifier.

    The identity provider signs JWTs; the core only ever reads the ``sub``
    claim and never looks at anything else in the credential.
    """

    def __init__(self, secret: str, algorithm: str = "HS256", audience: Optional[str] = None):
        self.secret = secret
        self.algorithm = algorithm
        self.audience = audience

    def verify(self, token: str) -> str:
        if not self.secret:
            raise Unauthorized("Identity gateway is not configured")
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                audience=self.audience,
                options={"require": ["sub"]},
            )
        except jwt.ExpiredSignatureError:
            raise Unauthorized("Token expired")
        except jwt.InvalidTokenError:
            raise Unauthorized("Unauthorized")
        return str(payload["sub"])


@lru_cache
def get_identity_gateway() -> IdentityGateway:
    settings = get_settings()
    return IdentityGateway(
        secret=settings.auth_jwt_secret,
        algorithm=settings.auth_jwt_algorithm,
        audience=settings.auth_jwt_audience,
    )


def bearer_token(authorization: Optional[str]) -> str:
    """Pull the token out of an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        raise Unauthorized("Authorization header required")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise Unauthorized("Unauthorized")
    return token.strip()


async def require_auth(
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
    gateway: IdentityGateway = Depends(get_identity_gateway),
) -> str:
    """Require a valid bearer credential; returns the caller's subject."""
    return gateway.verify(bearer_token(authorization))


def get_current_user(subject: str = Depends(require_auth), db: Session = Depends(get_db)) -> User:
    """Resolve the authenticated subject to its registered profile."""
    user = db.query(User).filter(User.auth_subject == subject).first()
    if not user:
        raise Forbidden("No profile is registered for this account")
    return user


def require_role(*roles: UserRole) -> Callable[..., User]:
    """Dependency factory: the current user must hold one of ``roles``."""

    def dependency(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise Forbidden("Forbidden")
        return user

    return dependency
