"""Caller identification.

Token verification and role lookup belong to the identity service; this
module only consumes its answer through ``IdentityProvider``.
"""

import logging
from typing import Protocol

from pydantic import BaseModel

from lesson_import.config import AppConfig
from lesson_import.errors import Forbidden, Unauthorized

logger = logging.getLogger(__name__)


class Caller(BaseModel):
    """An authenticated caller."""

    user_id: str
    role: str


class IdentityProvider(Protocol):
    """Resolves a bearer token into a caller, or None when it is not valid."""

    def resolve(self, token: str) -> Caller | None: ...


class StaticTokenIdentityProvider:
    """Identity provider backed by a fixed token table.

    Tokens come from ``auth.tokens`` in config.yaml; the
    ``LESSON_IMPORT_SERVICE_TOKEN`` environment variable adds an admin
    service caller.
    """

    def __init__(self, grants: dict[str, Caller]) -> None:
        self._grants = dict(grants)

    @classmethod
    def from_config(cls, config: AppConfig) -> "StaticTokenIdentityProvider":
        grants = {
            token: Caller(user_id=grant.user_id, role=grant.role)
            for token, grant in config.auth.tokens.items()
        }
        if config.service_token:
            grants[config.service_token] = Caller(user_id="service", role="admin")
        return cls(grants)

    def resolve(self, token: str) -> Caller | None:
        return self._grants.get(token)


def authorize(
    provider: IdentityProvider,
    allowed_roles: list[str],
    authorization: str | None,
) -> Caller:
    """Check an Authorization header and return the caller.

    Raises:
        Unauthorized: If the header is missing, malformed or the token is unknown.
        Forbidden: If the caller's role is not allowed.
    """
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise Unauthorized()

    caller = provider.resolve(token.strip())
    if caller is None:
        raise Unauthorized("Invalid or expired token")
    if caller.role not in allowed_roles:
        logger.warning("Caller %s with role %s was refused", caller.user_id, caller.role)
        raise Forbidden()
    return caller
