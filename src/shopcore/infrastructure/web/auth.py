"""AuthGate: resolves a request's bearer credential to an owner id.

Identity verification itself is someone else's job; the core only
needs an ``owner_id``. The default gate looks tokens up in a static
table taken from configuration.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Annotated

from fastapi import Header, HTTPException, Request

from shopcore.infrastructure.logging import bind_context


class AuthGate(ABC):

    @abstractmethod
    def resolve(self, token: str) -> str | None:
        """Return the owner id for ``token``, or None if it is not valid."""


class StaticTokenAuthGate(AuthGate):

    def __init__(self, tokens: dict[str, str]) -> None:
        self._tokens = dict(tokens)

    def resolve(self, token: str) -> str | None:
        return self._tokens.get(token)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=401,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def current_owner(
    request: Request,
    authorization: Annotated[str | None, Header()] = None,
) -> str:
    """FastAPI dependency: the owner id behind the bearer token."""
    if not authorization:
        raise _unauthorized("Missing bearer token")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise _unauthorized("Malformed authorization header")

    gate: AuthGate = request.app.state.auth_gate
    owner_id = gate.resolve(token.strip())
    if owner_id is None:
        raise _unauthorized("Invalid bearer token")

    bind_context(owner_id=owner_id)
    return owner_id
