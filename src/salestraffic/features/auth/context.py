"""Per-request security context.

The authentication middleware creates an empty ``SecurityContext`` for every
request and stores it on ``request.state``; route dependencies read it from
there. Nothing here is process-global.
"""
from typing import Optional

from fastapi import HTTPException, Request, status

from .schemas import AuthenticatedPrincipal

STATE_ATTR = "security_context"


class SecurityContext:
    def __init__(self):
        self._principal: Optional[AuthenticatedPrincipal] = None

    @property
    def principal(self) -> Optional[AuthenticatedPrincipal]:
        return self._principal

    @property
    def is_authenticated(self) -> bool:
        return self._principal is not None

    def authenticate(self, principal: AuthenticatedPrincipal) -> None:
        if self._principal is not None:
            raise RuntimeError("Security context already holds an identity")
        self._principal = principal


def bind_security_context(request: Request) -> SecurityContext:
    context = SecurityContext()
    setattr(request.state, STATE_ATTR, context)
    return context


def get_security_context(request: Request) -> SecurityContext:
    context = getattr(request.state, STATE_ATTR, None)
    if context is None:
        # Reached without the middleware (e.g. a bare test app)
        context = bind_security_context(request)
    return context


def get_current_principal(request: Request) -> AuthenticatedPrincipal:
    context = get_security_context(request)
    if not context.is_authenticated:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return context.principal
