"""Request authentication and access control middleware.

``JwtAuthenticationMiddleware`` resolves a bearer token to a principal and
stores it in the request's security context. ``AccessControlMiddleware``
runs after it and rejects requests to non-public paths that arrived without
an identity.
"""
import logging
from typing import Awaitable, Callable, Iterable, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from .context import bind_security_context, get_security_context
from .schemas import AuthenticatedPrincipal
from .security import TokenVerifier

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "
SESSION_COOKIE = "session"

UserLookup = Callable[[str], Awaitable]


class JwtAuthenticationMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, token_verifier: TokenVerifier, user_lookup: UserLookup):
        super().__init__(app)
        self.token_verifier = token_verifier
        self.user_lookup = user_lookup

    async def dispatch(self, request: Request, call_next):
        context = bind_security_context(request)
        try:
            authorization_header = request.headers.get("Authorization")

            username: Optional[str] = None
            jwt_token: Optional[str] = None

            if authorization_header and authorization_header.startswith(BEARER_PREFIX):
                jwt_token = authorization_header[len(BEARER_PREFIX):]
                username = self.token_verifier.get_username_from_token(jwt_token)

            if username is not None and not context.is_authenticated:
                user = await self.user_lookup(username)

                if self.token_verifier.validate_token(jwt_token, user):
                    context.authenticate(
                        AuthenticatedPrincipal(
                            username=user.username,
                            authorities=list(user.authorities),
                            remote_address=request.client.host if request.client else None,
                            session_id=request.cookies.get(SESSION_COOKIE),
                        )
                    )
        except Exception as e:
            logger.error(f"An error occurred processing the request: {e}")
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"detail": "An internal error occurred"},
            )

        return await call_next(request)


class AccessControlMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, public_paths: Iterable[str]):
        super().__init__(app)
        self.public_paths = frozenset(public_paths)

    def is_public(self, path: str) -> bool:
        return path in self.public_paths

    async def dispatch(self, request: Request, call_next):
        if not self.is_public(request.url.path):
            if not get_security_context(request).is_authenticated:
                logger.info(f"Rejected unauthenticated request to {request.url.path}")
                return JSONResponse(
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    content={"detail": "Not authenticated"},
                    headers={"WWW-Authenticate": "Bearer"},
                )
        return await call_next(request)
