"""CSRF protection middleware (double-submit token in the X-XSRF-TOKEN header).

Mutating requests under /api must echo a token previously issued by
GET /api/csrf-token. Login, registration and OAuth callbacks are exempt:
a client cannot hold a token before it has a session, and those routes
are covered by the stricter auth rate limit instead.
"""

import logging
from collections.abc import Sequence

from fastapi import Request, Response, status
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import JSONResponse
from starlette.types import ASGIApp

from fittrack.core.request_utils import get_client_ip
from fittrack.services.csrf_tokens import REJECTION_MESSAGES, CsrfTokenStore, TokenStatus

logger = logging.getLogger(__name__)

CSRF_COOKIE_NAME = "XSRF-TOKEN"
CSRF_HEADER_NAME = "X-XSRF-TOKEN"

SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})

DEFAULT_EXEMPT_PATHS = [
    "/api/auth/login",
    "/api/auth/register",
    "/api/auth/oauth",
]


def is_exempt_path(path: str, exempt_paths: Sequence[str]) -> bool:
    """Exact or segment-boundary match, so "/api/auth/login-admin" is not exempt."""
    return any(path == p or path.startswith(p + "/") for p in exempt_paths)


class CsrfMiddleware(BaseHTTPMiddleware):
    """Reject mutating /api requests that lack a valid CSRF token.

    Failures are answered here with 403 {"message": reason}; nothing is
    raised into the application's exception handlers.
    """

    def __init__(
        self,
        app: ASGIApp,
        token_store: CsrfTokenStore,
        exempt_paths: Sequence[str] | None = None,
        protected_prefix: str = "/api",
    ) -> None:
        super().__init__(app)
        self.token_store = token_store
        self.exempt_paths = list(DEFAULT_EXEMPT_PATHS if exempt_paths is None else exempt_paths)
        self.protected_prefix = protected_prefix

    def _requires_check(self, request: Request) -> bool:
        if request.method in SAFE_METHODS:
            return False

        path = request.url.path
        prefix = self.protected_prefix
        if not (path == prefix or path.startswith(prefix + "/")):
            return False

        return not is_exempt_path(path, self.exempt_paths)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not self._requires_check(request):
            return await call_next(request)

        token = request.headers.get(CSRF_HEADER_NAME)
        result = self.token_store.validate(token)

        if result is not TokenStatus.VALID:
            logger.warning(
                "CSRF check failed",
                extra={
                    "client_ip": get_client_ip(request),
                    "method": request.method,
                    "path": request.url.path,
                    "reason": result.value,
                },
            )
            return JSONResponse(
                status_code=status.HTTP_403_FORBIDDEN,
                content={"message": REJECTION_MESSAGES[result]},
            )

        return await call_next(request)
