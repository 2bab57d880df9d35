"""Redirect plain-HTTP requests to HTTPS (production only)."""

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import RedirectResponse


class HTTPSRedirectMiddleware(BaseHTTPMiddleware):
    """301 to the https:// URL unless the request already arrived over TLS.

    Unlike Starlette's built-in redirect middleware this honours
    X-Forwarded-Proto, since TLS usually terminates at the reverse proxy.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        forwarded_proto = request.headers.get("x-forwarded-proto", "")
        if request.url.scheme == "https" or forwarded_proto == "https":
            return await call_next(request)

        url = request.url.replace(scheme="https", port=None)
        return RedirectResponse(str(url), status_code=301)
