"""Access log line for API requests."""

import time

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from fittrack.core.logging import get_logger

logger = get_logger("requests")

MAX_LINE_LENGTH = 80


def format_request_line(method: str, path: str, status_code: int, duration_ms: int) -> str:
    line = f"{method} {path} {status_code} in {duration_ms}ms"
    if len(line) > MAX_LINE_LENGTH:
        line = line[: MAX_LINE_LENGTH - 1] + "…"
    return line


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log method, path, status and duration for every /api request."""

    def __init__(self, app, path_prefix: str = "/api") -> None:
        super().__init__(app)
        self.path_prefix = path_prefix

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        prefix = self.path_prefix
        if not (path == prefix or path.startswith(prefix + "/")):
            return await call_next(request)

        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = int((time.perf_counter() - start) * 1000)

        logger.info(format_request_line(request.method, path, response.status_code, duration_ms))
        return response
