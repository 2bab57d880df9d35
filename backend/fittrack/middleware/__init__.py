"""Middleware module for FitTrack backend."""

from fittrack.middleware.csrf import CsrfMiddleware
from fittrack.middleware.https_redirect import HTTPSRedirectMiddleware
from fittrack.middleware.rate_limit import (
    RateLimiter,
    RateLimitMiddleware,
    RateLimitPolicy,
    build_policies,
)
from fittrack.middleware.request_logging import RequestLoggingMiddleware
from fittrack.middleware.security_headers import SecurityHeadersMiddleware

__all__ = [
    "CsrfMiddleware",
    "HTTPSRedirectMiddleware",
    "RateLimiter",
    "RateLimitMiddleware",
    "RateLimitPolicy",
    "RequestLoggingMiddleware",
    "SecurityHeadersMiddleware",
    "build_policies",
]
