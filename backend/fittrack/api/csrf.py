"""CSRF token bootstrap endpoint."""

from fastapi import APIRouter, Depends, Response

from fittrack.api.deps import get_app_settings, get_csrf_store
from fittrack.core.config import Settings
from fittrack.core.cookies import CookieOptions, set_cookie
from fittrack.middleware.csrf import CSRF_COOKIE_NAME
from fittrack.schemas.csrf import CsrfTokenResponse
from fittrack.services.csrf_tokens import CsrfTokenStore

router = APIRouter(tags=["csrf"])


def csrf_cookie_options(settings: Settings, ttl_seconds: int) -> CookieOptions:
    # Readable by client script: the SPA copies it into the X-XSRF-TOKEN header
    return CookieOptions(
        http_only=False,
        secure=settings.is_production,
        same_site="lax",
        max_age=ttl_seconds,
        path="/",
    )


def issue_csrf_token(response: Response, store: CsrfTokenStore, settings: Settings) -> str:
    """Record a new token and attach it to the response as the XSRF-TOKEN cookie."""
    token = store.issue_token()
    set_cookie(response, CSRF_COOKIE_NAME, token, csrf_cookie_options(settings, store.ttl_seconds))
    return token


@router.get("/csrf-token", response_model=CsrfTokenResponse)
async def get_csrf_token(
    response: Response,
    store: CsrfTokenStore = Depends(get_csrf_store),
    settings: Settings = Depends(get_app_settings),
) -> CsrfTokenResponse:
    """Issue a token in both the cookie and the JSON body."""
    token = issue_csrf_token(response, store, settings)
    return CsrfTokenResponse(csrf_token=token)
