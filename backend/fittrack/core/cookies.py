"""Cookie attributes for responses."""

from dataclasses import dataclass
from typing import Literal

from starlette.responses import Response


@dataclass(frozen=True)
class CookieOptions:
    """Attributes attached to a Set-Cookie header."""

    http_only: bool = False
    secure: bool = False
    same_site: Literal["strict", "lax", "none"] | None = "lax"
    max_age: int | None = None
    domain: str | None = None
    path: str | None = "/"


def set_cookie(
    response: Response, name: str, value: str, options: CookieOptions | None = None
) -> None:
    """Add a Set-Cookie header; cookies already on the response are kept.

    Raises:
        ValueError: if SameSite=None is requested without Secure (browsers drop it).
    """
    opts = options or CookieOptions()
    if opts.same_site == "none" and not opts.secure:
        raise ValueError("SameSite=None cookies must also be Secure")

    response.set_cookie(
        name,
        value,
        max_age=opts.max_age,
        path=opts.path or "/",
        domain=opts.domain,
        secure=opts.secure,
        httponly=opts.http_only,
        samesite=opts.same_site,
    )
