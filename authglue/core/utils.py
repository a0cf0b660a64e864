"""
Cookie helpers for the login flow.

Both cookies are HttpOnly. ``Secure`` is set in production, where the
session cookie also uses ``SameSite=None`` so the front-end can be served
from another site; development keeps ``Lax`` so it works over plain http.
"""

from typing import Literal
from urllib.parse import urlparse

from fastapi import Response

from authglue.core.config import Settings


STATE_COOKIE_NAME = "oauth_state"
SESSION_COOKIE_NAME = "session"


def session_same_site(settings: Settings) -> Literal["lax", "none"]:
    return "none" if settings.is_production else "lax"


def _origin_of(url: str) -> str:
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}".lower()


def is_trusted_origin(origin: str, settings: Settings) -> bool:
    """True for this service's own origin or one of CORS_ALLOW_ORIGINS."""
    trusted = {_origin_of(settings.BASE_URL)}
    trusted.update(_origin_of(allowed) for allowed in settings.CORS_ALLOW_ORIGINS)
    return origin.rstrip("/").lower() in trusted


def set_state_cookie(response: Response, value: str, settings: Settings) -> None:
    """Store the signed login attempt for the callback to read back."""
    response.set_cookie(
        key=STATE_COOKIE_NAME,
        value=value,
        max_age=settings.STATE_TTL_SECONDS,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        domain=settings.COOKIE_DOMAIN,
    )


def clear_state_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=STATE_COOKIE_NAME,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        domain=settings.COOKIE_DOMAIN,
    )


def set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    """Attach the signed session credential, valid for SESSION_TTL_DAYS."""
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.SESSION_TTL_DAYS * 24 * 3600,
        httponly=True,
        secure=settings.is_production,
        samesite=session_same_site(settings),
        domain=settings.COOKIE_DOMAIN,
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=SESSION_COOKIE_NAME,
        httponly=True,
        secure=settings.is_production,
        samesite=session_same_site(settings),
        domain=settings.COOKIE_DOMAIN,
    )


__all__ = [
    "STATE_COOKIE_NAME",
    "SESSION_COOKIE_NAME",
    "session_same_site",
    "is_trusted_origin",
    "set_state_cookie",
    "clear_state_cookie",
    "set_session_cookie",
    "clear_session_cookie",
]
