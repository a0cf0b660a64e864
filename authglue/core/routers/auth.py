"""
Authentication router for the OAuth login flow.

This module provides endpoints for:
- Starting a login with a provider (Google, GitHub)
- Handling the provider callback and issuing the session cookie
- Reading the current session
- Signing out

All endpoints are prefixed with /auth when mounted in the main app.
"""

from typing import Annotated

from fastapi import APIRouter, Cookie, Header, Query, status
from fastapi.responses import RedirectResponse

from authglue.core.config import auth_logger
from authglue.core.dependencies import AppSettings, CurrentSession, Orchestrator
from authglue.core.exceptions.types import BadRequestException, ForbiddenException
from authglue.core.schemas.oauth import SessionResponse
from authglue.core.utils import (
    STATE_COOKIE_NAME,
    clear_session_cookie,
    clear_state_cookie,
    is_trusted_origin,
    set_session_cookie,
    set_state_cookie,
)


router = APIRouter()


# =============================================================================
# Session Endpoints
# =============================================================================


@router.get(
    "/me",
    response_model=SessionResponse,
    summary="Current session",
    responses={
        401: {"description": "No session, or the session is invalid or expired"},
    },
)
async def get_me(session: CurrentSession) -> SessionResponse:
    """
    Return the identity carried by the ``session`` cookie.

    Verification is purely cryptographic: signature and expiry. There is
    no user store to consult.
    """
    return SessionResponse(
        id=session.external_id,
        email=session.email,
        name=session.display_name,
        picture=session.avatar_url,
        provider=session.provider,
        issued_at=session.issued_at,
        expires_at=session.expires_at,
    )


@router.post(
    "/logout",
    status_code=status.HTTP_302_FOUND,
    summary="Sign out",
    responses={
        403: {"description": "Request made from an untrusted origin"},
    },
)
async def logout(
    settings: AppSettings,
    origin: Annotated[str | None, Header()] = None,
) -> RedirectResponse:
    """
    Drop the session cookie and send the browser back to the app.

    Browsers send ``Origin`` on every cross-site POST, so a request whose
    origin is neither this service nor an allowed front-end is refused.

    Raises:
        ForbiddenException: 403 for a request from an untrusted origin.
    """
    if origin is not None and not is_trusted_origin(origin, settings):
        auth_logger.warning(f"Logout refused for origin {origin[:128]!r}")
        raise ForbiddenException("Cross-site logout is not allowed.")

    response = RedirectResponse(
        url=settings.APP_ROOT_URL, status_code=status.HTTP_302_FOUND
    )
    clear_session_cookie(response, settings)
    auth_logger.info("Session cookie cleared on logout")
    return response


# =============================================================================
# OAuth Endpoints
# =============================================================================


@router.get(
    "/{provider}",
    status_code=status.HTTP_302_FOUND,
    summary="Start OAuth login",
    responses={
        302: {"description": "Redirect to the provider's login page"},
        404: {"description": "Provider unknown or not configured"},
    },
)
async def oauth_start(
    provider: str,
    settings: AppSettings,
    orchestrator: Orchestrator,
) -> RedirectResponse:
    """
    Begin the OAuth 2.0 authorization code flow.

    A fresh state token is generated, stored in the signed ``oauth_state``
    cookie (10 minutes), and sent to the provider in the redirect URL.

    Args:
        provider (str): ``google`` or ``github``.

    Returns:
        RedirectResponse: 302 to the provider's authorization endpoint.

    Raises:
        ProviderNotConfiguredException: 404 if the provider is unknown or
            its credentials are not configured.
    """
    _, cookie_value, authorization_url = orchestrator.begin(provider)

    response = RedirectResponse(
        url=authorization_url, status_code=status.HTTP_302_FOUND
    )
    set_state_cookie(response, cookie_value, settings)
    return response


@router.get(
    "/{provider}/callback",
    status_code=status.HTTP_302_FOUND,
    summary="OAuth callback",
    responses={
        302: {"description": "Session issued, redirect to the application"},
        400: {"description": "The provider did not grant authorization"},
        403: {"description": "State mismatch, the login must be restarted"},
        404: {"description": "Provider unknown or not configured"},
        500: {"description": "Token exchange or profile retrieval failed"},
    },
)
async def oauth_callback(
    provider: str,
    settings: AppSettings,
    orchestrator: Orchestrator,
    code: Annotated[
        str | None, Query(description="Authorization code from provider")
    ] = None,
    state: Annotated[
        str | None, Query(description="State parameter for CSRF validation")
    ] = None,
    error: Annotated[
        str | None,
        Query(description="Error code from provider (e.g., access_denied)"),
    ] = None,
    oauth_state: Annotated[str | None, Cookie(alias=STATE_COOKIE_NAME)] = None,
) -> RedirectResponse:
    """
    Complete the OAuth flow.

    The ``state`` query parameter is checked against the ``oauth_state``
    cookie before anything else. On success the session cookie is set, the
    state cookie is cleared, and the browser goes to the application root.

    Raises:
        CsrfStateMismatchException: 403 if the state is missing or differs.
        BadRequestException: 400 if the provider returned an error or no code.
        OAuthException: 500 if the exchange or profile retrieval fails.
    """
    if error or not code:
        orchestrator.get_provider(provider)
        orchestrator.validate_state(provider, state, oauth_state)
        auth_logger.info(
            f"OAuth callback: provider {provider} returned no code "
            f"(error={(error or '')[:64]!r})"
        )
        raise BadRequestException(
            message="Authorization was not granted. Please try again."
        )

    credential = await orchestrator.complete(
        provider=provider,
        code=code,
        state=state,
        state_cookie=oauth_state,
    )

    response = RedirectResponse(
        url=settings.APP_ROOT_URL, status_code=status.HTTP_302_FOUND
    )
    set_session_cookie(response, credential.token, settings)
    clear_state_cookie(response, settings)
    orchestrator.finish(provider)
    return response
