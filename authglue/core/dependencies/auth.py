"""
Dependencies for FastAPI endpoints of the login service.

- Reaching the settings, orchestrator and session issuer built at startup
- Reading and verifying the ``session`` cookie

Example usage:
    from authglue.core.dependencies import CurrentSession

    @router.get("/me")
    async def me(session: CurrentSession):
        return {"id": session.external_id}
"""

from typing import Annotated

from fastapi import Cookie, Depends, Request

from authglue.core.config import Settings
from authglue.core.services.login import LoginOrchestrator
from authglue.core.services.session import SessionCredential, SessionIssuer
from authglue.core.utils import SESSION_COOKIE_NAME


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_login_orchestrator(request: Request) -> LoginOrchestrator:
    return request.app.state.login_orchestrator


def get_session_issuer(request: Request) -> SessionIssuer:
    return request.app.state.session_issuer


async def get_current_session(
    issuer: Annotated[SessionIssuer, Depends(get_session_issuer)],
    session: Annotated[str | None, Cookie(alias=SESSION_COOKIE_NAME)] = None,
) -> SessionCredential:
    """
    Verify the ``session`` cookie.

    Returns:
        SessionCredential: The verified session.

    Raises:
        SessionVerificationException: 401 if the cookie is missing, has a
            bad signature, or has expired.
    """
    return issuer.verify(session)


AppSettings = Annotated[Settings, Depends(get_app_settings)]
Orchestrator = Annotated[LoginOrchestrator, Depends(get_login_orchestrator)]
CurrentSession = Annotated[SessionCredential, Depends(get_current_session)]
