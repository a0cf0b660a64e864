"""
Shared dependencies for FastAPI endpoints.

"""

from authglue.core.dependencies.auth import (
    AppSettings,
    CurrentSession,
    Orchestrator,
    get_app_settings,
    get_current_session,
    get_login_orchestrator,
    get_session_issuer,
)

__all__ = [
    "get_app_settings",
    "get_current_session",
    "get_login_orchestrator",
    "get_session_issuer",
    # Type aliases
    "AppSettings",
    "CurrentSession",
    "Orchestrator",
]
