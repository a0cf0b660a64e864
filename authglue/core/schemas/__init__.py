"""
Schemas for provider payload validation and response serialization.
"""

from authglue.core.schemas.oauth import (
    GitHubEmail,
    GitHubUser,
    GoogleUserInfo,
    HealthResponse,
    ProviderResponse,
    SessionResponse,
    TokenResponse,
)

__all__ = [
    "ProviderResponse",
    "TokenResponse",
    "GoogleUserInfo",
    "GitHubUser",
    "GitHubEmail",
    "SessionResponse",
    "HealthResponse",
]
