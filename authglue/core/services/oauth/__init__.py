"""
OAuth provider services.

This package contains OAuth provider implementations for login:
- BaseOAuthProvider: Abstract base class for OAuth providers
- GoogleOAuthService: Google OAuth 2.0 implementation
- GitHubOAuthService: GitHub OAuth implementation
- build_provider_registry: Lookup table of the configured providers

Example usage:
    from authglue.core.services.oauth import build_provider_registry

    providers = build_provider_registry(settings)
    google = providers["google"]

    url = google.build_authorization_url(state="random_state")
    profile = await google.exchange_code_for_profile(code="auth_code")
"""

from authglue.core.services.oauth.base import (
    BaseOAuthProvider,
    ProviderProfile,
    make_external_id,
)
from authglue.core.services.oauth.github import GitHubOAuthService, select_email
from authglue.core.services.oauth.google import GoogleOAuthService
from authglue.core.services.oauth.registry import (
    ProviderRegistry,
    build_provider_registry,
)

__all__ = [
    "BaseOAuthProvider",
    "ProviderProfile",
    "make_external_id",
    "GoogleOAuthService",
    "GitHubOAuthService",
    "select_email",
    "ProviderRegistry",
    "build_provider_registry",
]
