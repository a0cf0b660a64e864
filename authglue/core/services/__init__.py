from authglue.core.services.login import LoginOrchestrator
from authglue.core.services.session import SessionCredential, SessionIssuer
from authglue.core.services.state import (
    LoginAttempt,
    StateCookieCodec,
    ensure_csprng_available,
    generate_state,
)

# OAuth providers
from authglue.core.services.oauth import (
    BaseOAuthProvider,
    GitHubOAuthService,
    GoogleOAuthService,
    ProviderProfile,
    ProviderRegistry,
    build_provider_registry,
)

__all__ = [
    "LoginOrchestrator",
    "SessionCredential",
    "SessionIssuer",
    "LoginAttempt",
    "StateCookieCodec",
    "ensure_csprng_available",
    "generate_state",
    "BaseOAuthProvider",
    "GitHubOAuthService",
    "GoogleOAuthService",
    "ProviderProfile",
    "ProviderRegistry",
    "build_provider_registry",
]
