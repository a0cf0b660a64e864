from authglue.core.config import Settings, auth_logger
from authglue.core.enums import OAuthProviders
from authglue.core.services.oauth.base import BaseOAuthProvider
from authglue.core.services.oauth.github import GitHubOAuthService
from authglue.core.services.oauth.google import GoogleOAuthService


__all__ = ["ProviderRegistry", "build_provider_registry"]


ProviderRegistry = dict[str, BaseOAuthProvider]


def build_provider_registry(settings: Settings) -> ProviderRegistry:
    """
    Build the provider lookup table used by the login routes.

    A provider is registered only when both its client id and secret are
    set. Its routes answer 404 otherwise; the other providers are unaffected.

    Args:
        settings: Application settings.

    Returns:
        ProviderRegistry: Adapters keyed by provider name.
    """
    registry: ProviderRegistry = {}

    if settings.GOOGLE_CLIENT_ID and settings.GOOGLE_CLIENT_SECRET:
        registry[OAuthProviders.GOOGLE.value] = GoogleOAuthService(
            client_id=settings.GOOGLE_CLIENT_ID,
            client_secret=settings.GOOGLE_CLIENT_SECRET,
            redirect_uri=settings.callback_url(OAuthProviders.GOOGLE.value),
            timeout=settings.OAUTH_HTTP_TIMEOUT_SECONDS,
        )
    else:
        auth_logger.warning("Google credentials missing; Google login disabled")

    if settings.GITHUB_CLIENT_ID and settings.GITHUB_CLIENT_SECRET:
        registry[OAuthProviders.GITHUB.value] = GitHubOAuthService(
            client_id=settings.GITHUB_CLIENT_ID,
            client_secret=settings.GITHUB_CLIENT_SECRET,
            redirect_uri=settings.callback_url(OAuthProviders.GITHUB.value),
            timeout=settings.OAUTH_HTTP_TIMEOUT_SECONDS,
            user_agent=settings.GITHUB_USER_AGENT,
        )
    else:
        auth_logger.warning("GitHub credentials missing; GitHub login disabled")

    return registry
