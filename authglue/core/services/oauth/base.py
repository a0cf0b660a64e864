"""
Base OAuth provider abstract class and the normalized provider profile.

Example usage:
    from authglue.core.services.oauth.base import BaseOAuthProvider, ProviderProfile

    class MyOAuthProvider(BaseOAuthProvider):
        provider_name = "my_provider"

        def build_authorization_url(self, state: str) -> str:
            ...

        async def exchange_code_for_profile(self, code: str) -> ProviderProfile:
            ...
"""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import ValidationError

from authglue.core.config import auth_logger
from authglue.core.enums import OAuthProviders
from authglue.core.exceptions.types import (
    ProfileFetchException,
    TokenExchangeException,
)
from authglue.core.schemas.oauth import TokenResponse


__all__ = [
    "NETWORK_ERRORS",
    "BaseOAuthProvider",
    "ProviderProfile",
    "make_external_id",
]


# Raised by a provider call that fails on the wire or misses its deadline
NETWORK_ERRORS = (httpx.RequestError, asyncio.TimeoutError)


def make_external_id(provider: str, native_id: str | int) -> str:
    """
    Qualify a provider-native user id with the provider name.

    Example:
        >>> make_external_id("google", "123")
        'google:123'
    """
    return f"{provider}:{native_id}"


@dataclass(frozen=True)
class ProviderProfile:
    """
    Normalized identity returned by a successful provider exchange.

    Attributes:
        external_id: Provider-qualified id, e.g. ``"github:583231"``.
        email: The selected email address, or None when the provider has none.
        display_name: Name to show in the UI.
        avatar_url: URL of the profile picture, if any.
        provider: The provider the identity came from.
    """

    external_id: str
    email: str | None
    display_name: str | None
    avatar_url: str | None
    provider: OAuthProviders

    def to_dict(self) -> dict[str, Any]:
        return {
            "external_id": self.external_id,
            "email": self.email,
            "display_name": self.display_name,
            "avatar_url": self.avatar_url,
            "provider": self.provider.value,
        }


class BaseOAuthProvider(ABC):
    """
    Abstract base class for OAuth providers.

    One instance per provider is created at startup with that provider's
    credentials and the exact callback URL registered with it. The same
    ``redirect_uri`` is sent in the authorization URL and in the token
    exchange; the provider rejects the exchange if they differ.

    Subclasses must implement:
        - provider_name: Class attribute with the provider enum member
        - build_authorization_url: Build the provider-hosted login URL
        - exchange_code_for_profile: Trade the code for a ProviderProfile
    """

    provider_name: OAuthProviders

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        timeout: float = 10.0,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    @property
    def name(self) -> str:
        return self.provider_name.value

    async def init(self) -> None:
        """
        Create the HTTP client used for provider calls.

        Every request made with it is bounded by ``timeout`` seconds.
        """
        await self.aclose()
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            limits=httpx.Limits(max_keepalive_connections=5, max_connections=10),
        )
        auth_logger.info(f"{type(self).__name__} initialized")

    async def aclose(self) -> None:
        """Close the HTTP client. Called on application shutdown."""
        if self._client is not None:
            try:
                await self._client.aclose()
            finally:
                self._client = None
                auth_logger.info(f"{type(self).__name__} closed")

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            await self.init()
            assert self._client is not None, "Client initialization failed"
        return self._client

    async def _call(self, request: Awaitable[httpx.Response]) -> httpx.Response:
        """
        Await one provider request under a deadline of ``timeout`` seconds.

        The httpx timeouts apply per network operation, so a provider
        trickling its body byte by byte never trips them. This deadline
        covers the whole request, body included.

        Raises:
            asyncio.TimeoutError: If the response is not complete in time.
        """
        return await asyncio.wait_for(request, timeout=self.timeout)

    @abstractmethod
    def build_authorization_url(self, state: str) -> str:
        """
        Build the provider-hosted login URL.

        Pure: no network call and no side effects.

        Args:
            state: The CSRF state token for this login attempt.

        Returns:
            str: The full authorization URL with query parameters.
        """

    @abstractmethod
    async def exchange_code_for_profile(self, code: str) -> ProviderProfile:
        """
        Exchange an authorization code for the user's normalized profile.

        Args:
            code: The authorization code from the OAuth callback.

        Returns:
            ProviderProfile: The normalized identity.

        Raises:
            TokenExchangeException: If no access token is returned.
            ProfileFetchException: If the profile cannot be retrieved.
        """

    def _parse_token_response(self, response: httpx.Response) -> TokenResponse:
        """
        Read the access token out of a token endpoint response.

        The raw body is logged for diagnosis and never put in the exception.

        Raises:
            TokenExchangeException: If the body carries no access token.
        """
        try:
            return TokenResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            auth_logger.error(
                f"{self.name} token exchange failed: status={response.status_code}, "
                f"response={response.text}"
            )
            raise TokenExchangeException(
                provider=self.name,
                details={"status_code": response.status_code},
            ) from e

    def _profile_fetch_failed(
        self, response: httpx.Response, what: str = "user info"
    ) -> ProfileFetchException:
        auth_logger.error(
            f"{self.name} {what} retrieval failed: status={response.status_code}, "
            f"response={response.text}"
        )
        return ProfileFetchException(
            provider=self.name,
            details={"status_code": response.status_code, "endpoint": what},
        )
