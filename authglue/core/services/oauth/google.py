"""
Google OAuth 2.0 provider implementation.

Example usage:
    from authglue.core.services.oauth.google import GoogleOAuthService

    google = GoogleOAuthService(
        client_id="...",
        client_secret="...",
        redirect_uri="https://app.com/auth/google/callback",
    )
    url = google.build_authorization_url(state="random_state_token")

    # After user authorization
    profile = await google.exchange_code_for_profile(code="4/0auth_code")
    print(profile.external_id)  # google:1234567890

    await google.aclose()
"""

from urllib.parse import urlencode

import httpx
from pydantic import ValidationError

from authglue.core.config import auth_logger
from authglue.core.enums import OAuthProviders
from authglue.core.exceptions.types import (
    ProfileFetchException,
    TokenExchangeException,
)
from authglue.core.schemas.oauth import GoogleUserInfo
from authglue.core.services.oauth.base import (
    NETWORK_ERRORS,
    BaseOAuthProvider,
    ProviderProfile,
    make_external_id,
)


__all__ = ["GoogleOAuthService"]


class GoogleOAuthService(BaseOAuthProvider):
    """
    Google OAuth 2.0 service implementation.

    Google API Endpoints:
        - Authorization: https://accounts.google.com/o/oauth2/v2/auth
        - Token: https://oauth2.googleapis.com/token
        - User Info: https://www.googleapis.com/oauth2/v2/userinfo

    Scopes requested:
        - openid: OpenID Connect authentication
        - email: User's email address
        - profile: User's basic profile information
    """

    provider_name = OAuthProviders.GOOGLE

    # Google OAuth endpoints
    _AUTHORIZATION_URL: str = "https://accounts.google.com/o/oauth2/v2/auth"
    _TOKEN_URL: str = "https://oauth2.googleapis.com/token"
    _USERINFO_URL: str = "https://www.googleapis.com/oauth2/v2/userinfo"

    # OAuth scopes
    _SCOPES: list[str] = ["openid", "email", "profile"]

    def build_authorization_url(self, state: str) -> str:
        """
        Generate Google OAuth authorization URL.

        Args:
            state: A random state token for CSRF protection.

        Returns:
            str: The full authorization URL with query parameters.

        Example:
            >>> url = google.build_authorization_url(state="abc123")
            >>> # Redirect user to this URL
        """
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": " ".join(self._SCOPES),
            "state": state,
            "access_type": "offline",
            "prompt": "consent",
        }
        return f"{self._AUTHORIZATION_URL}?{urlencode(params)}"

    async def _exchange_code_for_access_token(
        self, client: httpx.AsyncClient, code: str
    ) -> str:
        data = {
            "code": code,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "redirect_uri": self.redirect_uri,
            "grant_type": "authorization_code",
        }

        try:
            response = await self._call(client.post(self._TOKEN_URL, data=data))
        except NETWORK_ERRORS as e:
            auth_logger.error(f"Google token exchange network error: {e!r}")
            raise TokenExchangeException(
                provider=self.name, details={"error": type(e).__name__}
            ) from e

        tokens = self._parse_token_response(response)
        auth_logger.info("Google token exchange successful")
        return tokens.access_token

    async def exchange_code_for_profile(self, code: str) -> ProviderProfile:
        """
        Exchange the authorization code and fetch the Google profile.

        Two sequential calls: the token endpoint, then the userinfo
        endpoint with the access token obtained from the first.

        Args:
            code: The authorization code from the OAuth callback.

        Returns:
            ProviderProfile: external_id ``google:<id>``, email, name, picture.

        Raises:
            TokenExchangeException: If no access token is returned.
            ProfileFetchException: If the userinfo call fails.
        """
        client = await self._get_client()
        access_token = await self._exchange_code_for_access_token(client, code)

        headers = {"Authorization": f"Bearer {access_token}"}
        try:
            response = await self._call(
                client.get(self._USERINFO_URL, headers=headers)
            )
        except NETWORK_ERRORS as e:
            auth_logger.error(f"Google user info network error: {e!r}")
            raise ProfileFetchException(
                provider=self.name, details={"error": type(e).__name__}
            ) from e

        if not response.is_success:
            raise self._profile_fetch_failed(response)

        try:
            user_info = GoogleUserInfo.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise self._profile_fetch_failed(response) from e

        auth_logger.info(f"Google user info retrieved: user_id={user_info.id}")

        return ProviderProfile(
            external_id=make_external_id(self.name, user_info.id),
            email=user_info.email,
            display_name=user_info.name,
            avatar_url=user_info.picture,
            provider=self.provider_name,
        )
