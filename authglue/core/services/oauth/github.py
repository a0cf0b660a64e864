"""
GitHub OAuth provider implementation.

Example usage:
    from authglue.core.services.oauth.github import GitHubOAuthService

    github = GitHubOAuthService(
        client_id="...",
        client_secret="...",
        redirect_uri="https://app.com/auth/github/callback",
    )
    url = github.build_authorization_url(state="random_state_token")

    # After user authorization
    profile = await github.exchange_code_for_profile(code="auth_code")
    print(profile.email)

    await github.aclose()
"""

from typing import Any
from urllib.parse import urlencode

import httpx
from pydantic import TypeAdapter, ValidationError

from authglue.core.config import auth_logger
from authglue.core.enums import OAuthProviders
from authglue.core.exceptions.types import (
    ProfileFetchException,
    TokenExchangeException,
)
from authglue.core.schemas.oauth import GitHubEmail, GitHubUser
from authglue.core.services.oauth.base import (
    NETWORK_ERRORS,
    BaseOAuthProvider,
    ProviderProfile,
    make_external_id,
)


__all__ = ["GitHubOAuthService", "select_email"]


_emails_adapter = TypeAdapter(list[GitHubEmail])


def select_email(emails: list[GitHubEmail]) -> str | None:
    """
    Pick the email to put in the session.

    The first address flagged both primary and verified wins. Otherwise the
    first address in the list is used, and an empty list gives None.

    Example:
        >>> select_email([
        ...     GitHubEmail(email="a@x.com", primary=False, verified=True),
        ...     GitHubEmail(email="b@x.com", primary=True, verified=True),
        ... ])
        'b@x.com'
    """
    for entry in emails:
        if entry.primary and entry.verified:
            return entry.email
    if emails:
        return emails[0].email
    return None


class GitHubOAuthService(BaseOAuthProvider):
    """
    GitHub OAuth service implementation.

    GitHub API Endpoints:
        - Authorization: https://github.com/login/oauth/authorize
        - Token: https://github.com/login/oauth/access_token
        - User: https://api.github.com/user
        - Emails: https://api.github.com/user/emails

    Scopes requested:
        - read:user: Read user profile data
        - user:email: Access user email addresses, which ``/user`` omits
          when the user keeps them private
    """

    provider_name = OAuthProviders.GITHUB

    # GitHub OAuth endpoints
    _AUTHORIZATION_URL: str = "https://github.com/login/oauth/authorize"
    _TOKEN_URL: str = "https://github.com/login/oauth/access_token"
    _USER_URL: str = "https://api.github.com/user"
    _EMAILS_URL: str = "https://api.github.com/user/emails"

    # OAuth scopes
    _SCOPES: list[str] = ["read:user", "user:email"]

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        timeout: float = 10.0,
        user_agent: str = "authglue",
    ):
        super().__init__(client_id, client_secret, redirect_uri, timeout)
        # GitHub's API rejects requests without a User-Agent
        self.user_agent = user_agent

    def build_authorization_url(self, state: str) -> str:
        """
        Generate GitHub OAuth authorization URL.

        Args:
            state: A random state token for CSRF protection.

        Returns:
            str: The full authorization URL with query parameters.
        """
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "scope": " ".join(self._SCOPES),
            "state": state,
        }
        return f"{self._AUTHORIZATION_URL}?{urlencode(params)}"

    def _api_headers(self, access_token: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": self.user_agent,
        }

    async def _exchange_code_for_access_token(
        self, client: httpx.AsyncClient, code: str
    ) -> str:
        data = {
            "code": code,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "redirect_uri": self.redirect_uri,
        }
        headers = {"Accept": "application/json", "User-Agent": self.user_agent}

        try:
            response = await self._call(
                client.post(self._TOKEN_URL, data=data, headers=headers)
            )
        except NETWORK_ERRORS as e:
            auth_logger.error(f"GitHub token exchange network error: {e!r}")
            raise TokenExchangeException(
                provider=self.name, details={"error": type(e).__name__}
            ) from e

        # GitHub reports a bad code as 200 with an "error" body, which has
        # no access_token and is rejected by the parser
        tokens = self._parse_token_response(response)
        auth_logger.info("GitHub token exchange successful")
        return tokens.access_token

    async def _get_user(
        self, client: httpx.AsyncClient, access_token: str
    ) -> GitHubUser:
        try:
            response = await self._call(
                client.get(self._USER_URL, headers=self._api_headers(access_token))
            )
        except NETWORK_ERRORS as e:
            auth_logger.error(f"GitHub user info network error: {e!r}")
            raise ProfileFetchException(
                provider=self.name, details={"error": type(e).__name__}
            ) from e

        if not response.is_success:
            raise self._profile_fetch_failed(response)

        try:
            return GitHubUser.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise self._profile_fetch_failed(response) from e

    async def _get_emails(
        self, client: httpx.AsyncClient, access_token: str
    ) -> list[GitHubEmail]:
        """
        Fetch the user's email addresses.

        A failed or malformed response degrades to an empty list so the
        login still completes, just without an email.
        """
        try:
            response = await self._call(
                client.get(self._EMAILS_URL, headers=self._api_headers(access_token))
            )
        except NETWORK_ERRORS as e:
            auth_logger.error(f"GitHub emails network error: {e!r}")
            raise ProfileFetchException(
                provider=self.name, details={"error": type(e).__name__}
            ) from e

        if not response.is_success:
            auth_logger.warning(
                f"Failed to fetch GitHub emails: status={response.status_code}, "
                f"response={response.text}"
            )
            return []

        try:
            payload: Any = response.json()
            return _emails_adapter.validate_python(payload)
        except (ValueError, ValidationError):
            auth_logger.warning(
                f"Unexpected GitHub emails payload: response={response.text}"
            )
            return []

    async def exchange_code_for_profile(self, code: str) -> ProviderProfile:
        """
        Exchange the authorization code and fetch the GitHub profile.

        Three sequential calls: the token endpoint, ``/user`` and
        ``/user/emails``. The email comes from the emails list, see
        ``select_email``.

        Args:
            code: The authorization code from the OAuth callback.

        Returns:
            ProviderProfile: external_id ``github:<id>``, selected email,
            name (falling back to the login) and avatar URL.

        Raises:
            TokenExchangeException: If no access token is returned.
            ProfileFetchException: If the ``/user`` call fails.
        """
        client = await self._get_client()
        access_token = await self._exchange_code_for_access_token(client, code)

        user = await self._get_user(client, access_token)
        emails = await self._get_emails(client, access_token)
        email = select_email(emails)

        auth_logger.info(
            f"GitHub user info retrieved: user_id={user.id}, "
            f"email_found={email is not None}"
        )

        return ProviderProfile(
            external_id=make_external_id(self.name, user.id),
            email=email,
            display_name=user.name or user.login,
            avatar_url=user.avatar_url,
            provider=self.provider_name,
        )
