"""
Schemas for identity provider responses and the session endpoints.

Provider schemas ignore fields they do not know about, so additive changes
on the provider side are tolerated, but they require the fields the login
flow actually reads. A response missing one of them fails validation instead
of silently producing ``None``.
"""

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from authglue.core.enums import OAuthProviders


class ProviderResponse(BaseModel):
    """Base for payloads returned by an identity provider."""

    model_config = ConfigDict(extra="ignore")


class TokenResponse(ProviderResponse):
    """Token endpoint payload shared by Google and GitHub."""

    access_token: Annotated[str, Field(min_length=1)]
    token_type: str | None = None
    scope: str | None = None
    expires_in: int | None = None
    refresh_token: str | None = None
    id_token: str | None = None


class GoogleUserInfo(ProviderResponse):
    """Payload of Google's ``oauth2/v2/userinfo`` endpoint."""

    id: Annotated[str, Field(min_length=1)]
    email: str | None = None
    verified_email: bool | None = None
    name: str | None = None
    picture: str | None = None


class GitHubUser(ProviderResponse):
    """Payload of GitHub's ``/user`` endpoint."""

    id: int
    login: str
    name: str | None = None
    avatar_url: str | None = None


class GitHubEmail(ProviderResponse):
    """One entry of GitHub's ``/user/emails`` list."""

    email: str
    primary: bool = False
    verified: bool = False


class SessionResponse(BaseModel):
    """Identity carried by the current session cookie."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "github:583231",
                "email": "octocat@github.com",
                "name": "The Octocat",
                "picture": "https://avatars.githubusercontent.com/u/583231",
                "provider": "github",
                "issued_at": "2026-10-19T12:00:00Z",
                "expires_at": "2026-11-18T12:00:00Z",
            }
        }
    )

    id: Annotated[str, Field(description="Provider-qualified user id")]
    email: str | None
    name: str | None
    picture: str | None
    provider: OAuthProviders
    issued_at: datetime
    expires_at: datetime


class HealthResponse(BaseModel):
    status: str
    providers: list[str]
    version: str


__all__ = [
    "ProviderResponse",
    "TokenResponse",
    "GoogleUserInfo",
    "GitHubUser",
    "GitHubEmail",
    "SessionResponse",
    "HealthResponse",
]
