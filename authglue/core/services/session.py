"""
Stateless session credentials.

A session is a JWT signed with the configured secret. It carries the
normalized provider profile plus issue and expiry times, and the server
keeps no record of it: validity is the signature and the ``exp`` claim.

Example usage:
    from authglue.core.services.session import SessionIssuer

    issuer = SessionIssuer(secret="...")
    credential = issuer.issue(profile)
    response.set_cookie("session", credential.token, ...)

    # Later
    credential = issuer.verify(request.cookies["session"])
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from authglue.core.config import auth_logger
from authglue.core.enums import OAuthProviders
from authglue.core.exceptions.types import (
    MissingSigningSecretException,
    SessionVerificationException,
)
from authglue.core.services.oauth.base import ProviderProfile


__all__ = ["SessionCredential", "SessionIssuer"]


_REQUIRED_CLAIMS = ["sub", "provider", "iat", "exp"]


@dataclass(frozen=True)
class SessionCredential:
    """
    A signed, time-limited assertion of identity.

    Attributes:
        external_id: Provider-qualified user id.
        email: Email address, if the provider returned one.
        display_name: Name to show in the UI.
        avatar_url: Profile picture URL.
        provider: The provider the identity came from.
        issued_at: When the credential was signed (UTC, whole seconds).
        expires_at: When it stops being accepted.
        token: The compact signed form stored in the cookie.
    """

    external_id: str
    email: str | None
    display_name: str | None
    avatar_url: str | None
    provider: OAuthProviders
    issued_at: datetime
    expires_at: datetime
    token: str

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or datetime.now(timezone.utc)) >= self.expires_at


class SessionIssuer:
    """
    Signs and verifies session credentials with a symmetric key.

    Args:
        secret: Signing secret. Must not be empty.
        algorithm: HMAC JWT algorithm, HS256 by default.
        ttl: Credential lifetime, 30 days by default.

    Raises:
        MissingSigningSecretException: If ``secret`` is empty. Raised while
            the application is being built, never per request.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        ttl: timedelta = timedelta(days=30),
    ):
        if not secret or not secret.strip():
            raise MissingSigningSecretException()
        if not algorithm.startswith("HS"):
            raise ValueError(f"Session signing needs an HMAC algorithm, got {algorithm}")

        self._secret = secret
        self.algorithm = algorithm
        self.ttl = ttl

    def issue(
        self, profile: ProviderProfile, now: datetime | None = None
    ) -> SessionCredential:
        """
        Sign a session credential for a provider profile.

        Args:
            profile: The normalized identity from the provider exchange.
            now: Issue time. Defaults to the current UTC time.

        Returns:
            SessionCredential: The credential, with its signed token.
        """
        issued_at = (now or datetime.now(timezone.utc)).replace(microsecond=0)
        expires_at = issued_at + self.ttl

        claims: dict[str, Any] = {
            "sub": profile.external_id,
            "email": profile.email,
            "name": profile.display_name,
            "picture": profile.avatar_url,
            "provider": profile.provider.value,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        token = jwt.encode(claims, self._secret, algorithm=self.algorithm)

        auth_logger.info(
            f"Session issued: sub={profile.external_id}, "
            f"expires_at={expires_at.isoformat()}"
        )

        return SessionCredential(
            external_id=profile.external_id,
            email=profile.email,
            display_name=profile.display_name,
            avatar_url=profile.avatar_url,
            provider=profile.provider,
            issued_at=issued_at,
            expires_at=expires_at,
            token=token,
        )

    def verify(self, token: str | None) -> SessionCredential:
        """
        Verify a session token and rebuild its credential.

        Args:
            token: The compact token from the ``session`` cookie.

        Returns:
            SessionCredential: The verified credential.

        Raises:
            SessionVerificationException: If the token is missing, malformed,
                signed with another key, missing claims, or expired.
        """
        if not token:
            raise SessionVerificationException("No session.")

        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": _REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError as e:
            auth_logger.info("Session verification failed: token has expired")
            raise SessionVerificationException() from e
        except jwt.InvalidTokenError as e:
            auth_logger.warning(
                f"Session verification failed: invalid token - {type(e).__name__}"
            )
            raise SessionVerificationException() from e

        try:
            provider = OAuthProviders(claims["provider"])
        except ValueError as e:
            auth_logger.warning(
                f"Session verification failed: unknown provider {claims['provider']!r}"
            )
            raise SessionVerificationException() from e

        return SessionCredential(
            external_id=claims["sub"],
            email=claims.get("email"),
            display_name=claims.get("name"),
            avatar_url=claims.get("picture"),
            provider=provider,
            issued_at=datetime.fromtimestamp(claims["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
            token=token,
        )
