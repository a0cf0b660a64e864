"""
CSRF state tokens for the OAuth login flow.

Each login attempt gets a fresh random ``state`` value. The value travels to
the provider in the authorization URL and is kept by the browser in the
short-lived ``oauth_state`` cookie. The cookie holds the attempt signed with
itsdangerous, so the server can check its age and provider without storing
anything.

Example usage:
    from authglue.core.services.state import LoginAttempt, StateCookieCodec

    codec = StateCookieCodec(secret_key="...", max_age_seconds=600)
    attempt = LoginAttempt(provider="google")
    cookie_value = codec.dumps(attempt)

    # On the callback
    stored = codec.loads(request.cookies.get("oauth_state"))
"""

import secrets
from dataclasses import dataclass, field
from datetime import datetime, timezone

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from authglue.core.config import auth_logger


__all__ = [
    "STATE_BYTES",
    "LoginAttempt",
    "StateCookieCodec",
    "ensure_csprng_available",
    "generate_state",
    "states_match",
]

# 32 bytes = 256 bits of entropy, 43 URL-safe characters
STATE_BYTES = 32


def generate_state(nbytes: int = STATE_BYTES) -> str:
    """
    Generate a cryptographically secure, URL-safe state token.

    Args:
        nbytes: Number of random bytes. Must be at least 16 (128 bits).

    Returns:
        str: A URL-safe base64 string without padding.

    Example:
        >>> len(generate_state())
        43
    """
    if nbytes < 16:
        raise ValueError("State tokens need at least 16 random bytes")
    return secrets.token_urlsafe(nbytes)


def ensure_csprng_available() -> None:
    """
    Fail fast when the OS randomness source is unavailable.

    Raises:
        RuntimeError: If no cryptographically secure source can be read.
    """
    try:
        secrets.token_bytes(STATE_BYTES)
    except NotImplementedError as e:
        raise RuntimeError(
            "No cryptographically secure random source is available"
        ) from e


def states_match(expected: str | None, received: str | None) -> bool:
    """Both values present and byte-equal, compared in constant time."""
    if not expected or not received:
        return False
    return secrets.compare_digest(expected.encode("utf-8"), received.encode("utf-8"))


@dataclass(frozen=True)
class LoginAttempt:
    """One pending login, alive between the redirect and the callback."""

    provider: str
    state: str = field(default_factory=generate_state)
    created_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


class StateCookieCodec:
    """
    Signs and verifies the ``oauth_state`` cookie value.

    The attempt's creation time is the signature timestamp, so expiry is
    checked by itsdangerous against ``max_age_seconds``.
    """

    SALT = "oauth-state"

    def __init__(self, secret_key: str, max_age_seconds: int = 600):
        self.max_age_seconds = max_age_seconds
        self._serializer = URLSafeTimedSerializer(
            secret_key=secret_key,
            salt=self.SALT,
        )

    def dumps(self, attempt: LoginAttempt) -> str:
        """Serialize and sign a login attempt for the state cookie."""
        return self._serializer.dumps(
            {"state": attempt.state, "provider": attempt.provider}
        )

    def loads(self, value: str | None) -> LoginAttempt | None:
        """
        Decode the state cookie.

        Args:
            value: Raw cookie value, possibly missing.

        Returns:
            LoginAttempt if the cookie is present, untampered and younger
            than ``max_age_seconds``; otherwise None.
        """
        if not value:
            return None

        try:
            data, signed_at = self._serializer.loads(
                value,
                max_age=self.max_age_seconds,
                return_timestamp=True,
            )
        except SignatureExpired:
            auth_logger.info("OAuth state cookie expired")
            return None
        except BadSignature:
            auth_logger.warning("OAuth state cookie has an invalid signature")
            return None

        if (
            not isinstance(data, dict)
            or not isinstance(data.get("state"), str)
            or not isinstance(data.get("provider"), str)
        ):
            auth_logger.warning("OAuth state cookie has an unexpected shape")
            return None

        return LoginAttempt(
            provider=data["provider"],
            state=data["state"],
            created_at=signed_at,
        )
