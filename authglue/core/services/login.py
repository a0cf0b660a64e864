"""
Orchestration of one OAuth login attempt.

A login walks these steps:

    START -> REDIRECTED -> CALLBACK_RECEIVED -> STATE_VALIDATED
          -> EXCHANGED -> SESSION_ISSUED -> DONE

with two terminal error steps: REJECTED (CSRF state mismatch) and FAILED
(anything going wrong downstream of state validation). Nothing is retried;
after an error the user starts again from START.

The orchestrator knows nothing about HTTP. The auth router turns its results
and exceptions into redirects, cookies and status codes.
"""

from authglue.core.config import auth_logger
from authglue.core.enums import LoginStep
from authglue.core.exceptions.types import (
    CsrfStateMismatchException,
    OAuthException,
    ProviderNotConfiguredException,
)
from authglue.core.services.oauth import BaseOAuthProvider, ProviderRegistry
from authglue.core.services.session import SessionCredential, SessionIssuer
from authglue.core.services.state import (
    LoginAttempt,
    StateCookieCodec,
    states_match,
)


__all__ = ["LoginOrchestrator"]


class LoginOrchestrator:
    """
    Ties state tokens, provider adapters and the session issuer together.

    Args:
        providers: Configured adapters keyed by provider name.
        issuer: Signs the session credential at the end of the flow.
        state_codec: Signs and reads the ``oauth_state`` cookie.
    """

    def __init__(
        self,
        providers: ProviderRegistry,
        issuer: SessionIssuer,
        state_codec: StateCookieCodec,
    ):
        self.providers = providers
        self.issuer = issuer
        self.state_codec = state_codec

    def get_provider(self, provider: str) -> BaseOAuthProvider:
        """
        Look up a configured provider.

        Raises:
            ProviderNotConfiguredException: If the provider is unknown or
                has no credentials.
        """
        adapter = self.providers.get(provider)
        if adapter is None:
            raise ProviderNotConfiguredException(provider)
        return adapter

    @staticmethod
    def _log_step(provider: str, step: LoginStep, detail: str = "") -> None:
        message = f"OAuth login [{provider}] -> {step.value}"
        if detail:
            message = f"{message}: {detail}"
        if step is LoginStep.FAILED:
            auth_logger.error(message)
        elif step is LoginStep.REJECTED:
            auth_logger.warning(message)
        else:
            auth_logger.info(message)

    def begin(self, provider: str) -> tuple[LoginAttempt, str, str]:
        """
        Start a login attempt.

        Args:
            provider: Provider name from the URL.

        Returns:
            tuple: (attempt, signed state cookie value, authorization URL).

        Raises:
            ProviderNotConfiguredException: If the provider is not available.
        """
        adapter = self.get_provider(provider)
        self._log_step(provider, LoginStep.START)

        attempt = LoginAttempt(provider=provider)
        cookie_value = self.state_codec.dumps(attempt)
        authorization_url = adapter.build_authorization_url(attempt.state)

        self._log_step(provider, LoginStep.REDIRECTED)
        return attempt, cookie_value, authorization_url

    def validate_state(
        self,
        provider: str,
        state: str | None,
        state_cookie: str | None,
    ) -> LoginAttempt:
        """
        Check the callback ``state`` against the stored login attempt.

        Succeeds only if the cookie is present, correctly signed, not
        expired, issued for this provider, and its state is byte-equal to
        the query parameter.

        Raises:
            CsrfStateMismatchException: On any mismatch.
        """
        attempt = self.state_codec.loads(state_cookie)

        if attempt is None:
            reason = "missing or invalid state cookie"
        elif attempt.provider != provider:
            reason = f"state cookie issued for {attempt.provider}"
        elif not states_match(attempt.state, state):
            reason = "state parameter does not match cookie"
        else:
            self._log_step(provider, LoginStep.STATE_VALIDATED)
            return attempt

        self._log_step(provider, LoginStep.REJECTED, reason)
        raise CsrfStateMismatchException()

    async def complete(
        self,
        provider: str,
        code: str,
        state: str | None,
        state_cookie: str | None,
    ) -> SessionCredential:
        """
        Finish a login attempt from the provider callback.

        State is validated before any call to the provider.

        Args:
            provider: Provider name from the URL.
            code: Authorization code from the callback query.
            state: State from the callback query.
            state_cookie: Raw ``oauth_state`` cookie value.

        Returns:
            SessionCredential: The freshly signed session.

        Raises:
            ProviderNotConfiguredException: If the provider is not available.
            CsrfStateMismatchException: If the state check fails.
            OAuthException: If the exchange or session signing fails.
        """
        adapter = self.get_provider(provider)
        self._log_step(provider, LoginStep.CALLBACK_RECEIVED)

        self.validate_state(provider, state, state_cookie)

        try:
            profile = await adapter.exchange_code_for_profile(code)
        except OAuthException as e:
            self._log_step(provider, LoginStep.FAILED, f"{type(e).__name__}")
            raise
        except Exception as e:
            self._log_step(provider, LoginStep.FAILED, f"unexpected {e!r}")
            raise OAuthException(
                provider=provider, details={"error": type(e).__name__}
            ) from e
        self._log_step(provider, LoginStep.EXCHANGED, profile.external_id)

        try:
            credential = self.issuer.issue(profile)
        except Exception as e:
            self._log_step(provider, LoginStep.FAILED, f"session signing {e!r}")
            raise OAuthException(
                provider=provider, details={"error": type(e).__name__}
            ) from e
        self._log_step(provider, LoginStep.SESSION_ISSUED, profile.external_id)

        return credential

    def finish(self, provider: str) -> None:
        """Record that the browser is being sent back to the application."""
        self._log_step(provider, LoginStep.DONE)

    async def aclose(self) -> None:
        for adapter in self.providers.values():
            await adapter.aclose()
