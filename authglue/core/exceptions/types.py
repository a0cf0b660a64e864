from fastapi import status


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict | None = None,
    ):
        self.message = message
        self.status_code = status_code or status.HTTP_500_INTERNAL_SERVER_ERROR
        self.details = details
        super().__init__(message)


class BadRequestException(AppException):
    """Exception raised for bad request errors."""

    def __init__(self, message: str = "Bad request."):
        super().__init__(message, status.HTTP_400_BAD_REQUEST)


class AuthenticationException(AppException):
    """Exception raised for authentication-related errors."""

    def __init__(self, message: str = "Authentication failed."):
        super().__init__(message, status.HTTP_401_UNAUTHORIZED)


class SessionVerificationException(AuthenticationException):
    """Exception raised when a session credential is invalid or expired."""

    def __init__(self, message: str = "Session is invalid or has expired."):
        super().__init__(message)


class ForbiddenException(AppException):
    """Exception raised when access is forbidden."""

    def __init__(self, message: str = "Access forbidden."):
        super().__init__(message, status.HTTP_403_FORBIDDEN)


class CsrfStateMismatchException(ForbiddenException):
    """Exception raised when the OAuth callback state does not match the cookie."""

    def __init__(
        self,
        message: str = "Authentication failed: State mismatch. Please try again.",
    ):
        super().__init__(message)


class NotFoundException(AppException):
    """Exception raised when a resource is not found."""

    def __init__(self, message: str = "Resource not found."):
        super().__init__(message, status.HTTP_404_NOT_FOUND)


class ProviderNotConfiguredException(NotFoundException):
    """Exception raised for an unknown provider or one without credentials."""

    def __init__(self, provider: str):
        super().__init__(f"Login provider '{provider}' is not available.")
        self.provider = provider


class OAuthException(AppException):
    """
    Exception raised for OAuth-related errors.

    The message is shown to the end user, so it never contains anything
    returned by the identity provider. Diagnostic context goes into
    ``details`` and is only logged.
    """

    def __init__(
        self,
        message: str = "Authentication failed. Please try again.",
        provider: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, status.HTTP_500_INTERNAL_SERVER_ERROR, details)
        self.provider = provider


class TokenExchangeException(OAuthException):
    """Exception raised when the provider does not return an access token."""

    def __init__(
        self,
        message: str = "Authentication failed during token exchange.",
        provider: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, provider, details)


class ProfileFetchException(OAuthException):
    """Exception raised when the provider profile cannot be retrieved."""

    def __init__(
        self,
        message: str = "Authentication failed while retrieving your profile.",
        provider: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, provider, details)


class MissingSigningSecretException(AppException):
    """Exception raised at startup when no session signing secret is configured."""

    def __init__(
        self,
        message: str = "SESSION_SECRET_KEY is not set; refusing to start.",
    ):
        super().__init__(message)


__all__ = [
    "AppException",
    "BadRequestException",
    "AuthenticationException",
    "SessionVerificationException",
    "ForbiddenException",
    "CsrfStateMismatchException",
    "NotFoundException",
    "ProviderNotConfiguredException",
    "OAuthException",
    "TokenExchangeException",
    "ProfileFetchException",
    "MissingSigningSecretException",
]
