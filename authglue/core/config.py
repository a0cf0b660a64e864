from functools import lru_cache
import logging
from urllib.parse import urlparse

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from authglue.core.logger import setup_logger


MIN_PRODUCTION_SECRET_LENGTH = 32


class Settings(BaseSettings):
    # Application settings
    ENVIRONMENT: str = "development"  # Options: development, production
    DEBUG: bool = False
    APP_NAME: str = "authglue"
    APP_VERSION: str = "1.0.0"
    APP_DESCRIPTION: str = """
Login glue for the writing assistant front-end.

Signs users in with Google or GitHub through the OAuth 2.0 authorization code
flow and issues a stateless, signed `session` cookie. There is no user
database: the session carries the identity returned by the provider.
"""

    # Public URL this service is reachable on; callback URLs are built from it
    BASE_URL: str = "http://localhost:3000"
    # Where the browser lands after a successful login or logout
    APP_ROOT_URL: str = "/"
    # Front-end origins allowed to call the API with credentials
    CORS_ALLOW_ORIGINS: list[str] = ["http://localhost:3000"]

    # Server settings
    HOST: str = "127.0.0.1"
    PORT: int = 3000

    # OAuth settings
    GOOGLE_CLIENT_ID: str = ""
    GOOGLE_CLIENT_SECRET: str = ""
    GITHUB_CLIENT_ID: str = ""
    GITHUB_CLIENT_SECRET: str = ""
    GITHUB_USER_AGENT: str = "authglue"
    OAUTH_HTTP_TIMEOUT_SECONDS: float = 10.0
    STATE_TTL_SECONDS: int = 600

    # Session settings
    SESSION_SECRET_KEY: str = ""
    SESSION_ALGORITHM: str = "HS256"
    SESSION_TTL_DAYS: int = 30
    COOKIE_DOMAIN: str | None = None

    # Sentry settings
    SENTRY_DSN: str = ""
    SENTRY_ENVIRONMENT: str = "development"
    SENTRY_TRACES_SAMPLE_RATE: float = 0.1

    model_config: SettingsConfigDict = SettingsConfigDict(  # type: ignore
        env_file=".env",
        extra="ignore",
        frozen=True,
    )

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @model_validator(mode="after")
    def _validate_production_posture(self) -> "Settings":
        """Refuse weak secrets and plain-http callbacks in production."""
        if not self.is_production:
            return self

        problems: list[str] = []

        if urlparse(self.BASE_URL).scheme != "https":
            problems.append("BASE_URL must use https")

        # An empty secret is rejected separately, in every environment
        if self.SESSION_SECRET_KEY and (
            len(self.SESSION_SECRET_KEY) < MIN_PRODUCTION_SECRET_LENGTH
        ):
            problems.append(
                f"SESSION_SECRET_KEY must be at least "
                f"{MIN_PRODUCTION_SECRET_LENGTH} characters"
            )

        if problems:
            raise ValueError(
                f"ENVIRONMENT is 'production' but the configuration is "
                f"insecure: {'; '.join(problems)}."
            )

        return self

    def callback_url(self, provider: str) -> str:
        """Callback URL registered with the provider for this deployment."""
        return f"{self.BASE_URL.rstrip('/')}/auth/{provider}/callback"


@lru_cache()
def get_settings() -> Settings:
    return Settings()  # type: ignore


app_logger = setup_logger(
    name="app_logger",
    log_file="logs/app.log",
    level=logging.INFO,
    sentry_tag="app",
)
request_logger = setup_logger(
    name="request_logger",
    log_file="logs/requests.log",
    level=logging.INFO,
    sentry_tag="request",
)
auth_logger = setup_logger(
    name="auth_logger",
    log_file="logs/auth.log",
    level=logging.INFO,
    sentry_tag="auth",
)

__all__ = [
    "Settings",
    "get_settings",
    "app_logger",
    "request_logger",
    "auth_logger",
]
