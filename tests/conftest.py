"""
Pytest configuration and core fixtures.

Every test builds its own application from explicit settings, so tests
never depend on a local .env file.
"""

import os
from typing import AsyncGenerator
from unittest.mock import MagicMock

import pytest
from httpx import ASGITransport, AsyncClient


TEST_SECRET = "test-session-secret-key-0123456789abcdef"


def pytest_configure(config):
    """Configure the environment before any application module is imported."""
    os.environ["ENVIRONMENT"] = "test"
    os.environ["DEBUG"] = "true"
    os.environ.setdefault("SESSION_SECRET_KEY", TEST_SECRET)
    os.environ.setdefault("BASE_URL", "http://testserver")
    os.environ.setdefault("GOOGLE_CLIENT_ID", "env-google-id")
    os.environ.setdefault("GOOGLE_CLIENT_SECRET", "env-google-secret")
    os.environ.setdefault("GITHUB_CLIENT_ID", "env-github-id")
    os.environ.setdefault("GITHUB_CLIENT_SECRET", "env-github-secret")


def make_settings(**overrides):
    """Settings with test defaults, ignoring environment files."""
    from authglue.core.config import Settings

    values = {
        "ENVIRONMENT": "test",
        "DEBUG": True,
        "BASE_URL": "http://testserver",
        "APP_ROOT_URL": "/",
        "SESSION_SECRET_KEY": TEST_SECRET,
        "GOOGLE_CLIENT_ID": "google-client-id",
        "GOOGLE_CLIENT_SECRET": "google-client-secret",
        "GITHUB_CLIENT_ID": "github-client-id",
        "GITHUB_CLIENT_SECRET": "github-client-secret",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings_factory():
    return make_settings


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def app(settings):
    from authglue.main import create_app

    return create_app(settings)


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the app. Redirects are not followed."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://testserver",
    ) as ac:
        yield ac
    await app.state.login_orchestrator.aclose()


@pytest.fixture
def google_profile():
    from authglue.core.enums import OAuthProviders
    from authglue.core.services.oauth import ProviderProfile

    return ProviderProfile(
        external_id="google:1234567890",
        email="user@example.com",
        display_name="Test User",
        avatar_url="https://lh3.googleusercontent.com/a/photo.jpg",
        provider=OAuthProviders.GOOGLE,
    )


@pytest.fixture
def github_profile():
    from authglue.core.enums import OAuthProviders
    from authglue.core.services.oauth import ProviderProfile

    return ProviderProfile(
        external_id="github:583231",
        email=None,
        display_name="octocat",
        avatar_url="https://avatars.githubusercontent.com/u/583231",
        provider=OAuthProviders.GITHUB,
    )


@pytest.fixture
def make_response():
    """Factory for stand-ins of httpx.Response with the attributes the adapters read."""

    def _make(status_code: int = 200, json_data=None, text: str = ""):
        response = MagicMock()
        response.status_code = status_code
        response.is_success = 200 <= status_code < 300
        if isinstance(json_data, Exception):
            response.json.side_effect = json_data
        else:
            response.json.return_value = json_data
        response.text = text or repr(json_data)
        return response

    return _make
