"""
Test suite for the OAuth provider base class, profile and registry.

Run tests:
    pytest tests/services/oauth/test_provider_base.py -v
"""

import pytest

from authglue.core.enums import OAuthProviders
from authglue.core.services.oauth import (
    BaseOAuthProvider,
    GitHubOAuthService,
    GoogleOAuthService,
    ProviderProfile,
    build_provider_registry,
    make_external_id,
)


class TestMakeExternalId:

    def test_qualifies_with_provider(self):
        assert make_external_id("google", "123") == "google:123"
        assert make_external_id("github", 123) == "github:123"

    def test_same_native_id_does_not_collide(self):
        assert make_external_id("google", "42") != make_external_id("github", 42)


class TestProviderProfile:

    def test_to_dict(self, google_profile):
        assert google_profile.to_dict() == {
            "external_id": "google:1234567890",
            "email": "user@example.com",
            "display_name": "Test User",
            "avatar_url": "https://lh3.googleusercontent.com/a/photo.jpg",
            "provider": "google",
        }

    def test_is_immutable(self, google_profile):
        with pytest.raises(AttributeError):
            google_profile.email = "other@example.com"


class TestBaseOAuthProvider:

    def test_cannot_instantiate_abstract(self):
        with pytest.raises(TypeError):
            BaseOAuthProvider("id", "secret", "https://app.com/cb")

    @pytest.mark.asyncio
    async def test_concrete_provider(self):
        class TestProvider(BaseOAuthProvider):
            provider_name = OAuthProviders.GOOGLE

            def build_authorization_url(self, state: str) -> str:
                return f"https://test.com/auth?state={state}"

            async def exchange_code_for_profile(self, code: str) -> ProviderProfile:
                return ProviderProfile(
                    external_id=make_external_id(self.name, code),
                    email=None,
                    display_name=None,
                    avatar_url=None,
                    provider=self.provider_name,
                )

        provider = TestProvider("id", "secret", "https://app.com/cb")

        assert provider.name == "google"
        assert provider.build_authorization_url("s") == "https://test.com/auth?state=s"
        profile = await provider.exchange_code_for_profile("abc")
        assert profile.external_id == "google:abc"


class TestBuildProviderRegistry:

    def test_both_providers_configured(self, settings):
        registry = build_provider_registry(settings)

        assert set(registry) == {"google", "github"}
        assert isinstance(registry["google"], GoogleOAuthService)
        assert isinstance(registry["github"], GitHubOAuthService)

    def test_redirect_uris_match_callback_routes(self, settings):
        registry = build_provider_registry(settings)

        assert registry["google"].redirect_uri == "http://testserver/auth/google/callback"
        assert registry["github"].redirect_uri == "http://testserver/auth/github/callback"

    def test_timeout_and_user_agent_from_settings(self, settings_factory):
        settings = settings_factory(
            OAUTH_HTTP_TIMEOUT_SECONDS=3.5, GITHUB_USER_AGENT="my-app"
        )

        registry = build_provider_registry(settings)

        assert registry["google"].timeout == 3.5
        assert registry["github"].user_agent == "my-app"

    def test_missing_secret_disables_only_that_provider(self, settings_factory):
        settings = settings_factory(GITHUB_CLIENT_SECRET="")

        registry = build_provider_registry(settings)

        assert set(registry) == {"google"}

    def test_no_credentials_gives_empty_registry(self, settings_factory):
        settings = settings_factory(
            GOOGLE_CLIENT_ID="",
            GOOGLE_CLIENT_SECRET="",
            GITHUB_CLIENT_ID="",
            GITHUB_CLIENT_SECRET="",
        )

        assert build_provider_registry(settings) == {}
