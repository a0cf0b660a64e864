"""
Test suite for the authentication router.

The login flow is driven end to end through the ASGI app: the state cookie
set by the start endpoint is carried by the client's cookie jar into the
callback, exactly as a browser would.

Run tests:
    pytest tests/routers/test_auth_routes.py -v
"""

from unittest.mock import AsyncMock, patch
from urllib.parse import parse_qs, urlparse

import pytest
from fastapi import status
from httpx import ASGITransport, AsyncClient

from authglue.core.services.oauth import GitHubOAuthService
from authglue.main import create_app


def _state_from(response) -> str:
    return parse_qs(urlparse(response.headers["location"]).query)["state"][0]


def _set_cookie_headers(response) -> list[str]:
    return [header.lower() for header in response.headers.get_list("set-cookie")]


async def _start(client: AsyncClient, provider: str = "google") -> str:
    response = await client.get(f"/auth/{provider}")
    assert response.status_code == status.HTTP_302_FOUND
    return _state_from(response)


class TestOAuthStart:

    @pytest.mark.asyncio
    async def test_redirects_to_google(self, client):
        response = await client.get("/auth/google")

        assert response.status_code == status.HTTP_302_FOUND
        location = urlparse(response.headers["location"])
        assert location.netloc == "accounts.google.com"
        assert location.path == "/o/oauth2/v2/auth"
        params = parse_qs(location.query)
        assert params["redirect_uri"] == ["http://testserver/auth/google/callback"]

    @pytest.mark.asyncio
    async def test_redirects_to_github(self, client):
        response = await client.get("/auth/github")

        location = urlparse(response.headers["location"])
        assert location.netloc == "github.com"
        assert parse_qs(location.query)["redirect_uri"] == [
            "http://testserver/auth/github/callback"
        ]

    @pytest.mark.asyncio
    async def test_sets_signed_state_cookie(self, client, app):
        response = await client.get("/auth/google")

        cookie_value = response.cookies.get("oauth_state")
        attempt = app.state.login_orchestrator.state_codec.loads(cookie_value)
        assert attempt.state == _state_from(response)
        assert attempt.provider == "google"

        header = next(h for h in _set_cookie_headers(response) if "oauth_state=" in h)
        assert "httponly" in header
        assert "max-age=600" in header
        assert "samesite=lax" in header

    @pytest.mark.asyncio
    async def test_each_start_gets_a_fresh_state(self, client):
        assert await _start(client) != await _start(client)

    @pytest.mark.asyncio
    async def test_unknown_provider(self, client):
        response = await client.get("/auth/gitlab")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert "gitlab" in response.text

    @pytest.mark.asyncio
    async def test_unconfigured_provider(self, settings_factory):
        app = create_app(settings_factory(GITHUB_CLIENT_ID="", GITHUB_CLIENT_SECRET=""))

        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://testserver"
        ) as ac:
            github = await ac.get("/auth/github")
            google = await ac.get("/auth/google")

        assert github.status_code == status.HTTP_404_NOT_FOUND
        assert google.status_code == status.HTTP_302_FOUND


class TestOAuthCallback:

    @pytest.mark.asyncio
    async def test_success_sets_session_and_clears_state(
        self, client, app, google_profile
    ):
        adapter = app.state.login_orchestrator.providers["google"]
        state = await _start(client)

        with patch.object(
            adapter, "exchange_code_for_profile", new_callable=AsyncMock
        ) as mock_exchange:
            mock_exchange.return_value = google_profile
            response = await client.get(
                "/auth/google/callback", params={"code": "auth_code", "state": state}
            )

        mock_exchange.assert_awaited_once_with("auth_code")
        assert response.status_code == status.HTTP_302_FOUND
        assert response.headers["location"] == "/"

        token = response.cookies.get("session")
        credential = app.state.session_issuer.verify(token)
        assert credential.external_id == "google:1234567890"

        headers = _set_cookie_headers(response)
        session_header = next(h for h in headers if h.startswith("session="))
        assert "httponly" in session_header
        assert f"max-age={30 * 24 * 3600}" in session_header
        state_header = next(h for h in headers if h.startswith("oauth_state="))
        assert "max-age=0" in state_header

    @pytest.mark.asyncio
    async def test_replay_after_success_is_rejected(self, client, app, google_profile):
        adapter = app.state.login_orchestrator.providers["google"]
        state = await _start(client)

        with patch.object(
            adapter, "exchange_code_for_profile", new_callable=AsyncMock
        ) as mock_exchange:
            mock_exchange.return_value = google_profile
            params = {"code": "auth_code", "state": state}
            first = await client.get("/auth/google/callback", params=params)
            replay = await client.get("/auth/google/callback", params=params)

        assert first.status_code == status.HTTP_302_FOUND
        assert replay.status_code == status.HTTP_403_FORBIDDEN
        assert mock_exchange.await_count == 1

    @pytest.mark.asyncio
    async def test_state_mismatch_never_contacts_provider(self, client, app):
        adapter = app.state.login_orchestrator.providers["google"]
        await _start(client)

        with patch.object(
            adapter, "exchange_code_for_profile", new_callable=AsyncMock
        ) as mock_exchange:
            response = await client.get(
                "/auth/google/callback", params={"code": "c", "state": "forged"}
            )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.text == (
            "Authentication failed: State mismatch. Please try again."
        )
        mock_exchange.assert_not_called()
        assert not any(h.startswith("session=") for h in _set_cookie_headers(response))

    @pytest.mark.asyncio
    async def test_missing_state_cookie(self, client, app):
        adapter = app.state.login_orchestrator.providers["google"]

        with patch.object(
            adapter, "exchange_code_for_profile", new_callable=AsyncMock
        ) as mock_exchange:
            response = await client.get(
                "/auth/google/callback", params={"code": "c", "state": "anything"}
            )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        mock_exchange.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_state_param(self, client, app):
        adapter = app.state.login_orchestrator.providers["google"]
        await _start(client)

        with patch.object(
            adapter, "exchange_code_for_profile", new_callable=AsyncMock
        ) as mock_exchange:
            response = await client.get("/auth/google/callback", params={"code": "c"})

        assert response.status_code == status.HTTP_403_FORBIDDEN
        mock_exchange.assert_not_called()

    @pytest.mark.asyncio
    async def test_state_from_other_provider_is_rejected(self, client, app):
        adapter = app.state.login_orchestrator.providers["google"]
        state = await _start(client, "github")

        with patch.object(
            adapter, "exchange_code_for_profile", new_callable=AsyncMock
        ) as mock_exchange:
            response = await client.get(
                "/auth/google/callback", params={"code": "c", "state": state}
            )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        mock_exchange.assert_not_called()

    @pytest.mark.asyncio
    async def test_token_exchange_failure(self, client, app, make_response):
        adapter = app.state.login_orchestrator.providers["google"]
        await adapter.init()
        state = await _start(client)

        with patch.object(adapter._client, "post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = make_response(
                status_code=400,
                json_data={"error": "invalid_grant", "error_description": "Bad Request"},
            )
            response = await client.get(
                "/auth/google/callback", params={"code": "expired", "state": state}
            )

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.text == "Authentication failed during token exchange."
        assert "invalid_grant" not in response.text
        assert not any(h.startswith("session=") for h in _set_cookie_headers(response))

    @pytest.mark.asyncio
    async def test_github_without_email_still_signs_in(self, client, app, make_response):
        adapter = app.state.login_orchestrator.providers["github"]
        await adapter.init()
        state = await _start(client, "github")
        user = {"id": 583231, "login": "octocat", "name": None, "avatar_url": None}

        async def _get(url, headers=None):
            if url == GitHubOAuthService._EMAILS_URL:
                return make_response(json_data=[])
            return make_response(json_data=user)

        with (
            patch.object(adapter._client, "post", new_callable=AsyncMock) as mock_post,
            patch.object(adapter._client, "get", new_callable=AsyncMock) as mock_get,
        ):
            mock_post.return_value = make_response(json_data={"access_token": "gho_1"})
            mock_get.side_effect = _get
            response = await client.get(
                "/auth/github/callback", params={"code": "gh_code", "state": state}
            )

        assert response.status_code == status.HTTP_302_FOUND
        credential = app.state.session_issuer.verify(response.cookies.get("session"))
        assert credential.external_id == "github:583231"
        assert credential.email is None
        assert credential.display_name == "octocat"

    @pytest.mark.asyncio
    async def test_provider_error_is_bad_request(self, client, app):
        adapter = app.state.login_orchestrator.providers["google"]
        state = await _start(client)

        with patch.object(
            adapter, "exchange_code_for_profile", new_callable=AsyncMock
        ) as mock_exchange:
            response = await client.get(
                "/auth/google/callback",
                params={"error": "access_denied", "state": state},
            )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.text == "Authorization was not granted. Please try again."
        mock_exchange.assert_not_called()

    @pytest.mark.asyncio
    async def test_provider_error_with_forged_state_is_forbidden(self, client):
        await _start(client)

        response = await client.get(
            "/auth/google/callback",
            params={"error": "access_denied", "state": "forged"},
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    @pytest.mark.asyncio
    async def test_callback_for_unknown_provider(self, client):
        response = await client.get(
            "/auth/gitlab/callback", params={"code": "c", "state": "s"}
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestSessionEndpoints:

    @pytest.mark.asyncio
    async def test_me_with_valid_session(self, client, app, google_profile):
        credential = app.state.session_issuer.issue(google_profile)
        client.cookies.set("session", credential.token)

        response = await client.get("/auth/me")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["id"] == "google:1234567890"
        assert data["email"] == "user@example.com"
        assert data["name"] == "Test User"
        assert data["provider"] == "google"

    @pytest.mark.asyncio
    async def test_me_without_session(self, client):
        response = await client.get("/auth/me")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.headers["www-authenticate"] == "Cookie"
        assert "detail" in response.json()

    @pytest.mark.asyncio
    async def test_me_with_forged_session(self, client):
        client.cookies.set("session", "not.a.token")

        response = await client.get("/auth/me")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_logout_clears_session(self, client):
        response = await client.post("/auth/logout")

        assert response.status_code == status.HTTP_302_FOUND
        assert response.headers["location"] == "/"
        header = next(
            h for h in _set_cookie_headers(response) if h.startswith("session=")
        )
        assert "max-age=0" in header


class TestHealth:

    @pytest.mark.asyncio
    async def test_health_lists_providers(self, client):
        response = await client.get("/health")

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {
            "status": "ok",
            "providers": ["github", "google"],
            "version": "1.0.0",
        }


class TestProductionCookies:

    @pytest.fixture
    def production_app(self, settings_factory):
        return create_app(
            settings_factory(
                ENVIRONMENT="production",
                BASE_URL="https://login.example.com",
                COOKIE_DOMAIN="example.com",
            )
        )

    @pytest.mark.asyncio
    async def test_cookies_are_secure_and_scoped(self, production_app, google_profile):
        adapter = production_app.state.login_orchestrator.providers["google"]

        async with AsyncClient(
            transport=ASGITransport(app=production_app),
            base_url="https://login.example.com",
        ) as ac:
            start = await ac.get("/auth/google")
            state_header = next(
                h for h in _set_cookie_headers(start) if h.startswith("oauth_state=")
            )
            cookie_value = start.headers["set-cookie"].split(";")[0].split("=", 1)[1]

            with patch.object(
                adapter, "exchange_code_for_profile", new_callable=AsyncMock
            ) as mock_exchange:
                mock_exchange.return_value = google_profile
                callback = await ac.get(
                    "/auth/google/callback",
                    params={"code": "auth_code", "state": _state_from(start)},
                    headers={"Cookie": f"oauth_state={cookie_value}"},
                )

        await production_app.state.login_orchestrator.aclose()

        assert "secure" in state_header
        assert "samesite=lax" in state_header
        assert "domain=example.com" in state_header

        assert callback.status_code == status.HTTP_302_FOUND
        headers = _set_cookie_headers(callback)
        session_header = next(h for h in headers if h.startswith("session="))
        assert "secure" in session_header
        assert "httponly" in session_header
        assert "samesite=none" in session_header
        assert "domain=example.com" in session_header
        cleared_state = next(h for h in headers if h.startswith("oauth_state="))
        assert "max-age=0" in cleared_state
        assert "domain=example.com" in cleared_state

    @pytest.mark.asyncio
    async def test_development_cookies_are_not_secure(self, client):
        response = await client.get("/auth/google")

        header = next(
            h for h in _set_cookie_headers(response) if h.startswith("oauth_state=")
        )
        assert "secure" not in header
        assert "domain=" not in header


class TestCallbackLogging:

    @pytest.mark.asyncio
    async def test_provider_error_is_logged_escaped(self, client):
        state = await _start(client)

        with patch("authglue.core.routers.auth.auth_logger") as mock_logger:
            response = await client.get(
                "/auth/google/callback",
                params={
                    "error": "access_denied\n2026-10-19 - auth_logger - INFO - forged",
                    "state": state,
                },
            )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        logged = mock_logger.info.call_args[0][0]
        assert "\n" not in logged
        assert "access_denied\\n" in logged

    @pytest.mark.asyncio
    async def test_long_provider_error_is_truncated(self, client):
        state = await _start(client)

        with patch("authglue.core.routers.auth.auth_logger") as mock_logger:
            await client.get(
                "/auth/google/callback",
                params={"error": "x" * 5000, "state": state},
            )

        assert len(mock_logger.info.call_args[0][0]) < 200


class TestLogoutOrigin:

    @pytest.mark.asyncio
    async def test_cross_site_logout_is_refused(self, client):
        response = await client.post(
            "/auth/logout", headers={"Origin": "https://evil.example"}
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.text == "Cross-site logout is not allowed."
        assert not any(h.startswith("session=") for h in _set_cookie_headers(response))

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "origin", ["http://testserver", "http://localhost:3000"]
    )
    async def test_trusted_origin_can_logout(self, client, origin):
        response = await client.post("/auth/logout", headers={"Origin": origin})

        assert response.status_code == status.HTTP_302_FOUND
