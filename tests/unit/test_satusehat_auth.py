"""Tests unitaires pour le TokenManager Satu Sehat (OAuth2 client credentials)."""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from app.infrastructure.satusehat.auth import TokenManager
from app.infrastructure.satusehat.exceptions import (
    SatuSehatAuthError,
    SatuSehatAuthTimeoutError,
    SatuSehatConfigurationError,
)
from app.infrastructure.satusehat.token_store import (
    TOKEN_EXPIRY_MARGIN_MS,
    InMemoryTokenStorage,
    TokenStore,
)

AUTH_URL = "https://satusehat.test/oauth2/v1/accesstoken"

# =============================================================================
# Fixtures
# =============================================================================


class FakeClock:
    """Horloge milliseconde contrôlée par le test."""

    def __init__(self, now_ms: int = 1_700_000_000_000):
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms


def make_response(status_code: int, json_data=None, text: str = ""):
    response = MagicMock(spec=httpx.Response)
    response.status_code = status_code
    if json_data is not None:
        response.json.return_value = json_data
        response.text = json.dumps(json_data)
    else:
        response.json.side_effect = json.JSONDecodeError("No JSON", "", 0)
        response.text = text
    return response


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def http_client():
    client = AsyncMock()
    client.post = AsyncMock(
        return_value=make_response(200, {"access_token": "T1", "expires_in": 3600})
    )
    return client


async def make_manager(clock, client_id="abc", client_secret="xyz"):
    store = TokenStore(InMemoryTokenStorage())
    if client_id or client_secret:
        await store.set_credentials(client_id, client_secret)
    return TokenManager(store, auth_url=AUTH_URL, timeout=5, clock=clock)


# =============================================================================
# Tests
# =============================================================================


class TestConfiguration:
    """Sans credentials, aucun appel réseau."""

    @pytest.mark.asyncio
    async def test_missing_credentials_raise_configuration_error(self, clock, http_client):
        manager = TokenManager(TokenStore(), auth_url=AUTH_URL, clock=clock)

        with patch.object(manager, "_get_client", return_value=http_client):
            with pytest.raises(SatuSehatConfigurationError):
                await manager.get_access_token()

        http_client.post.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_secret_raises_configuration_error(self, clock, http_client):
        manager = await make_manager(clock, client_id="abc", client_secret="")

        with patch.object(manager, "_get_client", return_value=http_client):
            with pytest.raises(SatuSehatConfigurationError):
                await manager.get_access_token()

        http_client.post.assert_not_called()


class TestTokenRequest:
    """Forme de la requête de token."""

    @pytest.mark.asyncio
    async def test_posts_client_credentials_form(self, clock, http_client):
        manager = await make_manager(clock)

        with patch.object(manager, "_get_client", return_value=http_client):
            token = await manager.get_access_token()

        assert token == "T1"
        call_args = http_client.post.call_args
        assert call_args.args[0] == AUTH_URL
        assert call_args.kwargs["params"] == {"grant_type": "client_credentials"}
        assert call_args.kwargs["data"] == {
            "grant_type": "client_credentials",
            "client_id": "abc",
            "client_secret": "xyz",
        }

    @pytest.mark.asyncio
    async def test_expiry_computed_with_margin(self, clock, http_client):
        manager = await make_manager(clock)

        with patch.object(manager, "_get_client", return_value=http_client):
            await manager.get_access_token()

        expected = clock.now_ms + 3600 * 1000 - TOKEN_EXPIRY_MARGIN_MS
        assert manager.store.token.expires_at_epoch_ms == expected

    @pytest.mark.asyncio
    async def test_expires_in_as_numeric_string(self, clock, http_client):
        http_client.post.return_value = make_response(
            200, {"access_token": "T1", "expires_in": "3599"}
        )
        manager = await make_manager(clock)

        with patch.object(manager, "_get_client", return_value=http_client):
            assert await manager.get_access_token() == "T1"

        expected = clock.now_ms + 3599 * 1000 - TOKEN_EXPIRY_MARGIN_MS
        assert manager.store.token.expires_at_epoch_ms == expected

    @pytest.mark.asyncio
    async def test_token_persisted_to_storage(self, clock, http_client):
        manager = await make_manager(clock)

        with patch.object(manager, "_get_client", return_value=http_client):
            await manager.get_access_token()

        storage = manager.store.storage
        assert await storage.get(TokenStore.ACCESS_TOKEN_KEY) == "T1"


class TestTokenCache:
    """Cache du token et renouvellement."""

    @pytest.mark.asyncio
    async def test_second_call_in_window_reuses_token(self, clock, http_client):
        manager = await make_manager(clock)

        with patch.object(manager, "_get_client", return_value=http_client):
            first = await manager.get_access_token()
            clock.now_ms += 60_000
            second = await manager.get_access_token()

        assert first == second == "T1"
        assert http_client.post.await_count == 1

    @pytest.mark.asyncio
    async def test_expired_token_triggers_new_request(self, clock, http_client):
        manager = await make_manager(clock)

        with patch.object(manager, "_get_client", return_value=http_client):
            await manager.get_access_token()
            http_client.post.return_value = make_response(
                200, {"access_token": "T2", "expires_in": 3600}
            )
            manager.store.token.expires_at_epoch_ms = clock.now_ms - 1
            token = await manager.get_access_token()

        assert token == "T2"
        assert http_client.post.await_count == 2

    @pytest.mark.asyncio
    async def test_token_refreshed_within_safety_margin(self, clock, http_client):
        manager = await make_manager(clock)

        with patch.object(manager, "_get_client", return_value=http_client):
            await manager.get_access_token()
            # 5 secondes avant l'expiration annoncée par le serveur
            clock.now_ms += 3600 * 1000 - TOKEN_EXPIRY_MARGIN_MS
            await manager.get_access_token()

        assert http_client.post.await_count == 2

    @pytest.mark.asyncio
    async def test_new_credentials_force_reauthentication(self, clock, http_client):
        manager = await make_manager(clock)

        with patch.object(manager, "_get_client", return_value=http_client):
            await manager.get_access_token()
            await manager.store.set_credentials("abc", "rotated")
            await manager.get_access_token()

        assert http_client.post.await_count == 2
        assert http_client.post.call_args.kwargs["data"]["client_secret"] == "rotated"

    @pytest.mark.asyncio
    async def test_credentials_replaced_during_refresh_discard_token(self, clock):
        manager = await make_manager(clock, client_id="old", client_secret="old")
        started = asyncio.Event()
        release = asyncio.Event()

        async def post(*args, **kwargs):
            client_id = kwargs["data"]["client_id"]
            if client_id == "old":
                started.set()
                await release.wait()
            body = {"access_token": f"TOKEN-FOR-{client_id}", "expires_in": 3600}
            return make_response(200, body)

        http_client = AsyncMock()
        http_client.post = AsyncMock(side_effect=post)

        with patch.object(manager, "_get_client", return_value=http_client):
            in_flight = asyncio.create_task(manager.get_access_token())
            await started.wait()
            await manager.store.set_credentials("new", "new")
            release.set()
            await in_flight

            assert manager.store.token is None
            token = await manager.get_access_token()

        assert token == "TOKEN-FOR-new"
        assert http_client.post.await_count == 2

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_request(self, clock):
        manager = await make_manager(clock)
        release = asyncio.Event()

        async def slow_post(*args, **kwargs):
            await release.wait()
            return make_response(200, {"access_token": "T1", "expires_in": 3600})

        http_client = AsyncMock()
        http_client.post = AsyncMock(side_effect=slow_post)

        with patch.object(manager, "_get_client", return_value=http_client):
            tasks = [asyncio.create_task(manager.get_access_token()) for _ in range(5)]
            await asyncio.sleep(0)
            release.set()
            tokens = await asyncio.gather(*tasks)

        assert tokens == ["T1"] * 5
        assert http_client.post.await_count == 1


class TestTokenErrors:
    """Erreurs de la requête de token: rien n'est mis en cache."""

    @pytest.mark.asyncio
    async def test_non_2xx_raises_auth_error_with_status_and_body(self, clock, http_client):
        http_client.post.return_value = make_response(401, text="invalid_client")
        manager = await make_manager(clock)

        with patch.object(manager, "_get_client", return_value=http_client):
            with pytest.raises(SatuSehatAuthError) as exc_info:
                await manager.get_access_token()

        assert exc_info.value.status_code == 401
        assert exc_info.value.body == "invalid_client"
        assert manager.store.token is None

    @pytest.mark.asyncio
    async def test_timeout_raises_auth_timeout_error(self, clock, http_client):
        http_client.post.side_effect = httpx.ReadTimeout("timed out")
        manager = await make_manager(clock)

        with patch.object(manager, "_get_client", return_value=http_client):
            with pytest.raises(SatuSehatAuthTimeoutError):
                await manager.get_access_token()

        assert manager.store.token is None

    @pytest.mark.asyncio
    async def test_transport_error_raises_auth_error_without_status(self, clock, http_client):
        http_client.post.side_effect = httpx.ConnectError("connection refused")
        manager = await make_manager(clock)

        with patch.object(manager, "_get_client", return_value=http_client):
            with pytest.raises(SatuSehatAuthError) as exc_info:
                await manager.get_access_token()

        assert not isinstance(exc_info.value, SatuSehatAuthTimeoutError)
        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "json_data",
        [
            {"expires_in": 3600},
            {"access_token": "T1"},
            {"access_token": "T1", "expires_in": "soon"},
            {"access_token": "", "expires_in": 3600},
        ],
    )
    async def test_malformed_token_response(self, clock, http_client, json_data):
        http_client.post.return_value = make_response(200, json_data)
        manager = await make_manager(clock)

        with patch.object(manager, "_get_client", return_value=http_client):
            with pytest.raises(SatuSehatAuthError) as exc_info:
                await manager.get_access_token()

        assert exc_info.value.status_code == 200
        assert manager.store.token is None


class TestHttpClientLifecycle:
    @pytest.mark.asyncio
    async def test_get_client_creates_and_close_releases(self, clock):
        manager = await make_manager(clock)

        client = await manager._get_client()

        assert isinstance(client, httpx.AsyncClient)
        assert await manager._get_client() is client
        await manager.close()
        assert manager._client is None
