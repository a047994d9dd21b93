"""OAuth2 client-credentials token manager for the Satu Sehat registry.

The manager hands out a valid bearer token, fetching a new one only when the
cached token is missing or past its local expiry. Concurrent callers that find
the cache stale share a single in-flight token request.
"""

import asyncio
import logging
from collections.abc import Callable

import httpx
from opentelemetry import trace

from app.infrastructure.satusehat.config import satusehat_settings
from app.infrastructure.satusehat.exceptions import (
    SatuSehatAuthError,
    SatuSehatAuthTimeoutError,
    SatuSehatConfigurationError,
)
from app.infrastructure.satusehat.token_store import (
    AccessToken,
    Credentials,
    TokenStore,
    epoch_ms,
)

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

CLIENT_CREDENTIALS_GRANT = "client_credentials"


class TokenManager:
    """Obtains and caches Satu Sehat access tokens.

    Example:
        ```python
        store = TokenStore()
        await store.set_credentials("client-id", "client-secret")
        manager = TokenManager(store)
        token = await manager.get_access_token()
        ```
    """

    def __init__(
        self,
        store: TokenStore,
        auth_url: str | None = None,
        timeout: float | None = None,
        clock: Callable[[], int] = epoch_ms,
    ):
        """Initialize the token manager.

        Args:
            store: Credentials and token cache
            auth_url: Token endpoint. Defaults to settings.
            timeout: Request timeout in seconds. Defaults to settings.
            clock: Millisecond wall clock, replaceable in tests
        """
        self.store = store
        self.auth_url = auth_url or str(satusehat_settings.SATUSEHAT_AUTH_URL)
        self.timeout = timeout or satusehat_settings.SATUSEHAT_TIMEOUT
        self.clock = clock
        self._client: httpx.AsyncClient | None = None
        self._refresh_lock = asyncio.Lock()

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                headers={"Accept": "application/json"},
            )
        return self._client

    async def get_access_token(self) -> str:
        """Return a valid bearer token, requesting a new one if needed.

        Raises:
            SatuSehatConfigurationError: If credentials are not set
            SatuSehatAuthTimeoutError: If the token request times out
            SatuSehatAuthError: If the token endpoint rejects the request
        """
        if not self.store.get_credentials().is_complete:
            raise SatuSehatConfigurationError()

        cached = self.store.get_valid_token(self.clock())
        if cached is not None:
            return cached.value

        async with self._refresh_lock:
            # Another caller may have refreshed while we waited
            cached = self.store.get_valid_token(self.clock())
            if cached is not None:
                return cached.value

            credentials = self.store.get_credentials()
            if not credentials.is_complete:
                raise SatuSehatConfigurationError()

            token = await self._request_token(credentials)
            # Credentials replaced during the request: the token belongs to the old pair
            if self.store.get_credentials() != credentials:
                logger.info("Credentials remplacés pendant le refresh, token non mis en cache")
                return token.value
            await self.store.save_token(token)
            return token.value

    async def _request_token(self, credentials: Credentials) -> AccessToken:
        with tracer.start_as_current_span("satusehat_request_token") as span:
            span.set_attribute("satusehat.auth_url", self.auth_url)

            try:
                client = await self._get_client()
                response = await client.post(
                    self.auth_url,
                    params={"grant_type": CLIENT_CREDENTIALS_GRANT},
                    data={
                        "grant_type": CLIENT_CREDENTIALS_GRANT,
                        "client_id": credentials.client_id,
                        "client_secret": credentials.client_secret,
                    },
                )
            except httpx.TimeoutException as e:
                span.record_exception(e)
                raise SatuSehatAuthTimeoutError(f"Satu Sehat token request timed out: {e}") from e
            except httpx.HTTPError as e:
                span.record_exception(e)
                raise SatuSehatAuthError(f"Failed to reach Satu Sehat token endpoint: {e}") from e

            span.set_attribute("http.status_code", response.status_code)
            if not 200 <= response.status_code < 300:
                logger.warning(f"Token Satu Sehat refusé: HTTP {response.status_code}")
                raise SatuSehatAuthError(
                    f"Failed to obtain Satu Sehat access token: HTTP {response.status_code}",
                    status_code=response.status_code,
                    body=response.text,
                )

            try:
                data = response.json()
                value = data["access_token"]
                expires_in = float(data["expires_in"])
            except (ValueError, KeyError, TypeError) as e:
                raise SatuSehatAuthError(
                    "Malformed Satu Sehat token response",
                    status_code=response.status_code,
                    body=response.text,
                ) from e

            if not isinstance(value, str) or not value:
                raise SatuSehatAuthError(
                    "Satu Sehat token response has no access_token",
                    status_code=response.status_code,
                    body=response.text,
                )

            token = AccessToken.from_expires_in(value, expires_in, self.clock())
            span.add_event("Access token obtained")
            logger.info(f"Nouveau token Satu Sehat obtenu (expire dans {expires_in:.0f}s)")
            return token

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
