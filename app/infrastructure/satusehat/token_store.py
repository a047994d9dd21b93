"""Credentials and access-token cache for the Satu Sehat client.

The store is an explicit object created at application startup and passed to
the token manager; nothing here is module-global. The in-memory copy is
authoritative, a key-value ``TokenStorage`` backend only makes credentials and
the current token survive a process restart.
"""

import logging
import time
from dataclasses import dataclass
from typing import Protocol

from redis.asyncio import Redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)

# Tokens are considered expired this long before the server says so
TOKEN_EXPIRY_MARGIN_MS = 5000


def epoch_ms() -> int:
    """Current wall-clock time in milliseconds since the epoch."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class Credentials:
    """OAuth2 client-credentials pair supplied by the operator."""

    client_id: str | None = None
    client_secret: str | None = None

    @property
    def is_complete(self) -> bool:
        return bool(self.client_id) and bool(self.client_secret)


@dataclass
class AccessToken:
    """Bearer token with its local expiry (safety margin already applied)."""

    value: str
    expires_at_epoch_ms: int

    @classmethod
    def from_expires_in(cls, value: str, expires_in: float, now_ms: int) -> "AccessToken":
        return cls(
            value=value,
            expires_at_epoch_ms=now_ms + int(expires_in * 1000) - TOKEN_EXPIRY_MARGIN_MS,
        )

    def is_valid(self, now_ms: int) -> bool:
        return now_ms < self.expires_at_epoch_ms


class TokenStorage(Protocol):
    """Key-value persistence used by ``TokenStore``."""

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...

    async def delete(self, *keys: str) -> None: ...


class InMemoryTokenStorage:
    """Process-local storage (development, tests)."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def delete(self, *keys: str) -> None:
        for key in keys:
            self._data.pop(key, None)


class RedisTokenStorage:
    """Redis-backed storage.

    Redis errors are logged and never propagate: losing persistence only means
    the next process start re-authenticates.
    """

    def __init__(self, client: Redis, prefix: str = "cbc:satusehat"):
        self.client = client
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}:{key}"

    async def get(self, key: str) -> str | None:
        try:
            value = await self.client.get(self._key(key))
        except RedisError as e:
            logger.warning(f"Token storage GET error pour {key}: {e}")
            return None
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def set(self, key: str, value: str) -> None:
        try:
            await self.client.set(self._key(key), value)
        except RedisError as e:
            logger.warning(f"Token storage SET error pour {key}: {e}")

    async def delete(self, *keys: str) -> None:
        if not keys:
            return
        try:
            await self.client.delete(*(self._key(key) for key in keys))
        except RedisError as e:
            logger.warning(f"Token storage DELETE error pour {keys}: {e}")


class TokenStore:
    """Holds the current credentials and cached access token.

    Replacing the credentials always drops the cached token, in memory and in
    storage, so the next ``get_access_token()`` re-authenticates.
    """

    CLIENT_ID_KEY = "client_id"
    CLIENT_SECRET_KEY = "client_secret"
    ACCESS_TOKEN_KEY = "access_token"
    TOKEN_EXPIRY_KEY = "token_expiry"

    def __init__(self, storage: TokenStorage | None = None):
        self.storage = storage
        self._credentials = Credentials()
        self.token: AccessToken | None = None

    async def load(self) -> None:
        """Hydrate credentials and token from storage."""
        if self.storage is None:
            return

        client_id = await self.storage.get(self.CLIENT_ID_KEY)
        client_secret = await self.storage.get(self.CLIENT_SECRET_KEY)
        self._credentials = Credentials(client_id=client_id, client_secret=client_secret)

        value = await self.storage.get(self.ACCESS_TOKEN_KEY)
        expiry = await self.storage.get(self.TOKEN_EXPIRY_KEY)
        if value and expiry:
            try:
                self.token = AccessToken(value=value, expires_at_epoch_ms=int(expiry))
            except ValueError:
                logger.warning(f"Expiration de token illisible en storage: {expiry!r}")
                self.token = None

        logger.info(
            f"Token store chargé (credentials={'oui' if self._credentials.is_complete else 'non'}, "
            f"token={'oui' if self.token else 'non'})"
        )

    def get_credentials(self) -> Credentials:
        return self._credentials

    async def set_credentials(self, client_id: str, client_secret: str) -> None:
        """Replace the credentials and invalidate any cached token."""
        self._credentials = Credentials(client_id=client_id, client_secret=client_secret)
        self.token = None
        if self.storage is not None:
            await self.storage.set(self.CLIENT_ID_KEY, client_id)
            await self.storage.set(self.CLIENT_SECRET_KEY, client_secret)
            await self.storage.delete(self.ACCESS_TOKEN_KEY, self.TOKEN_EXPIRY_KEY)
        logger.info("Credentials Satu Sehat remplacés, token invalidé")

    async def seed_credentials(self, client_id: str | None, client_secret: str | None) -> None:
        """Use configured credentials only if none were loaded from storage."""
        if self._credentials.is_complete or not (client_id and client_secret):
            return
        await self.set_credentials(client_id, client_secret)

    async def save_token(self, token: AccessToken) -> None:
        self.token = token
        if self.storage is not None:
            await self.storage.set(self.ACCESS_TOKEN_KEY, token.value)
            await self.storage.set(self.TOKEN_EXPIRY_KEY, str(token.expires_at_epoch_ms))

    def get_valid_token(self, now_ms: int) -> AccessToken | None:
        if self.token is not None and self.token.is_valid(now_ms):
            return self.token
        return None
