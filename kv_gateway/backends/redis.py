"""Redis-compatible store client implementation."""

from __future__ import annotations

from typing import Any, override

import redis.asyncio as redis_async
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError

from kv_gateway.errors import BackendError, BackendUnavailableError, KeyNotFoundError
from kv_gateway.logging_utils import create_logger

from .protocol import StoreClient


logger = create_logger("kv_gateway.backends.redis")


def _normalize_string(value: str | bytes) -> str:
    if isinstance(value, bytes):
        try:
            return value.decode()
        except UnicodeDecodeError as error:
            msg = f"malformed reply, value is not valid UTF-8: {error}"
            raise BackendError(msg) from error
    if isinstance(value, str):
        return value
    msg = f"malformed reply, expected a string value but got {type(value).__name__}"
    raise BackendError(msg)


class RedisStoreClient(StoreClient):
    """Redis-compatible async store client using ``redis.asyncio``.

    The underlying client keeps a connection pool that connects lazily on
    the first command and reconnects after the backend restarts, so each
    ``get``/``set`` either reuses a pooled connection or opens a new one and
    then issues exactly one command. Constructing the client never contacts
    the backend; reachability problems surface per call as
    ``BackendUnavailableError``.
    """

    def __init__(
        self,
        url: str = "redis://127.0.0.1:6379",
        *,
        client: Any | None = None,
        socket_timeout: float | None = 5.0,
        socket_connect_timeout: float | None = 5.0,
    ) -> None:
        """Create a client from URL or an injected async redis client.

        Parameters
        ----------
        url
            Redis connection URL used when ``client`` is not provided.
            A URL that cannot be parsed raises ``ValueError``.
        client
            Optional injected client with ``get/set/aclose`` API.
        socket_timeout
            Seconds to wait for a reply before the call fails.
        socket_connect_timeout
            Seconds to wait for a new connection before the call fails.
        """
        super().__init__()
        self._url = url
        if client is not None:
            self._client = client
            return

        self._client = redis_async.from_url(
            url,
            decode_responses=False,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_connect_timeout,
        )

    @property
    def url(self) -> str:
        return self._url

    @override
    async def get(self, key: str) -> str:
        """Return value for key, raising ``KeyNotFoundError`` when missing."""
        try:
            value = await self._client.get(key)
        except (RedisConnectionError, RedisTimeoutError, OSError) as error:
            raise BackendUnavailableError(f"redis GET failed: {error}") from error
        except RedisError as error:
            raise BackendError(f"redis GET failed: {error}") from error

        if value is None:
            raise KeyNotFoundError(key)
        return _normalize_string(value)

    @override
    async def set(self, key: str, value: str) -> None:
        """Store value for key."""
        try:
            await self._client.set(key, value)
        except (RedisConnectionError, RedisTimeoutError, OSError) as error:
            raise BackendUnavailableError(f"redis SET failed: {error}") from error
        except RedisError as error:
            raise BackendError(f"redis SET failed: {error}") from error

    @override
    async def close(self) -> None:
        """Release the connection pool."""
        aclose = getattr(self._client, "aclose", None)
        if aclose is not None:
            await aclose()
        else:
            # injected clients that predate ``aclose``
            await self._client.close()
        logger.debug("redis client closed")
