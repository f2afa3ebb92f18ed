"""Shared gateway state guarding the single store client."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, TypeVar

from kv_gateway.errors import BackendError, BackendUnavailableError, LockFailure
from kv_gateway.logging_utils import create_logger


if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable

    from kv_gateway.backends import StoreClient


_T = TypeVar("_T")

logger = create_logger("kv_gateway.state")


class GatewayState:
    """Owns the one store client shared by every request handler.

    With ``serialize_access`` enabled, callers go through an ``asyncio.Lock``
    so only one backend call is in flight at a time. Waiting for the lock
    suspends the caller without blocking the event loop, and gives up with
    ``LockFailure`` after ``lock_timeout`` seconds. Each backend call is
    bounded by ``operation_timeout`` seconds, so a hung backend releases the
    lock with ``BackendUnavailableError`` instead of holding it forever.
    """

    def __init__(
        self,
        client: StoreClient,
        *,
        serialize_access: bool = True,
        lock_timeout: float | None = 15.0,
        operation_timeout: float | None = 10.0,
    ) -> None:
        super().__init__()
        self._client = client
        self._serialize_access = serialize_access
        self._lock_timeout = lock_timeout
        self._operation_timeout = operation_timeout
        self._lock = asyncio.Lock()

    @property
    def client(self) -> StoreClient:
        return self._client

    @property
    def locked(self) -> bool:
        """Return True while a caller holds exclusive access."""
        return self._lock.locked()

    @asynccontextmanager
    async def access(self) -> AsyncIterator[StoreClient]:
        """Yield the shared client, holding the lock when access is serialized."""
        if not self._serialize_access:
            yield self._client
            return

        try:
            async with asyncio.timeout(self._lock_timeout):
                await self._lock.acquire()
        except TimeoutError as error:
            logger.warning("timed out waiting for store client access", timeout=self._lock_timeout)
            msg = f"could not acquire store client within {self._lock_timeout}s"
            raise LockFailure(msg) from error

        try:
            yield self._client
        finally:
            self._lock.release()

    async def get(self, key: str) -> str:
        """Fetch the value for key through the shared client."""
        async with self.access() as client:
            return await self._call("GET", client.get, key)

    async def set(self, key: str, value: str) -> None:
        """Store value for key through the shared client."""
        async with self.access() as client:
            await self._call("SET", client.set, key, value)

    async def _call(self, command: str, method: Callable[..., Awaitable[_T]], *args: Any) -> _T:
        try:
            async with asyncio.timeout(self._operation_timeout):
                return await method(*args)
        except BackendError:
            raise
        except TimeoutError as error:
            msg = f"{command} timed out after {self._operation_timeout}s"
            raise BackendUnavailableError(msg) from error
        except Exception as error:
            logger.exception("store client raised an unexpected error", command=command)
            msg = f"{command} failed: {error.__class__.__name__}: {error}"
            raise BackendError(msg) from error

    async def close(self) -> None:
        """Close the shared client."""
        await self._client.close()
