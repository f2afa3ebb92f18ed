"""In-memory store client implementation."""

from __future__ import annotations

import asyncio
from typing import override

from kv_gateway.errors import KeyNotFoundError

from .protocol import StoreClient


class InMemoryStoreClient(StoreClient):
    """Process-local store client for development runs and tests."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        super().__init__()
        self._store: dict[str, str] = dict(initial or {})
        self._lock = asyncio.Lock()

    @override
    async def get(self, key: str) -> str:
        """Return value for key, raising ``KeyNotFoundError`` when missing."""
        async with self._lock:
            try:
                return self._store[key]
            except KeyError:
                raise KeyNotFoundError(key) from None

    @override
    async def set(self, key: str, value: str) -> None:
        """Store value for key."""
        async with self._lock:
            self._store[key] = value

    @override
    async def close(self) -> None:
        """Release client resources."""
        return
