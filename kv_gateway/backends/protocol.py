"""Store client interface definitions."""

from __future__ import annotations

from abc import ABC, abstractmethod


class StoreClient(ABC):
    """Async string key-value store client.

    Implementations must be safe to share between concurrent callers.
    Failures are raised as :class:`kv_gateway.errors.BackendError` or one
    of its subclasses; no retries are performed.
    """

    @abstractmethod
    async def get(self, key: str) -> str:
        """Return the value for key.

        Raises ``KeyNotFoundError`` when the key does not exist.
        """

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store value for key, overwriting any previous value."""

    @abstractmethod
    async def close(self) -> None:
        """Close any client resources."""
