"""Store client contract and implementations."""

from .in_memory import InMemoryStoreClient
from .protocol import StoreClient
from .redis import RedisStoreClient


__all__ = ["InMemoryStoreClient", "RedisStoreClient", "StoreClient"]
