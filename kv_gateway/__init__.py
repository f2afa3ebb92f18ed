"""kv-gateway - HTTP gateway for fetch-by-key and store-by-key over a KV backend"""

from ._version import version as __version__
from .app import GatewayApp, create_app
from .backends import InMemoryStoreClient, RedisStoreClient, StoreClient
from .config import Settings
from .errors import (
    BackendError,
    BackendUnavailableError,
    GatewayError,
    InvalidRequestError,
    KeyNotFoundError,
    LockFailure,
)
from .state import GatewayState


__all__ = [
    "BackendError",
    "BackendUnavailableError",
    "GatewayApp",
    "GatewayError",
    "GatewayState",
    "InMemoryStoreClient",
    "InvalidRequestError",
    "KeyNotFoundError",
    "LockFailure",
    "RedisStoreClient",
    "Settings",
    "StoreClient",
    "__version__",
    "create_app",
]
