"""HTTP routes and request/response bodies."""

from .models import GetRequest, GetResponse, SetRequest, SetResponse
from .routes import kv_bp


__all__ = ["GetRequest", "GetResponse", "SetRequest", "SetResponse", "kv_bp"]
