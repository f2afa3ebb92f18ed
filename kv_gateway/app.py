"""Application factory for the gateway."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from pydantic import ValidationError
from quart import Quart, Response, jsonify, request
from structlog.contextvars import bind_contextvars, clear_contextvars
from werkzeug.exceptions import HTTPException

from kv_gateway.api.routes import kv_bp
from kv_gateway.backends import InMemoryStoreClient, RedisStoreClient
from kv_gateway.config import Settings
from kv_gateway.errors import BackendError, GatewayError, InvalidRequestError, error_status, internal_error_body
from kv_gateway.logging_utils import create_logger
from kv_gateway.state import GatewayState


if TYPE_CHECKING:
    from kv_gateway.backends import StoreClient


logger = create_logger("kv_gateway.app")


class GatewayApp(Quart):
    """Quart application carrying the gateway's shared state.

    ``gateway_state`` and ``settings`` are set by :func:`create_app` before
    any request is served; handlers borrow the state and never replace it.
    """

    gateway_state: GatewayState
    settings: Settings


def create_store_client(settings: Settings) -> StoreClient:
    """Build the store client selected by ``settings.BACKEND``.

    An unparsable ``REDIS_URL`` raises ``ValueError``.
    """
    if settings.BACKEND == "memory":
        return InMemoryStoreClient()
    return RedisStoreClient(
        settings.REDIS_URL,
        socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
        socket_connect_timeout=settings.REDIS_CONNECT_TIMEOUT,
    )


def create_app(settings: Settings | None = None, *, client: StoreClient | None = None) -> GatewayApp:
    """Create a configured gateway app.

    Parameters
    ----------
    settings
        Gateway settings; loaded from the environment when omitted.
    client
        Store client to share between handlers. Built from ``settings`` when
        omitted.
    """
    settings = settings if settings is not None else Settings()
    store_client = client if client is not None else create_store_client(settings)

    app = GatewayApp(__name__)
    app.settings = settings
    app.gateway_state = GatewayState(
        store_client,
        serialize_access=settings.SERIALIZE_BACKEND_ACCESS,
        lock_timeout=settings.LOCK_TIMEOUT_SECONDS,
        operation_timeout=settings.OPERATION_TIMEOUT_SECONDS,
    )

    @app.before_request
    async def bind_request_context() -> None:
        clear_contextvars()
        bind_contextvars(request_id=uuid.uuid4().hex, method=request.method, path=request.path)

    @app.after_serving
    async def shutdown() -> None:
        try:
            await app.gateway_state.close()
            logger.info("store client closed")
        except Exception:
            logger.exception("error while closing store client")

    @app.errorhandler(GatewayError)
    async def handle_gateway_error(error: GatewayError) -> tuple[Response, int]:
        status = error_status(error, collapse_backend_errors=settings.COLLAPSE_BACKEND_ERRORS)
        if isinstance(error, BackendError):
            logger.error("backend failure", error_code=error.error_code, detail=error.detail, status=status)
        else:
            logger.warning("request failed", error_code=error.error_code, detail=error.detail, status=status)
        return jsonify(error.to_dict()), status

    @app.errorhandler(ValidationError)
    async def handle_validation_error(error: ValidationError) -> tuple[Response, int]:
        invalid = InvalidRequestError("request body does not match the expected shape", detail=_describe(error))
        logger.warning("invalid request body", detail=invalid.detail)
        return jsonify(invalid.to_dict()), invalid.status_code

    @app.errorhandler(Exception)
    async def handle_unexpected_error(error: Exception) -> tuple[Response, int]:
        if isinstance(error, HTTPException):
            body = {"error": {"error_code": f"HTTP_{error.code}", "message": error.description, "detail": None}}
            return jsonify(body), error.code or 500
        logger.error("unexpected error while handling request", exc_info=error)
        return jsonify(internal_error_body()), 500

    app.register_blueprint(kv_bp)
    logger.info(
        "gateway app created",
        backend=settings.BACKEND,
        serialize_access=settings.SERIALIZE_BACKEND_ACCESS,
    )
    return app


def _describe(error: ValidationError) -> str:
    parts: list[str] = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ())) or "body"
        parts.append(f"{location}: {item.get('msg', 'invalid')}")
    return "; ".join(parts)
