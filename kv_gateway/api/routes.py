"""Fetch-by-key and store-by-key routes."""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar, cast

from pydantic import BaseModel
from quart import Blueprint, Response, current_app, jsonify, request

from kv_gateway.api.models import GetRequest, GetResponse, SetRequest, SetResponse
from kv_gateway.errors import InvalidRequestError
from kv_gateway.logging_utils import create_logger


if TYPE_CHECKING:
    from kv_gateway.app import GatewayApp
    from kv_gateway.state import GatewayState


_M = TypeVar("_M", bound=BaseModel)

logger = create_logger("kv_gateway.api.routes")
kv_bp = Blueprint("kv_routes", __name__)


def _gateway_state() -> GatewayState:
    return cast("GatewayApp", current_app).gateway_state


async def _read_body(model: type[_M]) -> _M:
    """Decode the JSON body into ``model``.

    Raises ``InvalidRequestError`` for undecodable JSON; shape errors
    surface as ``pydantic.ValidationError``.
    """
    payload = await request.get_json(force=True, silent=True)
    if payload is None:
        msg = "request body must be a JSON object"
        raise InvalidRequestError(msg, detail="body is empty or not valid JSON")
    return model.model_validate(payload)


@kv_bp.route("/", methods=["GET"])
async def get_value() -> tuple[Response, int]:
    """Return the stored value for a key."""
    body = await _read_body(GetRequest)
    value = await _gateway_state().get(body.key)
    logger.debug("fetched key", key=body.key)
    return jsonify(GetResponse(key=body.key, value=value).model_dump()), 200


@kv_bp.route("/", methods=["POST"])
async def set_value() -> tuple[Response, int]:
    """Store a value for a key."""
    body = await _read_body(SetRequest)
    await _gateway_state().set(body.key, body.value)
    logger.debug("stored key", key=body.key)
    return jsonify(SetResponse(key=body.key).model_dump()), 202
