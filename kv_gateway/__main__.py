"""Interface for ``python -m kv_gateway``."""

from __future__ import annotations

import asyncio
from argparse import ArgumentParser
from typing import TYPE_CHECKING, Any

from hypercorn.asyncio import serve
from hypercorn.config import Config as HypercornConfig
from pydantic import ValidationError

from ._version import version
from .app import create_app
from .config import LOG_LEVELS, Settings
from .logging_utils import configure_logging, create_logger


if TYPE_CHECKING:
    from collections.abc import Sequence


__all__ = ["build_settings", "main"]

logger = create_logger("kv_gateway.main")


def _parser() -> ArgumentParser:
    parser = ArgumentParser(prog="kv-gateway", description="HTTP gateway for a Redis-compatible key-value store.")
    _ = parser.add_argument("-v", "--version", action="version", version=version)
    _ = parser.add_argument("--host", help="address to listen on")
    _ = parser.add_argument("--port", type=int, help="port to listen on")
    _ = parser.add_argument("--redis-url", help="backend URL, e.g. redis://127.0.0.1:6379")
    _ = parser.add_argument("--backend", choices=["redis", "memory"], help="store client implementation")
    _ = parser.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS, help="logging level name")
    return parser


def build_settings(args: Sequence[str] | None = None) -> Settings:
    """Parse CLI flags and merge them over environment settings."""
    parser = _parser()
    namespace = parser.parse_args(args)
    overrides: dict[str, Any] = {
        "HTTP_HOST": namespace.host,
        "HTTP_PORT": namespace.port,
        "REDIS_URL": namespace.redis_url,
        "BACKEND": namespace.backend,
        "LOG_LEVEL": namespace.log_level,
    }
    try:
        return Settings(**{name: value for name, value in overrides.items() if value is not None})
    except ValidationError as error:
        parser.error(f"invalid settings: {error}")


def main(args: Sequence[str] | None = None) -> None:
    """Start the gateway and serve until interrupted."""
    settings = build_settings(args)
    configure_logging(settings.SERVICE_NAME, settings.LOG_LEVEL, settings.LOG_FORMAT)

    try:
        app = create_app(settings)
    except ValueError as error:
        logger.critical("invalid gateway configuration", error=str(error))
        raise SystemExit(1) from error

    config = HypercornConfig()
    config.bind = [f"{settings.HTTP_HOST}:{settings.HTTP_PORT}"]
    config.accesslog = "-"
    config.errorlog = "-"
    config.loglevel = settings.LOG_LEVEL.lower()

    logger.info("starting gateway", bind=config.bind[0], backend=settings.BACKEND)
    asyncio.run(serve(app, config))


if __name__ == "__main__":
    main()
