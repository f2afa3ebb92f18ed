"""Minimal example driving the gateway routes against the in-memory store client."""

import asyncio

from kv_gateway.app import create_app
from kv_gateway.backends import InMemoryStoreClient
from kv_gateway.config import Settings


async def run() -> None:
    """Store a value, read it back and ask for a missing key."""
    app = create_app(Settings(BACKEND="memory"), client=InMemoryStoreClient())
    client = app.test_client()

    response = await client.post("/", json={"key": "a", "value": "1"})
    print("POST /:", response.status_code, await response.get_json())

    response = await client.get("/", json={"key": "a"})
    print("GET /:", response.status_code, await response.get_json())

    response = await client.get("/", json={"key": "missing"})
    print("GET / (missing):", response.status_code, await response.get_json())


def main() -> None:
    asyncio.run(run())


if __name__ == "__main__":
    main()
