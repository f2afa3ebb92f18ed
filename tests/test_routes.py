import asyncio

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from kv_gateway.app import GatewayApp, create_app
from kv_gateway.backends import InMemoryStoreClient, RedisStoreClient
from kv_gateway.config import Settings

from .fakes import BlockingStoreClient, BrokenStoreClient, RecordingStoreClient


def _settings(**overrides: object) -> Settings:
    return Settings(BACKEND="memory", **overrides)


@pytest.fixture
def client() -> RecordingStoreClient:
    return RecordingStoreClient()


@pytest.fixture
def app(client: RecordingStoreClient) -> GatewayApp:
    return create_app(_settings(), client=client)


@pytest.mark.asyncio
async def test_post_then_get_returns_stored_value(app: GatewayApp) -> None:
    test_client = app.test_client()

    response = await test_client.post("/", json={"key": "a", "value": "1"})
    assert response.status_code == 202
    assert await response.get_json() == {"status": "accepted", "key": "a"}

    response = await test_client.get("/", json={"key": "a"})
    assert response.status_code == 200
    assert await response.get_json() == {"key": "a", "value": "1"}


@pytest.mark.asyncio
async def test_post_overwrites_previous_value(app: GatewayApp) -> None:
    test_client = app.test_client()

    _ = await test_client.post("/", json={"key": "a", "value": "1"})
    _ = await test_client.post("/", json={"key": "a", "value": "2"})

    response = await test_client.get("/", json={"key": "a"})
    assert (await response.get_json())["value"] == "2"


@pytest.mark.asyncio
async def test_empty_strings_are_forwarded(app: GatewayApp, client: RecordingStoreClient) -> None:
    test_client = app.test_client()

    response = await test_client.post("/", json={"key": "", "value": ""})
    assert response.status_code == 202
    assert client.store == {"": ""}


@pytest.mark.asyncio
async def test_get_missing_key_returns_not_found(app: GatewayApp) -> None:
    response = await app.test_client().get("/", json={"key": "missing"})

    assert response.status_code == 404
    error = (await response.get_json())["error"]
    assert error["error_code"] == "KEY_NOT_FOUND"
    assert "missing" in error["detail"]


@pytest.mark.asyncio
async def test_collapsed_errors_return_500_for_missing_key(client: RecordingStoreClient) -> None:
    app = create_app(_settings(COLLAPSE_BACKEND_ERRORS=True), client=client)

    response = await app.test_client().get("/", json={"key": "missing"})

    assert response.status_code == 500
    error = (await response.get_json())["error"]
    assert error["error_code"] == "KEY_NOT_FOUND"
    assert error["message"]
    assert error["detail"]


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["GET", "POST"])
async def test_malformed_json_returns_400(app: GatewayApp, method: str) -> None:
    response = await app.test_client().open(
        "/",
        method=method,
        data=b"{not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert (await response.get_json())["error"]["error_code"] == "INVALID_REQUEST"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("method", "body"),
    [
        ("GET", {}),
        ("GET", {"key": 1}),
        ("GET", ["a"]),
        ("POST", {"key": "a"}),
        ("POST", {"key": "a", "value": 1}),
        ("POST", {"value": "1"}),
    ],
)
async def test_wrong_body_shape_returns_400(
    app: GatewayApp, client: RecordingStoreClient, method: str, body: object
) -> None:
    response = await app.test_client().open("/", method=method, json=body)

    assert response.status_code == 400
    error = (await response.get_json())["error"]
    assert error["error_code"] == "INVALID_REQUEST"
    assert error["detail"]
    assert client.calls == 0


@pytest.mark.asyncio
async def test_unsupported_method_returns_json_405(app: GatewayApp) -> None:
    response = await app.test_client().put("/", json={"key": "a"})

    assert response.status_code == 405
    assert (await response.get_json())["error"]["error_code"] == "HTTP_405"


@pytest.mark.asyncio
async def test_unexpected_client_error_returns_500() -> None:
    app = create_app(_settings(), client=BrokenStoreClient())

    response = await app.test_client().get("/", json={"key": "a"})

    assert response.status_code == 500
    error = (await response.get_json())["error"]
    assert error["error_code"] == "BACKEND_FAILURE"
    assert "unexpected reply" in error["detail"]


@pytest.mark.asyncio
async def test_concurrent_requests_never_overlap_on_client() -> None:
    store_client = RecordingStoreClient(delay=0.005)
    app = create_app(_settings(), client=store_client)
    test_client = app.test_client()

    writes = await asyncio.gather(
        *(test_client.post("/", json={"key": f"k{i}", "value": str(i)}) for i in range(20))
    )
    reads = await asyncio.gather(*(test_client.get("/", json={"key": f"k{i}"}) for i in range(20)))

    assert [response.status_code for response in writes] == [202] * 20
    assert [response.status_code for response in reads] == [200] * 20
    assert [(await response.get_json())["value"] for response in reads] == [str(i) for i in range(20)]
    assert store_client.calls == 40
    assert store_client.overlapped is False


@pytest.mark.asyncio
async def test_lock_failure_returns_generic_500() -> None:
    store_client = BlockingStoreClient()
    app = create_app(_settings(LOCK_TIMEOUT_SECONDS=0.05, OPERATION_TIMEOUT_SECONDS=None), client=store_client)
    test_client = app.test_client()

    pending = asyncio.create_task(test_client.post("/", json={"key": "a", "value": "1"}))
    await store_client.entered.wait()

    response = await test_client.get("/", json={"key": "a"})
    assert response.status_code == 500
    error = (await response.get_json())["error"]
    assert error["error_code"] == "LOCK_FAILURE"
    assert error["message"] == "internal server error"

    store_client.release.set()
    assert (await pending).status_code == 202


@pytest.mark.asyncio
async def test_hung_backend_returns_503() -> None:
    store_client = BlockingStoreClient()
    app = create_app(_settings(OPERATION_TIMEOUT_SECONDS=0.05), client=store_client)

    response = await app.test_client().post("/", json={"key": "a", "value": "1"})

    assert response.status_code == 503
    assert (await response.get_json())["error"]["error_code"] == "BACKEND_UNAVAILABLE"


@pytest.mark.asyncio
@pytest.mark.parametrize(("collapse", "expected_status"), [(False, 503), (True, 500)])
async def test_unreachable_redis_returns_connection_failure(collapse: bool, expected_status: int) -> None:
    store_client = RedisStoreClient("redis://127.0.0.1:1", socket_connect_timeout=0.5, socket_timeout=0.5)
    app = create_app(
        _settings(COLLAPSE_BACKEND_ERRORS=collapse, OPERATION_TIMEOUT_SECONDS=2.0),
        client=store_client,
    )
    test_client = app.test_client()

    try:
        for response in (
            await test_client.get("/", json={"key": "a"}),
            await test_client.post("/", json={"key": "a", "value": "1"}),
        ):
            assert response.status_code == expected_status
            error = (await response.get_json())["error"]
            assert error["error_code"] == "BACKEND_UNAVAILABLE"
            assert error["detail"]
    finally:
        await store_client.close()


@pytest.mark.asyncio
async def test_after_serving_closes_store_client(client: RecordingStoreClient) -> None:
    app = create_app(_settings(), client=client)

    async with app.test_app():
        pass

    assert client.closed is True


@settings(max_examples=50, deadline=None)
@given(key=st.text(max_size=40), value=st.text(max_size=200))
def test_set_then_get_roundtrip_property(key: str, value: str) -> None:
    async def scenario() -> None:
        app = create_app(_settings(), client=InMemoryStoreClient())
        test_client = app.test_client()
        response = await test_client.post("/", json={"key": key, "value": value})
        assert response.status_code == 202
        response = await test_client.get("/", json={"key": key})
        assert await response.get_json() == {"key": key, "value": value}

    asyncio.run(scenario())


@pytest.mark.asyncio
async def test_queued_request_outlasts_slow_backend_call() -> None:
    store_client = RecordingStoreClient(delay=0.3)
    app = create_app(_settings(LOCK_TIMEOUT_SECONDS=0.6, OPERATION_TIMEOUT_SECONDS=0.4), client=store_client)
    test_client = app.test_client()

    first, second = await asyncio.gather(
        test_client.post("/", json={"key": "a", "value": "1"}),
        test_client.post("/", json={"key": "b", "value": "2"}),
    )

    assert first.status_code == 202
    assert second.status_code == 202
    assert store_client.store == {"a": "1", "b": "2"}
    assert store_client.overlapped is False


def test_default_lock_timeout_exceeds_operation_timeout() -> None:
    defaults = Settings()

    assert defaults.LOCK_TIMEOUT_SECONDS is not None
    assert defaults.OPERATION_TIMEOUT_SECONDS is not None
    assert defaults.LOCK_TIMEOUT_SECONDS > defaults.OPERATION_TIMEOUT_SECONDS
