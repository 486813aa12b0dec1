"""Tests for the App Store Connect HTTP client."""

import re
from unittest.mock import MagicMock

import aiohttp
import pytest
from aioresponses import aioresponses

from ascbridge.xcode_cloud.auth import TokenSigner
from ascbridge.xcode_cloud.client import AppStoreConnectClient, parse_error_messages
from ascbridge.xcode_cloud.errors import BackendError, InvalidResponseError
from ascbridge.xcode_cloud.models.config import AppStoreConnectConfig

BASE_URL = "https://api.appstoreconnect.apple.com/v1"


def _url(path: str) -> re.Pattern[str]:
    return re.compile(rf"^{re.escape(BASE_URL + path)}(\?.*)?$")


@pytest.fixture
def signer() -> MagicMock:
    """Create a signer handing out a new token per call."""
    mock = MagicMock(spec=TokenSigner)
    mock.get_token.side_effect = [f"token-{i}" for i in range(1, 10)]
    return mock


@pytest.fixture
def client(config: AppStoreConnectConfig, signer: MagicMock) -> AppStoreConnectClient:
    """Create client with a mocked signer."""
    return AppStoreConnectClient(config, signer)


def _calls(m: aioresponses) -> list[dict[str, object]]:
    return [call.kwargs for calls in m.requests.values() for call in calls]


async def test_get_sends_token_and_params(client: AppStoreConnectClient) -> None:
    """get attaches a bearer token and the query parameters."""
    with aioresponses() as m:
        m.get(_url("/ciProducts"), payload={"data": []})

        data = await client.get("/ciProducts", {"limit": 10, "include": "app"})

    assert data == {"data": []}
    (call,) = _calls(m)
    assert call["headers"]["Authorization"] == "Bearer token-1"  # type: ignore[index]
    assert call["params"] == {"limit": 10, "include": "app"}


async def test_every_request_gets_fresh_token(
    client: AppStoreConnectClient, signer: MagicMock
) -> None:
    """Tokens are requested anew for every call."""
    with aioresponses() as m:
        m.get(_url("/ciBuildRuns/run-1"), payload={"data": {}}, repeat=True)

        await client.get("/ciBuildRuns/run-1")
        await client.get("/ciBuildRuns/run-1")

    tokens = [call["headers"]["Authorization"] for call in _calls(m)]  # type: ignore[index]
    assert tokens == ["Bearer token-1", "Bearer token-2"]
    assert signer.get_token.call_count == 2


async def test_post_sends_json_body(client: AppStoreConnectClient) -> None:
    """post sends the document as JSON and returns the created resource."""
    body = {"data": {"type": "ciBuildRuns"}}
    with aioresponses() as m:
        m.post(_url("/ciBuildRuns"), status=201, payload={"data": {"id": "run-9"}})

        data = await client.post("/ciBuildRuns", body)

    assert data == {"data": {"id": "run-9"}}
    (call,) = _calls(m)
    assert call["json"] == body


async def test_delete_returns_none_on_no_content(
    client: AppStoreConnectClient,
) -> None:
    """delete accepts a 204 response without a body."""
    with aioresponses() as m:
        m.delete(_url("/ciBuildRuns/run-1"), status=204)

        assert await client.delete("/ciBuildRuns/run-1") is None


async def test_not_found_raises_backend_error(client: AppStoreConnectClient) -> None:
    """A 404 error envelope becomes a BackendError with its details."""
    detail = "There is no resource of type 'ciBuildRuns' with id 'missing'"
    with aioresponses() as m:
        m.get(
            _url("/ciBuildRuns/missing"),
            status=404,
            payload={
                "errors": [
                    {
                        "status": "404",
                        "code": "NOT_FOUND",
                        "title": "The specified resource does not exist",
                        "detail": detail,
                    }
                ]
            },
        )

        with pytest.raises(BackendError) as exc_info:
            await client.get("/ciBuildRuns/missing")

    assert exc_info.value.status_code == 404
    assert exc_info.value.messages == [detail]
    assert exc_info.value.is_not_found
    assert exc_info.value.to_dict()["kind"] == "backend"


async def test_server_error_is_not_retried(client: AppStoreConnectClient) -> None:
    """A 5xx response is raised after a single attempt."""
    with aioresponses() as m:
        m.post(_url("/ciBuildRuns"), status=503, body="Service Unavailable")

        with pytest.raises(BackendError) as exc_info:
            await client.post("/ciBuildRuns", {"data": {}})

    assert exc_info.value.status_code == 503
    assert exc_info.value.messages == ["Service Unavailable"]
    assert len(_calls(m)) == 1


async def test_non_json_success_body_raises_invalid_response(
    client: AppStoreConnectClient,
) -> None:
    """A 2xx body that is not JSON raises InvalidResponseError."""
    with aioresponses() as m:
        m.get(_url("/ciProducts"), status=200, body="<html>maintenance</html>")

        with pytest.raises(InvalidResponseError) as exc_info:
            await client.get("/ciProducts")

    assert exc_info.value.path == "/ciProducts"
    assert "not JSON" in exc_info.value.message


async def test_non_object_success_body_raises_invalid_response(
    client: AppStoreConnectClient,
) -> None:
    """A 2xx JSON body that is not an object raises InvalidResponseError."""
    with aioresponses() as m:
        m.get(_url("/ciProducts"), status=200, payload=["product-1"])

        with pytest.raises(InvalidResponseError, match="got list"):
            await client.get("/ciProducts")


async def test_transport_error_propagates_unchanged(
    client: AppStoreConnectClient,
) -> None:
    """Network failures are not wrapped in BackendError."""
    with aioresponses() as m:
        m.get(
            _url("/ciProducts"),
            exception=aiohttp.ClientConnectionError("connection refused"),
        )

        with pytest.raises(aiohttp.ClientConnectionError):
            await client.get("/ciProducts")


def test_timeout_from_config(config: AppStoreConnectConfig, signer: MagicMock) -> None:
    """request_timeout sets the total timeout; zero disables it."""
    assert AppStoreConnectClient(config, signer).timeout.total == 60.0

    no_timeout = config.model_copy(update={"request_timeout": 0})
    assert AppStoreConnectClient(no_timeout, signer).timeout.total is None


def test_base_url_override(config: AppStoreConnectConfig, signer: MagicMock) -> None:
    """A trailing slash in the base URL is ignored."""
    custom = config.model_copy(update={"base_url": "http://localhost:8080/v1/"})

    assert AppStoreConnectClient(custom, signer).base_url == "http://localhost:8080/v1"


def test_default_signer_is_built_from_config(config: AppStoreConnectConfig) -> None:
    """Without an explicit signer the client signs with the configured key."""
    client = AppStoreConnectClient(config)

    assert isinstance(client.signer, TokenSigner)
    assert client.signer.key_id == config.key_id


@pytest.mark.parametrize(
    ("body", "expected"),
    [
        ('{"errors": [{"detail": "a"}, {"detail": "b"}]}', ["a", "b"]),
        ('{"errors": [{"title": "Forbidden"}]}', ["Forbidden"]),
        ('{"errors": ["oops", {"code": "X"}]}', []),
        ('{"message": "not an envelope"}', ['{"message": "not an envelope"}']),
        ("Bad Gateway", ["Bad Gateway"]),
        ("", []),
    ],
)
def test_parse_error_messages(body: str, expected: list[str]) -> None:
    """Error envelopes yield detail messages, anything else the raw body."""
    assert parse_error_messages(body) == expected
