r"""Unit tests for ApiClient."""

from __future__ import annotations

import asyncio
import io
import json
from typing import TYPE_CHECKING
from unittest.mock import Mock, call

import httpx
import pytest

from aresult import (
    ApiClient,
    ClientHooks,
    ClientOptions,
    DownloadedFile,
    ErrorInfo,
    Failure,
    InvalidArgumentError,
    MultipartForm,
    RetryPolicy,
    Success,
    with_auth,
)
from tests.helpers import BASE_URL, RecordingHandler, create_client, json_response

if TYPE_CHECKING:
    from collections.abc import Coroutine

NO_JITTER = {"retries": 2, "baseDelayMs": 100, "maxDelayMs": 100, "jitter": False}


###############################
#     Tests for ApiClient     #
###############################


def test_api_client_defaults() -> None:
    client = ApiClient()
    assert client.options == ClientOptions()
    assert client.retry_policy == RetryPolicy()
    assert isinstance(client.raw, httpx.AsyncClient)


def test_api_client_options_and_overrides() -> None:
    """Test that explicit keyword arguments win over the options object."""
    options = ClientOptions(
        base_url="https://a.example.com", timeout=5.0, retry=RetryPolicy(retries=3)
    )
    client = ApiClient(options=options, timeout=20.0, retry={"jitter": False})
    assert client.options.base_url == "https://a.example.com"
    assert client.options.timeout == 20.0
    assert client.retry_policy == RetryPolicy(retries=3, jitter=False)


def test_api_client_invalid_retry() -> None:
    with pytest.raises(ValueError, match=r"retries must be an integer >= 0"):
        ApiClient(retry={"retries": -1})


def test_api_client_repr() -> None:
    assert repr(ApiClient(base_url=BASE_URL)) == "ApiClient(base_url='https://api.example.com')"


def test_with_auth() -> None:
    client = with_auth(base_url=BASE_URL, auth_headers={"Authorization": "Bearer t"})
    assert isinstance(client, ApiClient)
    assert client.options.auth_headers == {"Authorization": "Bearer t"}


@pytest.mark.asyncio
async def test_api_client_context_manager_closes_client() -> None:
    async with create_client(RecordingHandler([json_response()])) as client:
        raw = client.raw
        assert not raw.is_closed
    assert raw.is_closed


@pytest.mark.asyncio
async def test_api_client_external_client_left_open() -> None:
    raw = httpx.AsyncClient(
        base_url=BASE_URL, transport=httpx.MockTransport(RecordingHandler([json_response()]))
    )
    async with ApiClient(client=raw) as client:
        assert client.raw is raw
    assert not raw.is_closed
    await raw.aclose()


############################################
#     Tests for synchronous validation     #
############################################


@pytest.mark.parametrize(
    "method",
    ["get_many", "get_one", "post", "put", "patch", "remove", "download"],
)
@pytest.mark.parametrize("path", ["", "   ", None])
def test_api_client_invalid_path_raises_synchronously(method: str, path: object) -> None:
    """Test that an invalid path raises before any coroutine is created."""
    handler = RecordingHandler([json_response()])
    client = create_client(handler)
    with pytest.raises(InvalidArgumentError, match=r"URL must be a non-empty string"):
        getattr(client, method)(path)
    assert handler.call_count == 0


def test_api_client_upload_invalid_path() -> None:
    client = create_client(RecordingHandler([json_response()]))
    with pytest.raises(InvalidArgumentError, match=r"URL must be a non-empty string"):
        client.upload("", b"abc")


def test_api_client_upload_invalid_data() -> None:
    client = create_client(RecordingHandler([json_response()]))
    with pytest.raises(InvalidArgumentError, match=r"Invalid upload data type"):
        client.upload("/files", 42)


def test_api_client_invalid_response_type() -> None:
    client = create_client(RecordingHandler([json_response()]))
    with pytest.raises(InvalidArgumentError, match=r"response_type must be one of"):
        client.get_one("/users/1", response_type="xml")


def test_api_client_methods_return_coroutines() -> None:
    client = create_client(RecordingHandler([json_response()]))
    coroutine: Coroutine = client.get_one("/users/1")
    assert asyncio.iscoroutine(coroutine)
    coroutine.close()


#########################################
#     Tests for the request methods     #
#########################################


@pytest.mark.asyncio
async def test_api_client_get_one_success() -> None:
    handler = RecordingHandler([json_response(200, {"id": 1})])
    async with create_client(handler) as client:
        result = await client.get_one("/users/1")

    assert result == Success(data={"id": 1})
    assert handler.call_count == 1
    assert handler.requests[0].method == "GET"


@pytest.mark.asyncio
async def test_api_client_get_many_params() -> None:
    handler = RecordingHandler([json_response(200, [{"id": 1}, {"id": 2}])])
    async with create_client(handler) as client:
        result = await client.get_many("/users", params={"page": 2, "size": 10})

    assert result.data == [{"id": 1}, {"id": 2}]
    assert handler.requests[0].url.params == httpx.QueryParams({"page": "2", "size": "10"})


@pytest.mark.asyncio
@pytest.mark.parametrize(("method", "verb"), [("post", "POST"), ("put", "PUT"), ("patch", "PATCH")])
async def test_api_client_payload_methods(method: str, verb: str) -> None:
    handler = RecordingHandler([json_response(200, {"id": 1, "name": "Ada"})])
    async with create_client(handler) as client:
        result = await getattr(client, method)("/users/1", {"name": "Ada"})

    assert result == Success(data={"id": 1, "name": "Ada"})
    request = handler.requests[0]
    assert request.method == verb
    assert json.loads(request.content) == {"name": "Ada"}


@pytest.mark.asyncio
async def test_api_client_remove_no_content() -> None:
    handler = RecordingHandler([httpx.Response(204)])
    async with create_client(handler) as client:
        result = await client.remove("/users/1")

    assert result == Success(data=None)
    assert handler.requests[0].method == "DELETE"


@pytest.mark.asyncio
async def test_api_client_text_response_type() -> None:
    handler = RecordingHandler([httpx.Response(200, text="pong")])
    async with create_client(handler) as client:
        assert await client.get_one("/ping", response_type="text") == Success(data="pong")


@pytest.mark.asyncio
async def test_api_client_canonical_payload() -> None:
    handler = RecordingHandler([json_response(200, {"status": True, "data": {"id": 1}})])
    async with create_client(handler) as client:
        assert await client.get_one("/users/1") == Success(data={"id": 1})


@pytest.mark.asyncio
async def test_api_client_retries_then_succeeds(mock_asleep: Mock) -> None:
    """Test two 503 answers followed by a success with fixed 100ms waits."""
    handler = RecordingHandler(
        [json_response(503), json_response(503), json_response(200, {"id": 1})]
    )
    async with create_client(handler) as client:
        result = await client.get_one("/users/1", retry=NO_JITTER)

    assert result.status is True
    assert result == Success(data={"id": 1})
    assert handler.call_count == 3
    assert mock_asleep.call_args_list == [call(0.1), call(0.1)]


@pytest.mark.asyncio
async def test_api_client_client_level_retry(mock_asleep: Mock) -> None:
    handler = RecordingHandler([json_response(500)])
    async with create_client(handler, retry={"retries": 0}) as client:
        result = await client.get_one("/users/1")

    assert handler.call_count == 1
    assert result.data.status_code == 500
    mock_asleep.assert_not_called()


@pytest.mark.asyncio
async def test_api_client_not_found(mock_asleep: Mock) -> None:
    handler = RecordingHandler([json_response(404, {"message": "User not found"})])
    async with create_client(handler) as client:
        result = await client.get_one("/users/9", retry={"retries": 3})

    assert handler.call_count == 1
    assert result == Failure(
        data=ErrorInfo(
            message="User not found",
            status_code=404,
            code="ERR_BAD_REQUEST",
            extra={"message": "User not found"},
        )
    )
    assert result.to_dict()["data"]["statusCode"] == 404


@pytest.mark.asyncio
async def test_api_client_network_error(mock_asleep: Mock) -> None:
    handler = RecordingHandler([httpx.ConnectError("Connection refused")])
    async with create_client(handler) as client:
        result = await client.get_many("/users", retry={"retries": 2})

    assert handler.call_count == 3
    assert result == Failure(data=ErrorInfo(message="Connection refused", code="ERR_NETWORK"))


@pytest.mark.asyncio
async def test_api_client_unserializable_payload(mock_asleep: Mock) -> None:
    """Test that a payload httpx cannot encode resolves to a failure without
    any exchange."""
    on_error = Mock()
    handler = RecordingHandler([json_response()])
    async with create_client(handler, hooks=ClientHooks(on_error=on_error)) as client:
        result = await client.post("/users", {"when": object()}, retry={"retries": 3})

    assert not result.status
    assert result.data.code == "ERR_BAD_OPTION_VALUE"
    assert result.data.message.startswith("Invalid request")
    assert handler.call_count == 0
    on_error.assert_called_once()
    mock_asleep.assert_not_called()


@pytest.mark.asyncio
async def test_api_client_invalid_retry_override(mock_asleep: Mock) -> None:
    handler = RecordingHandler([json_response()])
    async with create_client(handler) as client:
        result = await client.get_one("/users/1", retry={"retries": -1})

    assert not result.status
    assert result.data.message.startswith("Invalid retry configuration")
    assert handler.call_count == 0


@pytest.mark.asyncio
async def test_api_client_abort_before_send(abort_signal: asyncio.Event) -> None:
    """Test that an aborted call is attempted once and never retried."""
    handler = RecordingHandler([json_response()])
    abort_signal.set()
    async with create_client(handler) as client:
        result = await client.get_one("/users/1", signal=abort_signal, retry={"retries": 3})

    assert handler.call_count == 0
    assert result == Failure(data=ErrorInfo(message="Request aborted", code="ERR_CANCELED"))


@pytest.mark.asyncio
async def test_api_client_abort_during_backoff(abort_signal: asyncio.Event) -> None:
    """Test that the signal interrupts the wait and ends the call as aborted."""
    handler = RecordingHandler([json_response(503)])
    retry = {"retries": 5, "baseDelayMs": 10_000, "maxDelayMs": 10_000}
    async with create_client(handler) as client:
        asyncio.get_running_loop().call_later(0.05, abort_signal.set)
        result = await client.get_one("/users/1", signal=abort_signal, retry=retry)

    assert handler.call_count == 1
    assert result.data.code == "ERR_CANCELED"


@pytest.mark.asyncio
async def test_api_client_hooks(mock_asleep: Mock) -> None:
    hooks = ClientHooks(on_error=Mock(), on_auth_error=Mock(), on_response=Mock())
    handler = RecordingHandler([json_response(401, {"error": "token expired"})])
    async with create_client(handler, hooks=hooks) as client:
        result = await client.get_one("/me")

    assert result.data.message == "token expired"
    assert result.data.status_code == 401
    hooks.on_auth_error.assert_called_once()
    hooks.on_error.assert_called_once()
    hooks.on_response.assert_not_called()


@pytest.mark.asyncio
async def test_api_client_failing_hook_never_fails_call() -> None:
    hooks = ClientHooks(on_response=Mock(side_effect=RuntimeError("hook failure")))
    async with create_client(RecordingHandler([json_response(200, [])]), hooks=hooks) as client:
        assert await client.get_many("/users") == Success(data=[])


@pytest.mark.asyncio
async def test_api_client_auth_and_default_headers() -> None:
    handler = RecordingHandler([json_response()])
    client = create_client(
        handler,
        auth_headers={"Authorization": "Bearer token"},
        default_headers={"X-Client": "aresult"},
    )
    async with client:
        await client.get_one("/me", headers={"X-Request-Id": "1"})

    headers = handler.requests[0].headers
    assert headers["authorization"] == "Bearer token"
    assert headers["x-client"] == "aresult"
    assert headers["x-request-id"] == "1"
    assert headers["content-type"] == "application/json"


############################
#     Tests for upload     #
############################


@pytest.mark.asyncio
async def test_api_client_upload_mapping() -> None:
    """Test that None values are left out of the multipart body."""
    handler = RecordingHandler([json_response(201, {"uploaded": True})])
    progress = Mock()
    async with create_client(handler) as client:
        result = await client.upload("/files", {"a": 1, "b": None}, on_upload_progress=progress)

    assert result == Success(data={"uploaded": True})
    request = handler.requests[0]
    content_type = request.headers["content-type"]
    assert content_type.startswith("multipart/form-data; boundary=")
    boundary = content_type.split("boundary=", 1)[1]
    assert f"--{boundary}".encode() in request.content
    assert b'name="a"' in request.content
    assert b'name="b"' not in request.content
    progress.assert_called_once_with(1, 1)


@pytest.mark.asyncio
async def test_api_client_upload_bytes() -> None:
    handler = RecordingHandler([json_response(200, {"id": "f1"})])
    async with create_client(handler) as client:
        result = await client.upload("/files", b"hello", field_name="document")

    assert result.status
    assert b'name="document"; filename="blob"' in handler.requests[0].content
    assert b"hello" in handler.requests[0].content


@pytest.mark.asyncio
async def test_api_client_upload_form_and_file_object() -> None:
    handler = RecordingHandler([json_response()])
    form = MultipartForm()
    form.append("title", "Report")
    form.append_file("file", io.BytesIO(b"%PDF-1.7"), filename="report.pdf")
    progress = Mock()
    async with create_client(handler) as client:
        await client.upload("/files", form, on_upload_progress=progress)

    content = handler.requests[0].content
    assert b'name="title"' in content
    assert b'filename="report.pdf"' in content
    progress.assert_called_once_with(14, 14)


@pytest.mark.asyncio
async def test_api_client_upload_partially_read_file_object() -> None:
    """Test that the reported size covers the whole file, since httpx
    rewinds it before sending."""
    handler = RecordingHandler([json_response()])
    stream = io.BytesIO(b"0123456789")
    stream.read(4)
    form = MultipartForm()
    form.append_file("file", stream, filename="digits.txt")
    progress = Mock()
    async with create_client(handler) as client:
        await client.upload("/files", form, on_upload_progress=progress)

    assert b"0123456789" in handler.requests[0].content
    progress.assert_called_once_with(10, 10)


@pytest.mark.asyncio
async def test_api_client_upload_failure_skips_progress(mock_asleep: Mock) -> None:
    progress = Mock()
    async with create_client(RecordingHandler([json_response(413)])) as client:
        result = await client.upload("/files", b"big", on_upload_progress=progress)

    assert result.data.status_code == 413
    progress.assert_not_called()


##############################
#     Tests for download     #
##############################


@pytest.mark.asyncio
async def test_api_client_download_with_filename() -> None:
    handler = RecordingHandler(
        [
            httpx.Response(
                200,
                content=b"%PDF-1.7",
                headers={"Content-Disposition": 'attachment; filename="report.pdf"'},
            )
        ]
    )
    async with create_client(handler) as client:
        result = await client.download("/reports/1")

    assert result == Success(data=DownloadedFile(blob=b"%PDF-1.7", filename="report.pdf"))


@pytest.mark.asyncio
async def test_api_client_download_without_filename() -> None:
    handler = RecordingHandler([httpx.Response(200, content=b'{"id": 1}')])
    async with create_client(handler) as client:
        result = await client.download("/exports/latest", params={"format": "json"})

    assert result == Success(data=DownloadedFile(blob=b'{"id": 1}', filename=None))
    assert handler.requests[0].url.params["format"] == "json"


@pytest.mark.asyncio
async def test_api_client_download_failure(mock_asleep: Mock) -> None:
    handler = RecordingHandler([json_response(404, {"message": "No such report"})])
    async with create_client(handler) as client:
        result = await client.download("/reports/9")

    assert not result.status
    assert result.data.message == "No such report"
