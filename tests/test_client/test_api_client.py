"""Tests for spectools.client.api_client, using httpx.MockTransport."""

from __future__ import annotations

import json
from typing import Callable

import httpx
import pytest

from spectools.client import ApiClient
from spectools.models import Tool
from spectools.tools.manager import ToolsManager

BASE_URL = "https://api.test/v1"


class _Recorder:
    """Transport handler that records requests and replies with a fixed response."""

    def __init__(self, response: httpx.Response | None = None) -> None:
        self.requests: list[httpx.Request] = []
        self._response = response or httpx.Response(200, json={"ok": True})

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._response

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def _client(handler: Callable[[httpx.Request], httpx.Response], **kwargs) -> ApiClient:
    return ApiClient(BASE_URL, transport=httpx.MockTransport(handler), **kwargs)


@pytest.fixture
def loaded_manager(petstore_manager: ToolsManager) -> ToolsManager:
    petstore_manager.load_tools()
    return petstore_manager


def _tool(manager: ToolsManager, tool_id: str) -> Tool:
    tool = manager.get_tool_by_id(tool_id)
    assert tool is not None
    return tool


# ---------------------------------------------------------------------------
# Parameter routing
# ---------------------------------------------------------------------------


class TestRouting:
    def test_path_and_cookie(self, loaded_manager: ToolsManager) -> None:
        recorder = _Recorder()
        tool = _tool(loaded_manager, "GET::pets__---petId")
        with _client(recorder) as client:
            result = client.execute(tool.tool_id, {"petId": 7, "session": "abc def"}, tool)

        assert result.success
        assert recorder.last.method == "GET"
        assert recorder.last.url.path == "/v1/pets/7"
        assert recorder.last.headers["Cookie"] == "session=abc%20def"

    def test_query_and_header(self, loaded_manager: ToolsManager) -> None:
        recorder = _Recorder()
        tool = _tool(loaded_manager, "GET::pets")
        with _client(recorder) as client:
            client.execute(tool.tool_id, {"limit": 10, "X-Request-Id": "r-1"}, tool)

        assert recorder.last.url.params["limit"] == "10"
        assert recorder.last.headers["X-Request-Id"] == "r-1"
        assert recorder.last.content == b""

    def test_none_values_skipped(self, loaded_manager: ToolsManager) -> None:
        recorder = _Recorder()
        tool = _tool(loaded_manager, "GET::pets")
        with _client(recorder) as client:
            client.execute(tool.tool_id, {"limit": None}, tool)
        assert "limit" not in recorder.last.url.params

    def test_path_value_escaped(self) -> None:
        recorder = _Recorder()
        with _client(recorder) as client:
            client.execute("GET::files__---name", {"name": "a/b c"})
        assert recorder.last.url.raw_path == b"/v1/files/a%2Fb%20c"

    def test_without_tool_infers_from_path(self) -> None:
        recorder = _Recorder()
        with _client(recorder) as client:
            client.execute("GET::users__---id", {"id": 5, "q": "x"})
        assert recorder.last.url.path == "/v1/users/5"
        assert recorder.last.url.params["q"] == "x"

    def test_default_headers_sent(self) -> None:
        recorder = _Recorder()
        with _client(recorder, headers={"Authorization": "Bearer t"}) as client:
            client.execute("GET::pets")
        assert recorder.last.headers["Authorization"] == "Bearer t"


class TestBodies:
    def test_flattened_body_reassembled(self, loaded_manager: ToolsManager) -> None:
        recorder = _Recorder(httpx.Response(201, json={"id": 1}))
        tool = _tool(loaded_manager, "POST::pets")
        with _client(recorder) as client:
            result = client.execute(tool.tool_id, {"name": "Rex", "tag": "dog"}, tool)

        assert result.success
        assert result.status_code == 201
        assert json.loads(recorder.last.content) == {"name": "Rex", "tag": "dog"}
        assert recorder.last.url.params == httpx.QueryParams()

    def test_wrapped_body(self, loaded_manager: ToolsManager) -> None:
        recorder = _Recorder()
        tool = _tool(loaded_manager, "PUT::store__orders")
        with _client(recorder) as client:
            client.execute(tool.tool_id, {"body": ["a", "b"]}, tool)
        assert json.loads(recorder.last.content) == ["a", "b"]
        assert recorder.last.headers["Content-Type"] == "application/json"

    def test_body_ignored_for_get(self) -> None:
        recorder = _Recorder()
        with _client(recorder) as client:
            client.execute("GET::pets", {"body": {"x": 1}})
        assert recorder.last.content == b""


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


class TestResults:
    def test_json_data_and_headers(self) -> None:
        response = httpx.Response(200, json=[{"id": 1}], headers={"X-Total": "1"})
        with _client(_Recorder(response)) as client:
            result = client.execute("GET::pets")
        assert result.data == [{"id": 1}]
        assert result.headers["x-total"] == "1"
        assert result.error is None

    def test_text_data(self) -> None:
        with _client(_Recorder(httpx.Response(200, text="pong"))) as client:
            result = client.execute("GET::ping")
        assert result.data == "pong"

    def test_http_error_status(self) -> None:
        response = httpx.Response(404, json={"message": "Pet not found"})
        with _client(_Recorder(response)) as client:
            result = client.execute("GET::pets__---petId", {"petId": 99})
        assert not result.success
        assert result.status_code == 404
        assert result.error == "HTTP 404: Not Found - Pet not found"

    def test_http_error_without_detail(self) -> None:
        with _client(_Recorder(httpx.Response(500, text="boom"))) as client:
            result = client.execute("GET::pets")
        assert result.error == "HTTP 500: Internal Server Error"
        assert result.data == "boom"

    def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with _client(handler) as client:
            result = client.execute("GET::pets")
        assert not result.success
        assert result.status_code is None
        assert "connection refused" in result.error

    def test_invalid_tool_id(self) -> None:
        recorder = _Recorder()
        with _client(recorder) as client:
            result = client.execute("not-an-id")
        assert not result.success
        assert "Invalid tool ID format" in result.error
        assert recorder.requests == []


class TestConnection:
    def test_reachable(self) -> None:
        with _client(_Recorder(httpx.Response(404))) as client:
            assert client.test_connection()

    def test_server_error(self) -> None:
        with _client(_Recorder(httpx.Response(503))) as client:
            assert not client.test_connection()

    def test_unreachable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("down", request=request)

        with _client(handler) as client:
            assert not client.test_connection()

    def test_base_url_trailing_slash_stripped(self) -> None:
        client = ApiClient("https://api.test/", transport=httpx.MockTransport(_Recorder()))
        assert client.base_url == "https://api.test"
        client.close()
