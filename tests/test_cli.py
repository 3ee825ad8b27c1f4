"""End-to-end tests for the spectools CLI using Typer's CliRunner.

Commands that print JSON run with ``--quiet`` so the resolver's warning
about the fixture's missing pointer stays off the captured output.
"""

from __future__ import annotations

import json
from pathlib import Path

import httpx
import pytest
from typer.testing import CliRunner

from spectools import __version__
from spectools.app import app
from spectools.client import ApiClient
from spectools.models import Settings

runner = CliRunner()


@pytest.fixture
def spec_args(clean_env: Path, petstore_path: Path) -> list[str]:
    return ["--quiet", "--spec", str(petstore_path)]


def _json(result) -> object:
    assert result.exit_code == 0, result.output
    return json.loads(result.stdout)


# ---------------------------------------------------------------------------
# Root options
# ---------------------------------------------------------------------------


class TestRoot:
    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"spectools {__version__}" in result.output

    def test_no_args_shows_help(self) -> None:
        result = runner.invoke(app, [])
        assert "inspect" in result.output

    def test_missing_spec(self, clean_env: Path) -> None:
        result = runner.invoke(app, ["inspect", "tags"])
        assert result.exit_code == 2
        assert "No OpenAPI document given" in result.output

    def test_unreadable_spec(self, clean_env: Path) -> None:
        result = runner.invoke(app, ["--spec", str(clean_env / "nope.yaml"), "inspect", "tags"])
        assert result.exit_code == 7

    def test_invalid_namespace(self, spec_args: list[str]) -> None:
        result = runner.invoke(app, [*spec_args, "--namespace", "bad name", "inspect", "tools"])
        assert result.exit_code == 1
        assert "namespace" in result.output


# ---------------------------------------------------------------------------
# inspect
# ---------------------------------------------------------------------------


class TestInspect:
    def test_operations_json(self, spec_args: list[str]) -> None:
        rows = _json(runner.invoke(app, [*spec_args, "--json", "inspect", "operations"]))
        assert len(rows) == 6
        assert rows[0] == {
            "Method": "GET",
            "Path": "/pets",
            "Tool ID": "GET::pets",
            "Summary": "List all pets",
            "Tags": "pets",
        }

    def test_operations_by_tag(self, spec_args: list[str]) -> None:
        rows = _json(
            runner.invoke(app, [*spec_args, "--json", "inspect", "operations", "--tag", "store"])
        )
        assert [r["Path"] for r in rows] == ["/store/inventory", "/store/orders"]

    def test_tags_plain(self, spec_args: list[str]) -> None:
        result = runner.invoke(app, [*spec_args, "--plain", "inspect", "tags"])
        assert result.exit_code == 0
        assert result.stdout.splitlines() == ["Tag", "pets", "store"]

    def test_tools_filtered(self, spec_args: list[str]) -> None:
        rows = _json(
            runner.invoke(app, [*spec_args, "--json", "inspect", "tools", "--tag", "store"])
        )
        assert len(rows) == 5
        assert [r["Tool ID"] for r in rows[3:]] == ["GET::store__inventory", "PUT::store__orders"]
        assert rows[0]["Method"] == "-"

    def test_tools_explicit_requires_ids(self, spec_args: list[str]) -> None:
        result = runner.invoke(app, [*spec_args, "inspect", "tools", "--mode", "explicit"])
        assert result.exit_code == 1

    def test_tools_explicit(self, spec_args: list[str]) -> None:
        rows = _json(
            runner.invoke(
                app,
                [*spec_args, "--json", "inspect", "tools", "--mode", "explicit"]
                + ["--tool", "POST::pets"],
            )
        )
        assert [r["Name"] for r in rows][-1] == "create_pet"
        assert len(rows) == 4

    def test_tools_namespace(self, spec_args: list[str]) -> None:
        rows = _json(
            runner.invoke(app, [*spec_args, "--json", "--namespace", "shop", "inspect", "tools"])
        )
        assert "shop_pets" in [r["Name"] for r in rows]

    def test_stats(self, spec_args: list[str]) -> None:
        stats = _json(runner.invoke(app, [*spec_args, "--json", "inspect", "stats"]))
        assert stats["total"] == 9
        assert stats["endpoint_tools"] == 6

    def test_schema(self, spec_args: list[str]) -> None:
        args = [*spec_args, "--json", "inspect", "schema", "POST::pets"]
        schema = _json(runner.invoke(app, args))
        assert schema["name"] == "create_pet"
        assert schema["input_schema"]["required"] == ["name"]

    def test_schema_unknown_tool(self, spec_args: list[str]) -> None:
        result = runner.invoke(app, [*spec_args, "inspect", "schema", "GET::nope"])
        assert result.exit_code == 4
        assert "Tool not found" in result.output

    def test_spec_from_env(
        self, clean_env: Path, todo_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("OPENAPI_SPEC_PATH", str(todo_path))
        result = runner.invoke(app, ["--plain", "inspect", "operations"])
        assert result.exit_code == 0
        assert "GET::api__v1__todos" in result.stdout

    def test_spec_from_stdin(self, clean_env: Path, todo_path: Path) -> None:
        result = runner.invoke(
            app,
            ["--plain", "--spec-method", "stdin", "inspect", "tags"],
            input=todo_path.read_text(),
        )
        assert result.exit_code == 0
        assert result.stdout.splitlines() == ["Tag", "todos"]


# ---------------------------------------------------------------------------
# ids
# ---------------------------------------------------------------------------


class TestIds:
    def test_encode(self) -> None:
        result = runner.invoke(app, ["ids", "encode", "get", "/users/{id}"])
        assert result.exit_code == 0
        assert result.stdout.strip() == "GET::users__---id"

    def test_decode(self) -> None:
        decoded = _json(runner.invoke(app, ["--json", "ids", "decode", "GET::users__---id"]))
        assert decoded == {"method": "GET", "path": "/users/{id}"}

    def test_decode_invalid(self) -> None:
        result = runner.invoke(app, ["ids", "decode", "users"])
        assert result.exit_code == 8
        assert "Invalid tool ID format" in result.output

    def test_check(self) -> None:
        assert runner.invoke(app, ["ids", "check", "GET::pets"]).exit_code == 0
        result = runner.invoke(app, ["ids", "check", "nope"])
        assert result.exit_code == 8
        assert result.stdout.strip() == "invalid"

    def test_name(self) -> None:
        result = runner.invoke(app, ["ids", "name", "getUserServiceController"])
        assert result.stdout.strip() == "get_user"

    def test_name_with_root_namespace(self) -> None:
        result = runner.invoke(app, ["--namespace", "shop", "ids", "name", "listPets"])
        assert result.stdout.strip() == "shop_pets"

    def test_name_full(self) -> None:
        result = runner.invoke(app, ["ids", "name", "--full", "List all pets"])
        assert result.stdout.strip() == "list_all_pets"

    def test_name_empty(self) -> None:
        result = runner.invoke(app, ["ids", "name", ""])
        assert result.exit_code == 9


# ---------------------------------------------------------------------------
# call
# ---------------------------------------------------------------------------


class TestCall:
    @pytest.fixture
    def sent_requests(self, monkeypatch: pytest.MonkeyPatch) -> list[httpx.Request]:
        """Route the command's client through a MockTransport."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            if request.url.path.endswith("/99"):
                return httpx.Response(404, json={"error": "no such pet"})
            return httpx.Response(200, json={"id": 7, "name": "Rex"})

        def fake_make_client(settings: Settings) -> ApiClient:
            return ApiClient(
                settings.api_base_url or "https://api.test",
                settings.headers,
                transport=httpx.MockTransport(handler),
            )

        monkeypatch.setattr("spectools.commands.call.make_client", fake_make_client)
        return seen

    def test_call_success(self, spec_args: list[str], sent_requests: list[httpx.Request]) -> None:
        args = [*spec_args, "--json", "call", "GET::pets__---petId", "-p", "petId=7"]
        data = _json(runner.invoke(app, args))
        assert data == {"id": 7, "name": "Rex"}
        assert sent_requests[0].url.path == "/pets/7"

    def test_call_with_body(self, spec_args: list[str], sent_requests: list[httpx.Request]) -> None:
        result = runner.invoke(app, [*spec_args, "call", "POST::pets", "--body", '{"name": "Rex"}'])
        assert result.exit_code == 0
        assert json.loads(sent_requests[0].content) == {"name": "Rex"}

    def test_call_http_error(self, spec_args: list[str], sent_requests: list[httpx.Request]) -> None:
        args = [*spec_args, "call", "GET::pets__---petId", "-p", "petId=99"]
        result = runner.invoke(app, args)
        assert result.exit_code == 1
        assert "HTTP 404: Not Found - no such pet" in result.output

    def test_call_bad_param(self, spec_args: list[str], sent_requests: list[httpx.Request]) -> None:
        result = runner.invoke(app, [*spec_args, "call", "GET::pets", "-p", "limit"])
        assert result.exit_code == 2
        assert sent_requests == []

    def test_call_without_base_url(self, spec_args: list[str]) -> None:
        result = runner.invoke(app, [*spec_args, "call", "GET::pets"])
        assert result.exit_code == 2
        assert "No API base URL" in result.output
