"""Tests for spectools.tools.manager."""

from __future__ import annotations

import logging

import pytest

from spectools.exceptions import ToolNotFoundError
from spectools.models import ToolsFilter, ToolsMode
from spectools.parser import ResolvedDocument
from spectools.tools.manager import ToolsManager


def _endpoint_ids(manager: ToolsManager) -> list[str]:
    return [t.tool_id for t in manager.get_tools() if not manager.is_meta_tool(t.tool_id)]


# ---------------------------------------------------------------------------
# Loading modes
# ---------------------------------------------------------------------------


class TestLoadTools:
    def test_all_mode_loads_everything(self, petstore_manager: ToolsManager) -> None:
        tools = petstore_manager.load_tools()
        assert len(tools) == 9
        assert [t.tool_id for t in tools[:3]] == [
            "meta::list-endpoints",
            "meta::get-endpoint-schema",
            "meta::invoke-endpoint",
        ]
        assert _endpoint_ids(petstore_manager) == [
            "GET::pets",
            "POST::pets",
            "GET::pets__---petId",
            "DELETE::pets__---petId",
            "GET::store__inventory",
            "PUT::store__orders",
        ]

    def test_dynamic_mode_only_meta_tools(self, petstore_manager: ToolsManager) -> None:
        tools = petstore_manager.load_tools(ToolsFilter(mode=ToolsMode.DYNAMIC))
        assert len(tools) == 3
        assert all(petstore_manager.is_meta_tool(t.tool_id) for t in tools)

    def test_explicit_mode(
        self, petstore_manager: ToolsManager, caplog: pytest.LogCaptureFixture
    ) -> None:
        tools_filter = ToolsFilter(
            mode=ToolsMode.EXPLICIT,
            include_tools=["GET::pets__---petId", "GET::nope"],
        )
        with caplog.at_level(logging.WARNING, logger="spectools"):
            petstore_manager.load_tools(tools_filter)
        assert _endpoint_ids(petstore_manager) == ["GET::pets__---petId"]
        assert "Tool not found for ID: GET::nope" in caplog.text

    def test_explicit_mode_ignores_other_filters(self, petstore_manager: ToolsManager) -> None:
        tools_filter = ToolsFilter(
            mode=ToolsMode.EXPLICIT,
            include_tools=["PUT::store__orders"],
            include_tags=["pets"],
        )
        petstore_manager.load_tools(tools_filter)
        assert _endpoint_ids(petstore_manager) == ["PUT::store__orders"]

    def test_reload_replaces_tools(self, petstore_manager: ToolsManager) -> None:
        petstore_manager.load_tools()
        petstore_manager.load_tools(ToolsFilter(mode=ToolsMode.DYNAMIC))
        assert petstore_manager.get_tool_by_id("GET::pets") is None
        assert petstore_manager.get_tool_by_name("pets") is None


class TestFilters:
    def test_tag_filter(self, petstore_manager: ToolsManager) -> None:
        petstore_manager.load_tools(ToolsFilter(include_tags=["store"]))
        assert _endpoint_ids(petstore_manager) == ["GET::store__inventory", "PUT::store__orders"]

    def test_method_filter_case_insensitive(self, petstore_manager: ToolsManager) -> None:
        petstore_manager.load_tools(ToolsFilter(include_operations=["get"]))
        assert _endpoint_ids(petstore_manager) == [
            "GET::pets",
            "GET::pets__---petId",
            "GET::store__inventory",
        ]

    def test_resource_filter_matches_substrings(self, petstore_manager: ToolsManager) -> None:
        petstore_manager.load_tools(ToolsFilter(include_resources=["pet"]))
        assert _endpoint_ids(petstore_manager) == [
            "GET::pets",
            "POST::pets",
            "GET::pets__---petId",
            "DELETE::pets__---petId",
        ]

    def test_filters_combine(self, petstore_manager: ToolsManager) -> None:
        petstore_manager.load_tools(
            ToolsFilter(include_tags=["pets"], include_operations=["DELETE", "PUT"])
        )
        assert _endpoint_ids(petstore_manager) == ["DELETE::pets__---petId"]

    def test_no_match_leaves_meta_tools(self, petstore_manager: ToolsManager) -> None:
        tools = petstore_manager.load_tools(ToolsFilter(include_tags=["unknown"]))
        assert len(tools) == 3


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------


class TestLookup:
    def test_by_id_and_name(self, petstore_manager: ToolsManager) -> None:
        petstore_manager.load_tools()
        by_id = petstore_manager.get_tool_by_id("GET::pets")
        assert by_id is not None
        assert by_id.name == "pets"
        assert petstore_manager.get_tool_by_name("pets") is by_id
        assert petstore_manager.get_tool_by_name("list-api-endpoints") is not None

    def test_is_meta_tool(self) -> None:
        assert ToolsManager.is_meta_tool("meta::invoke-endpoint")
        assert not ToolsManager.is_meta_tool("GET::pets")

    def test_get_tool_schema(self, petstore_manager: ToolsManager) -> None:
        petstore_manager.load_tools()
        schema = petstore_manager.get_tool_schema("POST::pets")
        assert schema["name"] == "create_pet"
        assert schema["input_schema"]["required"] == ["name"]

    def test_get_tool_schema_unknown(self, petstore_manager: ToolsManager) -> None:
        petstore_manager.load_tools()
        with pytest.raises(ToolNotFoundError) as exc_info:
            petstore_manager.get_tool_schema("GET::nope")
        assert exc_info.value.exit_code == 4

    def test_namespace_applied(self, petstore_document: ResolvedDocument) -> None:
        manager = ToolsManager(petstore_document, namespace="shop")
        manager.load_tools()
        assert manager.get_tool_by_name("shop_pets") is not None


class TestListOperations:
    def test_all(self, petstore_manager: ToolsManager) -> None:
        rows = petstore_manager.list_operations()
        assert len(rows) == 6
        assert rows[0] == {
            "tool_id": "GET::pets",
            "method": "GET",
            "path": "/pets",
            "operation_id": "listPets",
            "summary": "List all pets",
            "tags": ["pets"],
        }

    def test_by_tag(self, petstore_manager: ToolsManager) -> None:
        rows = petstore_manager.list_operations(tag="store")
        assert [r["path"] for r in rows] == ["/store/inventory", "/store/orders"]

    def test_by_method(self, petstore_manager: ToolsManager) -> None:
        rows = petstore_manager.list_operations(method="GET")
        assert [r["tool_id"] for r in rows] == [
            "GET::pets",
            "GET::pets__---petId",
            "GET::store__inventory",
        ]

    def test_independent_of_loaded_tools(self, petstore_manager: ToolsManager) -> None:
        petstore_manager.load_tools(ToolsFilter(mode=ToolsMode.DYNAMIC))
        assert len(petstore_manager.list_operations()) == 6


class TestStats:
    def test_counts(self, petstore_manager: ToolsManager) -> None:
        petstore_manager.load_tools()
        stats = petstore_manager.get_stats()
        assert stats.total == 9
        assert stats.meta_tools == 3
        assert stats.endpoint_tools == 6
        assert stats.by_method == {"GET": 3, "POST": 1, "DELETE": 1, "PUT": 1}
        assert stats.by_resource == {"pets": 4, "inventory": 1, "orders": 1}
        assert stats.by_tag == {"pets": 5, "store": 2}

    def test_empty_before_loading(self, petstore_manager: ToolsManager) -> None:
        assert petstore_manager.get_stats().total == 0
