"""Tool registry with filtering, lookup, and statistics.

:class:`ToolsManager` turns the operations of a
:class:`~spectools.parser.document.ResolvedDocument` into
:class:`~spectools.models.Tool` objects according to a
:class:`~spectools.models.ToolsFilter`, then answers lookups by identifier or
name.  The three exploration meta-tools are always registered.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from spectools.exceptions import ToolNotFoundError
from spectools.models import OperationRecord, Tool, ToolsFilter, ToolsMode, ToolStats
from spectools.parser.document import ResolvedDocument
from spectools.tools.creation import META_PREFIX, create_meta_tools, create_tool_from_operation
from spectools.tools.identifiers import encode_tool_id

logger = logging.getLogger(__name__)


class ToolsManager:
    """Creates, filters, and looks up tools for one document.

    Args:
        document: The resolved document whose operations become tools.
        disable_abbreviation: Keep full names instead of abbreviating.
        namespace: Optional prefix for every generated tool name.

    Example::

        manager = ToolsManager(load_document(text), namespace="shop")
        manager.load_tools(ToolsFilter(include_tags=["orders"]))
        tool = manager.get_tool_by_id("GET::orders__---orderId")
    """

    def __init__(
        self,
        document: ResolvedDocument,
        disable_abbreviation: bool = False,
        namespace: Optional[str] = None,
    ) -> None:
        self._document = document
        self._disable_abbreviation = disable_abbreviation
        self._namespace = namespace
        self._meta_tools = create_meta_tools()
        self._tools: dict[str, Tool] = {}
        self._tools_by_name: dict[str, Tool] = {}

    @property
    def document(self) -> ResolvedDocument:
        return self._document

    # ------------------------------------------------------------------ #
    # Loading
    # ------------------------------------------------------------------ #

    def load_tools(self, tools_filter: Optional[ToolsFilter] = None) -> list[Tool]:
        """(Re)build the registry according to *tools_filter*.

        Args:
            tools_filter: Selection rules.  Defaults to loading everything.

        Returns:
            The registered tools, meta-tools first.
        """
        tools_filter = tools_filter or ToolsFilter()
        logger.info("Loading tools with mode: %s", tools_filter.mode.value)

        self._tools.clear()
        self._tools_by_name.clear()
        for meta_tool in self._meta_tools:
            self._add_tool(meta_tool)

        if tools_filter.mode == ToolsMode.EXPLICIT:
            self._load_explicit_tools(tools_filter.include_tools)
        elif tools_filter.mode == ToolsMode.ALL:
            self._load_all_tools(tools_filter)

        logger.info("Loaded %d tools", len(self._tools))
        return self.get_tools()

    def _load_explicit_tools(self, tool_ids: list[str]) -> None:
        logger.debug("Loading explicit tools: %s", ", ".join(tool_ids))
        by_id = {
            encode_tool_id(op.method.value, op.path): op
            for op in self._document.get_operations()
        }
        for tool_id in tool_ids:
            operation = by_id.get(tool_id)
            if operation is None:
                logger.warning("Tool not found for ID: %s", tool_id)
                continue
            self._add_tool(self._create(operation))

    def _load_all_tools(self, tools_filter: ToolsFilter) -> None:
        for operation in self._document.get_operations():
            if should_include_operation(operation, tools_filter):
                self._add_tool(self._create(operation))

    def _create(self, operation: OperationRecord) -> Tool:
        return create_tool_from_operation(
            operation, self._disable_abbreviation, self._namespace
        )

    def _add_tool(self, tool: Tool) -> None:
        if tool.name in self._tools_by_name and tool.tool_id not in self._tools:
            logger.warning(
                "Tool name '%s' is used by more than one operation; "
                "lookup by name returns %s",
                tool.name,
                tool.tool_id,
            )
        self._tools[tool.tool_id] = tool
        self._tools_by_name[tool.name] = tool

    # ------------------------------------------------------------------ #
    # Lookup
    # ------------------------------------------------------------------ #

    def get_tools(self) -> list[Tool]:
        return list(self._tools.values())

    def get_tool_by_id(self, tool_id: str) -> Optional[Tool]:
        return self._tools.get(tool_id)

    def get_tool_by_name(self, name: str) -> Optional[Tool]:
        return self._tools_by_name.get(name)

    @staticmethod
    def is_meta_tool(tool_id: str) -> bool:
        return tool_id.startswith(META_PREFIX)

    def list_operations(
        self, tag: Optional[str] = None, method: Optional[str] = None
    ) -> list[dict[str, Any]]:
        """Summarise document operations, optionally filtered by tag and method.

        Unlike :meth:`get_tools` this covers every operation in the document,
        whatever filter the tools were loaded with.
        """
        rows: list[dict[str, Any]] = []
        for op in self._document.get_operations():
            if tag and tag not in op.tags:
                continue
            if method and op.method.value != method.lower():
                continue
            rows.append(
                {
                    "tool_id": encode_tool_id(op.method.value, op.path),
                    "method": op.method.value.upper(),
                    "path": op.path,
                    "operation_id": op.operation_id,
                    "summary": op.summary,
                    "tags": list(op.tags),
                }
            )
        return rows

    def get_tool_schema(self, tool_id: str) -> dict[str, Any]:
        """Describe a registered tool.

        Raises:
            ToolNotFoundError: If no tool with *tool_id* is loaded.
        """
        tool = self._tools.get(tool_id)
        if tool is None:
            raise ToolNotFoundError(f"Tool not found: {tool_id}")
        return tool.model_dump()

    def get_stats(self) -> ToolStats:
        """Count loaded tools by kind, method, resource, and tag."""
        stats = ToolStats()
        for tool in self._tools.values():
            stats.total += 1
            if self.is_meta_tool(tool.tool_id):
                stats.meta_tools += 1
            else:
                stats.endpoint_tools += 1
            if tool.method:
                stats.by_method[tool.method] = stats.by_method.get(tool.method, 0) + 1
            if tool.resource_name:
                stats.by_resource[tool.resource_name] = (
                    stats.by_resource.get(tool.resource_name, 0) + 1
                )
            for tag in tool.tags:
                stats.by_tag[tag] = stats.by_tag.get(tag, 0) + 1
        return stats


def should_include_operation(operation: OperationRecord, tools_filter: ToolsFilter) -> bool:
    """Apply tag, HTTP-method, and resource filters to one operation."""
    if tools_filter.include_tags:
        if not any(tag in tools_filter.include_tags for tag in operation.tags):
            return False

    if tools_filter.include_operations:
        if operation.method.value.upper() not in tools_filter.include_operations:
            return False

    if tools_filter.include_resources:
        segments = [s.lower() for s in operation.path.lstrip("/").split("/") if s]
        wanted = [r.lower() for r in tools_filter.include_resources]
        if not any(r in s or s in r for r in wanted for s in segments):
            return False

    return True
