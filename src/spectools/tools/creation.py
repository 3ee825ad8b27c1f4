"""Build :class:`~spectools.models.Tool` objects from operation records.

Each tool bundles the reversible identifier, the abbreviated display name, a
human-readable description, and a single JSON Schema object describing every
input the operation accepts:

* path parameters (always required), taken from the path template as well
  as from the declared parameters;
* query, header and cookie parameters, annotated with
  ``x-parameter-location`` so the executing client knows where to send them;
* the JSON request body -- merged property by property when it is an object
  schema, otherwise wrapped under a single ``body`` property.

:func:`create_meta_tools` returns the three exploration tools that let a
caller discover and invoke endpoints without loading one tool per operation.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from spectools.models import HTTPMethod, OperationRecord, ParameterLocation, Tool
from spectools.tools.identifiers import encode_tool_id, extract_resource_name
from spectools.tools.names import abbreviate_name

logger = logging.getLogger(__name__)

META_PREFIX = "meta::"
LOCATION_KEY = "x-parameter-location"

_PATH_PARAM_RE = re.compile(r"\{([^}]+)\}")


def create_tool_from_operation(
    operation: OperationRecord,
    disable_abbreviation: bool = False,
    namespace: str | None = None,
) -> Tool:
    """Create a tool for one operation.

    The name is derived from the ``operationId``, else the summary, else
    ``<method>-<last literal path segment>``.

    Args:
        operation: The record to convert.
        disable_abbreviation: Forwarded to
            :func:`~spectools.tools.names.abbreviate_name`.
        namespace: Optional tool name prefix.

    Returns:
        The assembled :class:`~spectools.models.Tool`.
    """
    method = operation.method.value.upper()
    tool_id = encode_tool_id(method, operation.path)

    name = ""
    for source in (operation.operation_id, operation.summary):
        if source:
            name = abbreviate_name(source, disable_abbreviation, namespace)
        if name:
            break
    if not name:
        literal = [p for p in operation.path.split("/") if p and not p.startswith("{")]
        base = literal[-1] if literal else "endpoint"
        name = abbreviate_name(f"{method.lower()}-{base}", disable_abbreviation, namespace)

    tool = Tool(
        name=name,
        tool_id=tool_id,
        description=_describe(operation),
        input_schema=build_input_schema(operation),
        tags=list(operation.tags),
        method=method,
        resource_name=extract_resource_name(operation.path),
        original_path=operation.path,
    )
    logger.debug("Created tool: %s (%s)", tool.name, tool.tool_id)
    return tool


def build_input_schema(operation: OperationRecord) -> dict[str, Any]:
    """Merge parameters and request body into one object schema."""
    schema: dict[str, Any] = {
        "type": "object",
        "properties": {},
        "required": [],
        "additionalProperties": False,
    }

    for name in _PATH_PARAM_RE.findall(operation.path):
        _add_property(schema, name, {"type": "string"}, ParameterLocation.PATH, None, True)

    for param in operation.parameters:
        _add_property(
            schema,
            param.name,
            param.schema_,
            param.location,
            param.description,
            param.required,
        )

    body = operation.request_body
    body_schema = _json_body_schema(body) if body else None
    if body_schema is not None:
        properties = body_schema.get("properties")
        if body_schema.get("type") == "object" and isinstance(properties, dict) and properties:
            body_required = body_schema.get("required") or []
            for prop_name, prop_schema in properties.items():
                schema["properties"][prop_name] = (
                    dict(prop_schema) if isinstance(prop_schema, dict) else prop_schema
                )
                if prop_name in body_required:
                    _mark_required(schema, prop_name)
        else:
            schema["properties"]["body"] = dict(body_schema)
            if body and body.get("required"):
                _mark_required(schema, "body")

    return schema


def create_meta_tools() -> list[Tool]:
    """Return the endpoint exploration tools (list, describe, invoke)."""
    methods = [m.value.upper() for m in HTTPMethod if m is not HTTPMethod.TRACE]
    return [
        Tool(
            name="list-api-endpoints",
            tool_id=f"{META_PREFIX}list-endpoints",
            description="List all available API endpoints from the OpenAPI specification",
            input_schema={
                "type": "object",
                "properties": {
                    "tag": {"type": "string", "description": "Filter endpoints by OpenAPI tag"},
                    "method": {
                        "type": "string",
                        "description": "Filter endpoints by HTTP method",
                        "enum": methods,
                    },
                },
                "additionalProperties": False,
            },
        ),
        Tool(
            name="get-api-endpoint-schema",
            tool_id=f"{META_PREFIX}get-endpoint-schema",
            description="Get detailed schema information for a specific API endpoint",
            input_schema={
                "type": "object",
                "properties": {
                    "toolId": {
                        "type": "string",
                        "description": "The tool ID of the endpoint to get schema for",
                    },
                },
                "required": ["toolId"],
                "additionalProperties": False,
            },
        ),
        Tool(
            name="invoke-api-endpoint",
            tool_id=f"{META_PREFIX}invoke-endpoint",
            description="Invoke any API endpoint directly by tool ID with parameters",
            input_schema={
                "type": "object",
                "properties": {
                    "toolId": {
                        "type": "string",
                        "description": "The tool ID of the endpoint to invoke",
                    },
                    "parameters": {
                        "type": "object",
                        "description": "Parameters to pass to the endpoint",
                        "additionalProperties": True,
                    },
                },
                "required": ["toolId"],
                "additionalProperties": False,
            },
        ),
    ]


def _describe(operation: OperationRecord) -> str:
    parts = [f"{operation.method.value.upper()} {operation.path}"]
    if operation.summary:
        parts.append(operation.summary)
    if operation.description:
        parts.append(operation.description)
    if operation.deprecated:
        parts.append("This operation is deprecated.")
    return "\n\n".join(parts)


def _add_property(
    schema: dict[str, Any],
    name: str,
    param_schema: dict[str, Any],
    location: ParameterLocation,
    description: str | None,
    required: bool,
) -> None:
    prop = {**(param_schema or {"type": "string"}), LOCATION_KEY: location.value}
    if description:
        prop["description"] = description
    schema["properties"][name] = prop
    if required:
        _mark_required(schema, name)


def _mark_required(schema: dict[str, Any], name: str) -> None:
    if name not in schema["required"]:
        schema["required"].append(name)


def _json_body_schema(body: dict[str, Any]) -> dict[str, Any] | None:
    """Pick the schema of ``application/json``, else of any JSON-like media type."""
    content = body.get("content")
    if not isinstance(content, dict):
        return None

    preferred = content.get("application/json")
    if isinstance(preferred, dict) and isinstance(preferred.get("schema"), dict):
        return preferred["schema"]

    for content_type, media in content.items():
        if "json" in content_type and isinstance(media, dict):
            if isinstance(media.get("schema"), dict):
                return media["schema"]
    return None
