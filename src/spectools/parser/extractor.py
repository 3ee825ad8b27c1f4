"""Extract operations, tags, and API metadata from resolved OpenAPI documents.

This module walks a fully ``$ref``-resolved document and flattens its
``paths`` object into :class:`~spectools.models.OperationRecord` instances.

Enumeration order is part of the contract: paths follow the insertion order
of the ``paths`` mapping, and methods under one path follow the declaration
order of :class:`~spectools.models.HTTPMethod` (GET, POST, PUT, PATCH, DELETE,
HEAD, OPTIONS, TRACE).  Listings and statistics built on top of the records
rely on it for stable output.

Parameter merging follows the OpenAPI specification: path-level parameters
provide defaults, and operation-level parameters override them when they share
the same ``name`` and ``in`` values.
"""

from __future__ import annotations

from typing import Any

from spectools.models import (
    APIInfo,
    HTTPMethod,
    OperationParameter,
    OperationRecord,
    ParameterLocation,
)


def enumerate_operations(spec: dict[str, Any]) -> list[OperationRecord]:
    """Extract all operations from the document's ``paths`` object.

    Args:
        spec: The resolved document.

    Returns:
        One :class:`~spectools.models.OperationRecord` per path + method
        pair, in path order then method priority order.
    """
    paths = spec.get("paths") or {}
    if not isinstance(paths, dict):
        return []

    operations: list[OperationRecord] = []
    for path, path_item in paths.items():
        if not isinstance(path_item, dict):
            continue

        # Path-level parameters apply to all operations under this path
        path_params = _as_list(path_item.get("parameters"))

        for method in HTTPMethod:
            operation = path_item.get(method.value)
            if not isinstance(operation, dict):
                continue

            merged = _merge_parameters(path_params, _as_list(operation.get("parameters")))
            request_body = operation.get("requestBody")

            operations.append(
                OperationRecord(
                    path=str(path),
                    method=method,
                    operation_id=operation.get("operationId"),
                    summary=operation.get("summary"),
                    description=operation.get("description"),
                    parameters=tuple(_extract_parameters(merged)),
                    request_body=request_body if isinstance(request_body, dict) else None,
                    tags=tuple(_dedupe([str(t) for t in _as_list(operation.get("tags"))])),
                    deprecated=bool(operation.get("deprecated", False)),
                )
            )

    return operations


def collect_tags(spec: dict[str, Any], operations: list[OperationRecord] | None = None) -> list[str]:
    """Return the union of global tags and every operation's tags.

    Args:
        spec: The resolved document.
        operations: Records already enumerated from *spec*.  Computed when
            omitted.

    Returns:
        De-duplicated tag names, globally declared tags first.
    """
    tags: list[str] = []
    for tag in _as_list(spec.get("tags")):
        if isinstance(tag, dict) and tag.get("name"):
            tags.append(str(tag["name"]))

    if operations is None:
        operations = enumerate_operations(spec)
    for op in operations:
        tags.extend(op.tags)

    return _dedupe(tags)


def extract_info(spec: dict[str, Any]) -> APIInfo:
    """Extract title, version and description from the ``info`` object."""
    info = spec.get("info") or {}
    if not isinstance(info, dict):
        return APIInfo()
    return APIInfo(
        title=str(info.get("title", "Untitled API")),
        version=str(info.get("version", "0.0.0")),
        description=info.get("description"),
    )


def _merge_parameters(
    path_params: list[Any],
    op_params: list[Any],
) -> list[dict[str, Any]]:
    """Merge path-level and operation-level parameters.

    Operation-level parameters override path-level parameters with the same
    name and location (``in`` field), per the OpenAPI spec.
    """
    path_params = [p for p in path_params if isinstance(p, dict)]
    op_params = [p for p in op_params if isinstance(p, dict)]

    op_keys = {(p.get("name", ""), p.get("in", "")) for p in op_params}

    merged = [
        p for p in path_params if (p.get("name", ""), p.get("in", "")) not in op_keys
    ]
    merged.extend(op_params)
    return merged


def _extract_parameters(params_list: list[dict[str, Any]]) -> list[OperationParameter]:
    """Convert raw parameter dicts into :class:`~spectools.models.OperationParameter` models.

    Parameters with unrecognised ``in`` locations or without a name are
    skipped.  Path parameters are always required regardless of the
    ``required`` field in the source.
    """
    parameters: list[OperationParameter] = []

    for param in params_list:
        name = param.get("name")
        if not name:
            continue
        try:
            location = ParameterLocation(param.get("in", "query"))
        except ValueError:
            continue

        schema = param.get("schema")
        if not isinstance(schema, dict):
            schema = {"type": "string"}

        required = bool(param.get("required", False))
        if location == ParameterLocation.PATH:
            required = True

        parameters.append(
            OperationParameter(
                name=str(name),
                location=location,
                required=required,
                description=param.get("description"),
                schema=schema,
            )
        )

    return parameters


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _dedupe(items: list[str]) -> list[str]:
    return list(dict.fromkeys(items))
