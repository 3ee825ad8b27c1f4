"""Canonical Pydantic models shared across all spectools modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into two groups:

**Configuration models** -- assembled by :mod:`spectools.config` from CLI
flags, environment variables and the project file:
    :class:`SpecInputMethod`, :class:`ToolsMode`, :class:`ToolsFilter` and
    :class:`Settings`.

**Pipeline models** -- produced by the parser and the tool builders:
    :class:`HTTPMethod`, :class:`ParameterLocation`,
    :class:`OperationParameter`, :class:`OperationRecord`, :class:`APIInfo`,
    :class:`Tool`, :class:`ToolStats` and :class:`ApiCallResult`.

All models use Pydantic v2. Operation records are frozen: they are created
once per ``(path, method)`` pair and never modified afterwards.
"""

from __future__ import annotations

import enum
import re
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

_NAMESPACE_RE = re.compile(r"^[A-Za-z0-9_-]*$")

NAMESPACE_MAX_LENGTH = 32


# --- Parser Output Models ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised by OpenAPI 3.x path-item objects.

    Declaration order is the enumeration priority: operations under one path
    are always listed GET, POST, PUT, PATCH, DELETE, HEAD, OPTIONS, TRACE.
    """

    GET = "get"
    POST = "post"
    PUT = "put"
    PATCH = "patch"
    DELETE = "delete"
    HEAD = "head"
    OPTIONS = "options"
    TRACE = "trace"


class ParameterLocation(str, enum.Enum):
    """Locations where an API parameter can appear, per OpenAPI ``in`` field."""

    QUERY = "query"
    HEADER = "header"
    PATH = "path"
    COOKIE = "cookie"


class OperationParameter(BaseModel):
    """A single parameter of an :class:`OperationRecord`.

    ``schema_`` holds the fully resolved JSON Schema of the parameter (it may
    be a fallback node when the original ``$ref`` could not be resolved).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    location: ParameterLocation
    required: bool = False
    description: Optional[str] = None
    schema_: dict[str, Any] = Field(default_factory=dict, alias="schema")


class OperationRecord(BaseModel):
    """One API operation: a path template plus an HTTP method.

    Created by :func:`~spectools.parser.extractor.enumerate_operations`,
    immutable afterwards.
    """

    model_config = ConfigDict(frozen=True)

    path: str
    method: HTTPMethod
    operation_id: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    parameters: tuple[OperationParameter, ...] = ()
    request_body: Optional[dict[str, Any]] = None
    tags: tuple[str, ...] = ()
    deprecated: bool = False


class APIInfo(BaseModel):
    """API metadata extracted from the document's *Info Object*."""

    title: str = "Untitled API"
    version: str = "0.0.0"
    description: Optional[str] = None


# --- Tool Models ---


class Tool(BaseModel):
    """A callable tool derived from an operation (or a built-in meta-tool).

    ``tool_id`` is the reversible identifier produced by
    :func:`~spectools.tools.identifiers.encode_tool_id`; ``name`` is the
    abbreviated display name. Meta-tools carry ids in the ``meta::``
    namespace and no method or path.
    """

    name: str
    tool_id: str
    description: str = ""
    input_schema: dict[str, Any] = Field(default_factory=dict)
    tags: list[str] = Field(default_factory=list)
    method: Optional[str] = None
    resource_name: Optional[str] = None
    original_path: Optional[str] = None


class ToolStats(BaseModel):
    """Counts over the tools currently loaded in a manager."""

    total: int = 0
    meta_tools: int = 0
    endpoint_tools: int = 0
    by_method: dict[str, int] = Field(default_factory=dict)
    by_resource: dict[str, int] = Field(default_factory=dict)
    by_tag: dict[str, int] = Field(default_factory=dict)


class ApiCallResult(BaseModel):
    """Outcome of executing a tool against the live API.

    ``success`` is ``False`` for HTTP error statuses and transport failures;
    the client never raises for those.
    """

    success: bool
    status_code: Optional[int] = None
    data: Any = None
    headers: dict[str, str] = Field(default_factory=dict)
    error: Optional[str] = None


# --- Configuration Models ---


class SpecInputMethod(str, enum.Enum):
    """How :attr:`Settings.spec` should be interpreted."""

    URL = "url"
    FILE = "file"
    STDIN = "stdin"
    INLINE = "inline"


class ToolsMode(str, enum.Enum):
    """Which tools a :class:`~spectools.tools.manager.ToolsManager` loads.

    ``ALL`` loads every operation passing the filters, ``DYNAMIC`` loads only
    the exploration meta-tools, ``EXPLICIT`` loads the listed tool ids.
    """

    ALL = "all"
    DYNAMIC = "dynamic"
    EXPLICIT = "explicit"


class ToolsFilter(BaseModel):
    """Selection rules applied when loading tools.

    Empty lists mean "no restriction". Tag and resource filters match if any
    listed value matches; HTTP method names are compared case-insensitively.
    """

    mode: ToolsMode = ToolsMode.ALL
    include_tools: list[str] = Field(default_factory=list)
    include_tags: list[str] = Field(default_factory=list)
    include_resources: list[str] = Field(default_factory=list)
    include_operations: list[str] = Field(default_factory=list)

    @field_validator("include_operations")
    @classmethod
    def _upper_methods(cls, value: list[str]) -> list[str]:
        return [m.upper() for m in value]


class Settings(BaseModel):
    """Effective configuration for loading a document and exposing tools.

    See :func:`~spectools.config.resolve_settings` for the precedence chain
    that produces an instance.
    """

    api_base_url: Optional[str] = Field(
        default=None, description="Base URL used when executing tools"
    )
    spec: Optional[str] = Field(
        default=None, description="URL, file path or inline text of the document"
    )
    spec_input_method: SpecInputMethod = SpecInputMethod.URL
    headers: dict[str, str] = Field(default_factory=dict)
    namespace: Optional[str] = Field(
        default=None, description="Prefix prepended to every tool name"
    )
    disable_abbreviation: bool = False
    timeout: float = Field(default=30.0, description="Request timeout in seconds")
    tools: ToolsFilter = Field(default_factory=ToolsFilter)

    @field_validator("namespace")
    @classmethod
    def _check_namespace(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        if not value:
            return None
        if len(value) > NAMESPACE_MAX_LENGTH:
            raise ValueError(
                f"namespace must be at most {NAMESPACE_MAX_LENGTH} characters"
            )
        if not _NAMESPACE_RE.match(value):
            raise ValueError("namespace may only contain letters, digits, '_' and '-'")
        return value
