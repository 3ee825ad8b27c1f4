"""Reversible tool identifiers built from an HTTP method and a path template.

An identifier has the textual form ``METHOD::path`` where:

* ``::`` divides the method from the path;
* ``__`` (two underscores) stands for each ``/`` between path segments;
* ``---`` (three hyphens) marks a path parameter, so ``{id}`` becomes
  ``---id``.

Example::

    >>> encode_tool_id("get", "/users/{id}/posts/{postId}")
    'GET::users__---id__posts__---postId'
    >>> decode_tool_id("GET::users__---id__posts__---postId")
    ('GET', '/users/{id}/posts/{postId}')

Only characters in ``[A-Za-z0-9_-]`` survive in the path part, and runs of
three or more underscores collapse to two.  :func:`decode_tool_id` is
therefore the left inverse of :func:`encode_tool_id` only: a literal segment
ending or starting in ``_`` merges with the separator and decodes to a
different path.  Treat identifiers as opaque outside this module.
"""

from __future__ import annotations

import re

from spectools.exceptions import IdentifierFormatError
from spectools.models import HTTPMethod

METHOD_DIVIDER = "::"
PATH_SEPARATOR = "__"
PARAM_MARKER = "---"

_PARAM_RE = re.compile(r"\{([^}]+)\}")
_MARKED_PARAM_RE = re.compile(re.escape(PARAM_MARKER) + r"([^/]+)")
_DISALLOWED_RE = re.compile(r"[^A-Za-z0-9_-]")
_UNDERSCORE_RUN_RE = re.compile(r"_{3,}")
# A leading parameter marker is not an edge
_EDGE_RE = re.compile(r"^(?!---)[_-]+|[_-]+$")
_METHOD_RE = re.compile(r"^[A-Z]+$")

_IGNORED_RESOURCE_SEGMENTS = frozenset({"api", "v1", "v2", "v3", "v4"})


def encode_tool_id(method: str, path: str) -> str:
    """Encode *method* and *path* into a tool identifier.

    Args:
        method: HTTP method, any case.
        path: OpenAPI path template, e.g. ``/api/v1/users/{id}``.

    Returns:
        The identifier, e.g. ``GET::api__v1__users__---id``.
    """
    clean = re.sub(r"/+", "/", path).strip("/")
    clean = _PARAM_RE.sub(PARAM_MARKER + r"\1", clean)
    clean = clean.replace("/", PATH_SEPARATOR)
    return f"{method.upper()}{METHOD_DIVIDER}{sanitize_for_tool_id(clean)}"


def decode_tool_id(tool_id: str) -> tuple[str, str]:
    """Decode an identifier back into ``(METHOD, path)``.

    Args:
        tool_id: A string produced by :func:`encode_tool_id`.

    Returns:
        The upper-cased method and the path template with a leading ``/``.

    Raises:
        IdentifierFormatError: If the divider is missing or the method part
            is empty.
    """
    method, divider, path_part = tool_id.partition(METHOD_DIVIDER)
    if not divider or not method:
        raise IdentifierFormatError(f"Invalid tool ID format: {tool_id}")

    path = path_part.replace(PATH_SEPARATOR, "/")
    path = _MARKED_PARAM_RE.sub(r"{\1}", path)
    return method.upper(), "/" + path


def is_valid_tool_id(tool_id: str) -> bool:
    """Return ``True`` if *tool_id* decodes to an upper-case method and a path."""
    try:
        method, path = decode_tool_id(tool_id)
    except IdentifierFormatError:
        return False
    return bool(method) and bool(path) and _METHOD_RE.match(method) is not None


def sanitize_for_tool_id(value: str) -> str:
    """Keep only ``[A-Za-z0-9_-]``, collapse ``___+`` to ``__``, trim ``_``/``-`` edges.

    A leading ``---name`` parameter marker is kept so that paths starting
    with a parameter still decode correctly.
    """
    value = _DISALLOWED_RE.sub("", value)
    value = _UNDERSCORE_RUN_RE.sub(PATH_SEPARATOR, value)
    return _EDGE_RE.sub("", value)


def extract_resource_name(path: str) -> str | None:
    """Return the last meaningful literal segment of *path*, lower-cased.

    Parameter segments and generic prefixes (``api``, ``v1`` .. ``v4``) are
    skipped.  Falls back to the first segment when nothing else qualifies.
    """
    segments = path.lstrip("/").split("/")
    for segment in reversed(segments):
        if not segment or (segment.startswith("{") and segment.endswith("}")):
            continue
        if segment.lower() in _IGNORED_RESOURCE_SEGMENTS:
            continue
        return segment.lower()
    return segments[0] or None


def is_valid_http_method(method: str) -> bool:
    """Return ``True`` if *method* names one of :class:`~spectools.models.HTTPMethod`."""
    try:
        HTTPMethod(method.lower())
    except ValueError:
        return False
    return True
