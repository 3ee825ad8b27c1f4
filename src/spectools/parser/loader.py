"""Acquire OpenAPI document text and parse it into a plain Python tree.

Two layers live here:

* :func:`parse_document` -- the pure parser.  It turns already-fetched text
  into nested ``dict`` / ``list`` / scalar values.  JSON versus YAML is
  decided by sniffing the first non-whitespace character unless the caller
  passes a format hint.  Syntax errors surface as
  :class:`~spectools.exceptions.ParseError` carrying the line and column.
* :func:`read_source` / :func:`load_spec` -- the I/O layer.  They fetch raw
  text from a URL, a local file, stdin, or an inline string and hand it to
  :func:`parse_document`.  Nothing downstream of this module performs I/O.

After parsing, the tree is passed to
:func:`~spectools.parser.document.build_document` which resolves ``$ref``
pointers and enumerates operations.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml

from spectools.exceptions import ParseError
from spectools.models import SpecInputMethod

logger = logging.getLogger(__name__)

_JSON_OPENERS = ("{", "[")


def sniff_format(content: str) -> str:
    """Guess the serialisation of *content* from its first non-blank character.

    Args:
        content: Raw document text.

    Returns:
        ``"json"`` when the text opens with ``{`` or ``[``, ``"yaml"``
        otherwise.
    """
    stripped = content.lstrip()
    if stripped.startswith(_JSON_OPENERS):
        return "json"
    return "yaml"


def parse_document(content: str, format_hint: str = "") -> dict[str, Any]:
    """Parse document text as JSON or YAML.

    Args:
        content: The raw string content.
        format_hint: Optional ``"json"`` or ``"yaml"``.  When empty, the
            format is sniffed with :func:`sniff_format`.

    Returns:
        The parsed mapping.  Key order follows the document.

    Raises:
        ParseError: If the text is empty, malformed, or its root is not a
            mapping.
    """
    if not content or not content.strip():
        raise ParseError("Document is empty")

    fmt = (format_hint or sniff_format(content)).lower()
    if fmt in ("yml", "yaml"):
        result = _parse_yaml(content)
    elif fmt == "json":
        result = _parse_json(content)
    else:
        raise ParseError(f"Unknown document format hint: {format_hint!r}")

    if not isinstance(result, dict):
        raise ParseError(
            "Document root must be a mapping (got "
            f"{type(result).__name__ if result is not None else 'empty document'})"
        )
    return result


def _parse_json(content: str) -> Any:
    try:
        return json.loads(content)
    except json.JSONDecodeError as exc:
        raise ParseError(
            f"Invalid JSON: {exc.msg}", line=exc.lineno, column=exc.colno
        ) from exc


def _parse_yaml(content: str) -> Any:
    try:
        result = yaml.safe_load(content)
    except yaml.MarkedYAMLError as exc:
        mark = exc.problem_mark or exc.context_mark
        problem = exc.problem or exc.context or "syntax error"
        if mark is None:
            raise ParseError(f"Invalid YAML: {problem}") from exc
        raise ParseError(
            f"Invalid YAML: {problem}", line=mark.line + 1, column=mark.column + 1
        ) from exc
    except yaml.YAMLError as exc:
        raise ParseError(f"Invalid YAML: {exc}") from exc
    _reject_recursive_aliases(result, set(), set())
    return result


def _reject_recursive_aliases(node: Any, active: set[int], checked: set[int]) -> None:
    """Raise if an alias makes a container part of its own subtree.

    Aliases that merely share a node between two places are fine; *checked*
    keeps shared nodes from being walked twice.
    """
    if not isinstance(node, (dict, list)) or id(node) in checked:
        return
    if id(node) in active:
        raise ParseError("Invalid YAML: recursive alias (a node contains itself)")

    active.add(id(node))
    children = node.values() if isinstance(node, dict) else node
    for child in children:
        _reject_recursive_aliases(child, active, checked)
    active.discard(id(node))
    checked.add(id(node))


# --- Source acquisition ---


def load_spec(
    source: str, method: SpecInputMethod | str = SpecInputMethod.URL
) -> tuple[dict[str, Any], str]:
    """Read and parse a document in one step.

    Args:
        source: URL, file path, or inline text depending on *method*.
            Ignored for ``stdin``.
        method: How to interpret *source*.

    Returns:
        A ``(tree, format)`` tuple where ``format`` is the detected or
        hinted serialisation (``"json"`` or ``"yaml"``).

    Raises:
        ParseError: If the text cannot be acquired or parsed.
    """
    text, hint = read_source(source, method)
    fmt = hint or sniff_format(text)
    return parse_document(text, fmt), fmt


def read_source(
    source: str, method: SpecInputMethod | str = SpecInputMethod.URL
) -> tuple[str, str]:
    """Fetch raw document text.

    Args:
        source: URL, file path, or inline text depending on *method*.
        method: One of :class:`~spectools.models.SpecInputMethod`.

    Returns:
        A ``(text, format_hint)`` tuple.  The hint is derived from the
        content type or file extension and may be empty.

    Raises:
        ParseError: If the source cannot be read.
    """
    try:
        method = SpecInputMethod(method)
    except ValueError as exc:
        raise ParseError(f"Unsupported spec input method: {method}") from exc

    logger.debug("Reading document using method: %s", method.value)
    if method == SpecInputMethod.URL:
        return _read_from_url(source)
    if method == SpecInputMethod.FILE:
        return _read_from_file(source)
    if method == SpecInputMethod.STDIN:
        return _read_from_stdin(), ""
    return source, ""


def _read_from_stdin() -> str:
    try:
        content = sys.stdin.read()
    except Exception as exc:
        raise ParseError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise ParseError("No input received from stdin")
    return content


def _read_from_url(url: str) -> tuple[str, str]:
    """Fetch document text over HTTP(S), using the content type as a hint."""
    try:
        response = httpx.get(
            url,
            timeout=30.0,
            follow_redirects=True,
            headers={
                "Accept": "application/json, application/yaml, text/yaml, text/plain"
            },
        )
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise ParseError(
            f"HTTP {exc.response.status_code} fetching document from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise ParseError(f"Failed to fetch document from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"
    return response.text, hint


def _read_from_file(path: str) -> tuple[str, str]:
    """Read a local file, taking the format hint from its extension."""
    file_path = Path(path)
    if not file_path.is_file():
        raise ParseError(f"Document file not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ParseError(f"Failed to read document file {path}: {exc}") from exc

    suffix = file_path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"
    return content, hint
