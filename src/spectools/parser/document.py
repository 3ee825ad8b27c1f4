"""The resolved document handed to tool builders.

:func:`load_document` is the single entry point collaborators need: it parses
already-fetched text, resolves every ``$ref`` pointer, and wraps the result in
a :class:`ResolvedDocument` that answers operation and tag queries.
"""

from __future__ import annotations

import logging
from typing import Any

from spectools.exceptions import ReferenceResolutionWarning
from spectools.models import APIInfo, OperationRecord
from spectools.parser.extractor import collect_tags, enumerate_operations, extract_info
from spectools.parser.loader import parse_document
from spectools.parser.resolver import RefResolver

logger = logging.getLogger(__name__)


class ResolvedDocument:
    """An OpenAPI document with all internal pointers expanded.

    Operations are enumerated once, on construction, and returned in the
    enumeration order of :func:`~spectools.parser.extractor.enumerate_operations`.

    Args:
        raw: The parsed tree before resolution.
        resolved: The tree after resolution.
        warnings: Fallbacks synthesised during resolution.
    """

    def __init__(
        self,
        raw: dict[str, Any],
        resolved: dict[str, Any],
        warnings: list[ReferenceResolutionWarning] | None = None,
    ) -> None:
        self.raw = raw
        self.resolved = resolved
        self.warnings = list(warnings or [])
        self.info: APIInfo = extract_info(resolved)
        self._operations = enumerate_operations(resolved)

    def get_operations(self) -> list[OperationRecord]:
        """Return every operation record (a new list, records are frozen)."""
        return list(self._operations)

    def get_tags(self) -> list[str]:
        """Return global tags plus every tag used by an operation, de-duplicated."""
        return collect_tags(self.resolved, self._operations)

    def find_operation(self, method: str, path: str) -> OperationRecord | None:
        """Look up the record for *method* and *path*, or ``None``."""
        method = method.lower()
        for op in self._operations:
            if op.method.value == method and op.path == path:
                return op
        return None

    def __repr__(self) -> str:
        return (
            f"ResolvedDocument(title={self.info.title!r}, "
            f"operations={len(self._operations)}, warnings={len(self.warnings)})"
        )


def build_document(tree: dict[str, Any]) -> ResolvedDocument:
    """Resolve an already-parsed tree and wrap it."""
    resolver = RefResolver(tree)
    resolved = resolver.resolve()
    return _finish(tree, resolved, resolver)


async def abuild_document(tree: dict[str, Any]) -> ResolvedDocument:
    """Like :func:`build_document`, resolving sibling subtrees concurrently."""
    resolver = RefResolver(tree)
    resolved = await resolver.aresolve()
    return _finish(tree, resolved, resolver)


def load_document(text: str, format_hint: str = "") -> ResolvedDocument:
    """Parse *text* and resolve it into a :class:`ResolvedDocument`.

    Args:
        text: Raw JSON or YAML document text.
        format_hint: Optional ``"json"`` or ``"yaml"``.

    Raises:
        ParseError: If the text is malformed.  Unresolvable pointers do not
            raise; they are reported in :attr:`ResolvedDocument.warnings`.
    """
    return build_document(parse_document(text, format_hint))


def _finish(
    tree: dict[str, Any], resolved: dict[str, Any], resolver: RefResolver
) -> ResolvedDocument:
    document = ResolvedDocument(tree, resolved, resolver.warnings)
    logger.info(
        "Loaded document: %s v%s (%d operations)",
        document.info.title,
        document.info.version,
        len(document.get_operations()),
    )
    if document.warnings:
        logger.warning(
            "%d reference(s) replaced by fallback schemas", len(document.warnings)
        )
    return document
