"""Resolve ``$ref`` JSON Reference pointers in OpenAPI documents.

OpenAPI documents commonly use ``$ref`` pointers (e.g.,
``{"$ref": "#/components/schemas/Pet"}``) to avoid repetition.  This module
builds a new tree in which every pointer is replaced by the object it points
to, so that downstream code can walk the document without chasing references.

Resolution never fails on a bad pointer.  Three cases produce a *fallback
node* instead -- a permissive object schema flagged with
``x-fallback-schema: true`` -- plus a logged
:class:`~spectools.exceptions.ReferenceResolutionWarning`:

* **missing** -- an internal pointer names a key or index that does not exist;
* **external** -- the pointer is not of the form ``#/...`` (no file or network
  access is ever attempted);
* **circular** -- the pointer is met again while its own target is still being
  expanded.  The cut happens at the second occurrence, so a self-referencing
  schema is expanded exactly once.

Every pointer target is resolved once and memoised by pointer string.  The
cache entry is written only after the target's whole subtree is resolved, so
a value expanded inside a cycle carries the cut that was made on the chain
that first reached it.  :meth:`RefResolver.aresolve` fans out sibling
subtrees with :func:`asyncio.gather`, suspends once before each pointer
lookup, and merges the results by position.

The public entry points are :func:`resolve_refs`, :func:`aresolve_refs` and
the :class:`RefResolver` class.
"""

from __future__ import annotations

import asyncio
import copy
import logging
import threading
from typing import Any

from spectools.exceptions import ReferenceResolutionWarning

logger = logging.getLogger(__name__)

REF_KEY = "$ref"
FALLBACK_FLAG = "x-fallback-schema"
FALLBACK_REASON = "x-fallback-reason"
FALLBACK_REF = "x-fallback-ref"

_EMPTY: frozenset[str] = frozenset()
_MISSING = object()
def resolve_refs(spec: Any) -> Any:
    """Resolve all ``$ref`` pointers in *spec* and return a new tree.

    Args:
        spec: The parsed document, as returned by
            :func:`~spectools.parser.loader.parse_document`.

    Returns:
        A new tree with every pointer replaced by its target or by a fallback
        node.  The input is not modified.

    Example::

        resolved = resolve_refs(parse_document(text))
        # resolved["paths"]["/pets"]["get"]["responses"]["200"]["content"]
        # now contains the inlined schema instead of a $ref pointer.
    """
    return RefResolver(spec).resolve()


async def aresolve_refs(spec: Any) -> Any:
    """Asynchronous counterpart of :func:`resolve_refs`."""
    return await RefResolver(spec).aresolve()


def make_fallback_schema(description: str, reason: str, ref: str) -> dict[str, Any]:
    """Create a generic schema that accepts any properties.

    Args:
        description: Human-readable explanation of the failure.
        reason: ``"missing"``, ``"external"`` or ``"circular"``.
        ref: The pointer that could not be expanded.
    """
    return {
        "type": "object",
        "description": description,
        "properties": {},
        "additionalProperties": True,
        FALLBACK_FLAG: True,
        FALLBACK_REASON: reason,
        FALLBACK_REF: ref,
    }


def is_fallback(node: Any) -> bool:
    """Return ``True`` if *node* was synthesised by the resolver."""
    return isinstance(node, dict) and node.get(FALLBACK_FLAG) is True


def is_pointer(node: Any) -> bool:
    """Return ``True`` if *node* is a ``{"$ref": "<string>"}`` reference."""
    return isinstance(node, dict) and isinstance(node.get(REF_KEY), str)


class RefResolver:
    """Expands ``$ref`` pointers of one document.

    An instance holds the memo cache and the warnings collected for a single
    root.  It may be asked to resolve the whole document (:meth:`resolve`,
    :meth:`aresolve`) or any sub-node of it (:meth:`resolve_node`).  The cache
    is guarded by a lock, so one instance can be shared between threads.

    Args:
        root: The parsed document.  Pointers are looked up against it; it is
            never mutated.
    """

    def __init__(self, root: Any) -> None:
        self._root = root
        self._cache: dict[str, Any] = {}
        self._lock = threading.Lock()
        self._warned: set[tuple[str, str]] = set()
        self.warnings: list[ReferenceResolutionWarning] = []

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def resolve(self) -> Any:
        """Resolve the whole document."""
        return self.resolve_node(self._root)

    async def aresolve(self) -> Any:
        """Resolve the whole document, fanning out sibling subtrees."""
        return await self._aresolve(self._root, _EMPTY)

    def resolve_node(self, node: Any) -> Any:
        """Resolve *node*, looking its pointers up against the root."""
        return self._resolve(node, _EMPTY)

    # ------------------------------------------------------------------ #
    # Traversal
    # ------------------------------------------------------------------ #
    #
    # ``resolving`` is the chain of pointers currently being expanded above
    # the node.

    def _resolve(self, obj: Any, resolving: frozenset[str]) -> Any:
        if isinstance(obj, dict):
            if is_pointer(obj):
                return self._resolve_pointer(obj[REF_KEY], resolving)
            return {key: self._resolve(value, resolving) for key, value in obj.items()}

        if isinstance(obj, list):
            return [self._resolve(item, resolving) for item in obj]

        return obj

    def _resolve_pointer(self, ref: str, resolving: frozenset[str]) -> Any:
        early = self._short_circuit(ref, resolving)
        if early is not _MISSING:
            return early

        target = self._lookup(ref)
        if target is _MISSING:
            return self._unresolvable(ref, "missing", f"Failed to resolve reference: {ref}")

        return self._store(ref, self._resolve(target, resolving | {ref}))

    async def _aresolve(self, obj: Any, resolving: frozenset[str]) -> Any:
        if isinstance(obj, dict):
            if is_pointer(obj):
                return await self._aresolve_pointer(obj[REF_KEY], resolving)
            keys = list(obj.keys())
            values = await asyncio.gather(
                *(self._aresolve(obj[key], resolving) for key in keys)
            )
            # Merge by position, not completion order
            return dict(zip(keys, values))

        if isinstance(obj, list):
            return list(
                await asyncio.gather(*(self._aresolve(item, resolving) for item in obj))
            )

        return obj

    async def _aresolve_pointer(self, ref: str, resolving: frozenset[str]) -> Any:
        early = self._short_circuit(ref, resolving)
        if early is not _MISSING:
            return early

        # Suspension point at the lookup boundary; the target expands without yielding
        await asyncio.sleep(0)
        return self._resolve_pointer(ref, resolving)

    # ------------------------------------------------------------------ #
    # Pointer helpers
    # ------------------------------------------------------------------ #

    def _short_circuit(self, ref: str, resolving: frozenset[str]) -> Any:
        """Handle circular, external, and cached pointers without descending.

        Returns ``_MISSING`` when the pointer still has to be expanded.
        """
        if ref in resolving:
            self._warn(ref, "circular", f"Circular reference: {ref}")
            return make_fallback_schema(f"Circular reference: {ref}", "circular", ref)

        if not ref.startswith("#/") and ref != "#":
            return self._unresolvable(
                ref, "external", f"External reference not supported: {ref}"
            )

        with self._lock:
            cached = self._cache.get(ref, _MISSING)
        if cached is _MISSING:
            return _MISSING
        return copy.deepcopy(cached)

    def _unresolvable(self, ref: str, reason: str, message: str) -> Any:
        self._warn(ref, reason, f"{message}. Using generic schema as fallback.")
        fallback = make_fallback_schema(message, reason, ref)
        with self._lock:
            self._cache.setdefault(ref, fallback)
        return copy.deepcopy(fallback)

    def _store(self, ref: str, value: Any) -> Any:
        """Memoise the fully resolved *value*; the first write for *ref* wins."""
        with self._lock:
            if ref not in self._cache:
                self._cache[ref] = copy.deepcopy(value)
        return value

    def _lookup(self, ref: str) -> Any:
        """Walk the root following an internal pointer (RFC 6901 escaping)."""
        current: Any = self._root
        path = ref[2:]
        if not path:
            return current

        for segment in path.split("/"):
            segment = segment.replace("~1", "/").replace("~0", "~")
            if isinstance(current, dict):
                if segment in current:
                    current = current[segment]
                elif segment.isdigit() and int(segment) in current:
                    # YAML turns bare numeric keys (e.g. status codes) into ints
                    current = current[int(segment)]
                else:
                    return _MISSING
            elif isinstance(current, list):
                try:
                    current = current[int(segment)]
                except (ValueError, IndexError):
                    return _MISSING
            else:
                return _MISSING
        return current

    def _warn(self, ref: str, reason: str, message: str) -> None:
        with self._lock:
            if (ref, reason) in self._warned:
                return
            self._warned.add((ref, reason))
            self.warnings.append(ReferenceResolutionWarning(ref, reason, message))
        logger.warning("%s", message)
