"""Deterministic abbreviation of operation text into short tool names.

Tool names must fit 64 characters of ``[a-z0-9_]``.  :func:`abbreviate_name`
compresses an ``operationId``, a summary, or any other text into that budget:

1. every character outside ``[A-Za-z0-9]`` becomes a word boundary;
2. the text is split into lowercase words at boundaries, camelCase humps
   (acronym runs stay whole) and digit/letter transitions;
3. generic noise words are dropped, unless that would drop everything;
4. common long words are replaced by their usual abbreviation;
5. words longer than 50 characters lose their non-initial vowels;
6. words are joined with ``_``;
7. if the result is still too long, or the input exceeded 100 characters, it
   is cut and suffixed with ``_`` plus four hex digits of an MD5 digest of the
   original input.

The same arguments always give the same name.  The word tables are
module-level constants and never change at runtime.
"""

from __future__ import annotations

import hashlib
import re
from types import MappingProxyType
from typing import Optional

from spectools.exceptions import EmptyInputError

MAX_NAME_LENGTH = 64
LONG_INPUT_THRESHOLD = 100
LONG_WORD_THRESHOLD = 50
HASH_LENGTH = 4
SEPARATOR = "_"

# Room left for the un-namespaced part however long the namespace is
_MIN_NAME_BUDGET = 16

NOISE_WORDS = frozenset({
    "controller", "service", "api", "endpoint", "resource", "manager",
    "handler", "processor", "provider", "factory", "builder", "helper",
    "utility", "util", "admin", "data", "info", "detail", "item", "list",
    "collection", "response", "request", "model", "entity", "object",
    "result", "value", "type", "class", "interface", "implementation",
    "impl", "abstract", "base", "default", "standard", "common", "shared",
    "public", "private", "internal", "external", "global", "local", "temp",
    "temporary", "cache", "buffer", "pool", "queue", "stack", "tree", "node",
    "leaf", "root", "branch", "client", "server", "proxy", "adapter",
    "wrapper", "decorator", "observer", "listener", "callback", "event",
    "action", "command", "query", "operation", "method", "function",
    "procedure", "process", "task", "job", "work", "execute", "run", "start",
    "stop", "pause", "resume", "cancel", "abort", "finish", "complete",
    "begin", "end", "init", "initialize", "setup", "configure", "config",
    "setting", "option", "parameter", "param", "argument", "arg", "input",
    "output", "in", "out",
})

ABBREVIATIONS = MappingProxyType({
    "service": "svc",
    "management": "mgmt",
    "configuration": "config",
    "information": "info",
    "authentication": "auth",
    "authorization": "authz",
    "administration": "admin",
    "administrator": "admin",
    "application": "app",
    "development": "dev",
    "environment": "env",
    "repository": "repo",
    "database": "db",
    "identifier": "id",
    "parameter": "param",
    "parameters": "params",
    "argument": "arg",
    "arguments": "args",
    "response": "resp",
    "request": "req",
    "message": "msg",
    "notification": "notif",
    "organization": "org",
    "business": "biz",
    "reference": "ref",
    "references": "refs",
    "document": "doc",
    "documents": "docs",
    "specification": "spec",
    "specifications": "specs",
    "validation": "valid",
    "verification": "verify",
    "registration": "reg",
    "subscription": "sub",
    "publication": "pub",
    "transaction": "txn",
    "transactions": "txns",
    "connection": "conn",
    "connections": "conns",
    "session": "sess",
    "statistics": "stats",
    "metadata": "meta",
    "properties": "props",
    "attributes": "attrs",
    "extension": "ext",
    "extensions": "exts",
    "exception": "ex",
    "exceptions": "exs",
    "error": "err",
    "errors": "errs",
    "warning": "warn",
    "warnings": "warns",
})

PROTECTED_ACRONYMS = frozenset({
    "api", "url", "uri", "http", "https", "xml", "json", "sql", "csv", "pdf",
})

_NON_ALNUM_RE = re.compile(r"[^A-Za-z0-9]+")
_WORD_RE = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+|[A-Z]+|[0-9]+")
_VOWELS_RE = re.compile(r"[aeiou]")
_NAME_CHARSET_RE = re.compile(r"[^a-z0-9_]")
_VALID_NAME_RE = re.compile(r"^[a-z0-9_]+$")


def abbreviate_name(
    text: str,
    disable_abbreviation: bool = False,
    namespace: Optional[str] = None,
) -> str:
    """Derive a tool name from *text*.

    Args:
        text: ``operationId``, summary, or any descriptive text.
        disable_abbreviation: Only sanitise characters; keep every word and
            skip the length bound.
        namespace: Optional prefix.  It is sanitised but never abbreviated,
            and joined to the name with ``_``.

    Returns:
        The tool name.  Empty when *text* contains no ASCII letter or digit.

    Raises:
        EmptyInputError: If *text* is the empty string.
    """
    if text == "":
        raise EmptyInputError("Input string is required for tool name generation")

    if not _NON_ALNUM_RE.sub("", text):
        return ""

    prefix = _sanitize(namespace or "")
    if prefix:
        return _name_with_namespace(text, disable_abbreviation, prefix)
    return _name_without_namespace(text, disable_abbreviation, MAX_NAME_LENGTH)


def is_valid_tool_name(name: str) -> bool:
    """Return ``True`` if *name* is non-empty ``[a-z0-9_]`` of at most 64 characters."""
    return bool(_VALID_NAME_RE.match(name)) and len(name) <= MAX_NAME_LENGTH


def split_words(text: str) -> list[str]:
    """Split *text* into lowercase words (boundaries, camelCase, digits)."""
    words: list[str] = []
    for chunk in _NON_ALNUM_RE.split(text):
        words.extend(w.lower() for w in _WORD_RE.findall(chunk))
    return words


def _name_with_namespace(text: str, disable_abbreviation: bool, prefix: str) -> str:
    budget = max(MAX_NAME_LENGTH - len(prefix) - len(SEPARATOR), _MIN_NAME_BUDGET)
    name = _name_without_namespace(text, disable_abbreviation, budget)
    return f"{prefix}{SEPARATOR}{name}"


def _name_without_namespace(text: str, disable_abbreviation: bool, budget: int) -> str:
    if disable_abbreviation:
        return _sanitize(text)

    words = split_words(text)
    kept = [w for w in words if w not in NOISE_WORDS] or words
    kept = [ABBREVIATIONS.get(w, w) for w in kept]
    kept = [_shorten_long_word(w) for w in kept]

    result = SEPARATOR.join(kept)
    if len(result) > budget or len(text) > LONG_INPUT_THRESHOLD:
        suffix = SEPARATOR + _content_hash(text)
        result = result[: budget - len(suffix)] + suffix

    return _NAME_CHARSET_RE.sub("", result.lower())


def _shorten_long_word(word: str) -> str:
    if len(word) <= LONG_WORD_THRESHOLD or word in PROTECTED_ACRONYMS:
        return word
    return word[0] + _VOWELS_RE.sub("", word[1:])


def _content_hash(text: str) -> str:
    digest = hashlib.md5(text.encode("utf-8"), usedforsecurity=False).hexdigest()
    return digest[:HASH_LENGTH]


def _sanitize(text: str) -> str:
    return _NON_ALNUM_RE.sub(SEPARATOR, text).strip(SEPARATOR).lower()
