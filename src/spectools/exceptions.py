"""Exception hierarchy for spectools.

All raised exceptions inherit from :class:`SpectoolsError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`spectools.exit_codes`.
The top-level error handler in :func:`spectools.app.main` catches
``SpectoolsError`` and exits with the appropriate code.

Subclass hierarchy::

    SpectoolsError (exit 1)
    +-- InvalidUsageError      (exit 2)
    +-- ToolNotFoundError      (exit 4)
    +-- ParseError             (exit 7)
    +-- IdentifierFormatError  (exit 8)
    +-- EmptyInputError        (exit 9)
    +-- ConfigError            (exit 1)

:class:`ReferenceResolutionWarning` is deliberately *not* part of this
hierarchy: unresolvable or circular ``$ref`` pointers never abort a load.
The resolver records one warning per fallback node it synthesises and logs
it, and processing continues.
"""

from __future__ import annotations

from typing import Optional

from spectools.exit_codes import (
    EXIT_EMPTY_INPUT,
    EXIT_GENERIC_FAILURE,
    EXIT_IDENTIFIER_ERROR,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_SPEC_PARSE_ERROR,
)


class SpectoolsError(Exception):
    """Base exception for all spectools errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`spectools.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SpectoolsError):
    """Raised for invalid CLI arguments or missing required parameters."""

    exit_code = EXIT_INVALID_USAGE


class ToolNotFoundError(SpectoolsError):
    """Raised when a tool id or name is not registered with the manager."""

    exit_code = EXIT_NOT_FOUND


class ParseError(SpectoolsError):
    """Raised when document text is malformed or cannot be acquired.

    When the failure comes from a syntax error, ``line`` and ``column`` hold
    the 1-based position reported by the JSON or YAML parser.
    """

    exit_code = EXIT_SPEC_PARSE_ERROR

    def __init__(
        self,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ):
        if line is not None:
            message = f"{message} (line {line}, column {column})"
        super().__init__(message)
        self.line = line
        self.column = column


class IdentifierFormatError(SpectoolsError):
    """Raised when a string does not follow the ``METHOD::path`` grammar."""

    exit_code = EXIT_IDENTIFIER_ERROR


class EmptyInputError(SpectoolsError):
    """Raised when a display name is requested for an empty string."""

    exit_code = EXIT_EMPTY_INPUT


class ConfigError(SpectoolsError):
    """Raised for configuration problems (invalid JSON, bad env values, missing spec)."""

    exit_code = EXIT_GENERIC_FAILURE


class ReferenceResolutionWarning(UserWarning):
    """A ``$ref`` pointer was replaced by a fallback schema.

    Args:
        ref: The pointer string as written in the document.
        reason: One of ``"missing"``, ``"external"`` or ``"circular"``.
        message: Human-readable description, also used as the fallback
            node's ``description``.
    """

    def __init__(self, ref: str, reason: str, message: str):
        super().__init__(message)
        self.ref = ref
        self.reason = reason
        self.message = message
