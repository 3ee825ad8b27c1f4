"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~spectools.exceptions.SpectoolsError` subclass.
External tooling (CI scripts, shell wrappers) can inspect the exit code to
determine the failure class without parsing stderr.

Example::

    $ spectools ids decode 'not-an-id'
    $ echo $?
    8   # EXIT_IDENTIFIER_ERROR -- the string is not a tool identifier
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_NOT_FOUND = 4
"""The requested tool or operation does not exist."""

EXIT_SPEC_PARSE_ERROR = 7
"""The OpenAPI document could not be read or parsed."""

EXIT_IDENTIFIER_ERROR = 8
"""A tool identifier did not match the ``METHOD::path`` grammar."""

EXIT_EMPTY_INPUT = 9
"""Name abbreviation was requested for an empty string."""
