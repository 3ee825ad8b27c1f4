"""Identifier commands -- encode, decode, and check tool ids; derive names.

None of these commands need a document.
"""

from __future__ import annotations

from typing import Optional

import typer

from spectools.commands.common import exit_on_error, get_overrides
from spectools.exit_codes import EXIT_IDENTIFIER_ERROR
from spectools.output import get_output
from spectools.tools.identifiers import decode_tool_id, encode_tool_id, is_valid_tool_id
from spectools.tools.names import abbreviate_name

ids_app = typer.Typer(no_args_is_help=True)


@ids_app.command("encode")
def ids_encode(
    method: str = typer.Argument(..., help="HTTP method."),
    path: str = typer.Argument(..., help="Path template, e.g. /users/{id}."),
) -> None:
    """Print the tool id for METHOD and PATH."""
    get_output().print_data(encode_tool_id(method, path))


@ids_app.command("decode")
def ids_decode(tool_id: str = typer.Argument(..., help="Tool identifier.")) -> None:
    """Print the method and path encoded in TOOL_ID."""
    with exit_on_error():
        method, path = decode_tool_id(tool_id)
    get_output().print_document({"method": method, "path": path})


@ids_app.command("check")
def ids_check(tool_id: str = typer.Argument(..., help="Tool identifier.")) -> None:
    """Exit with status 0 if TOOL_ID is well-formed, 8 otherwise."""
    valid = is_valid_tool_id(tool_id)
    get_output().print_data("valid" if valid else "invalid")
    if not valid:
        raise typer.Exit(code=EXIT_IDENTIFIER_ERROR)


@ids_app.command("name")
def ids_name(
    ctx: typer.Context,
    text: str = typer.Argument(..., help="operationId, summary, or other text."),
    namespace: Optional[str] = typer.Option(None, "--namespace", help="Name prefix."),
    disable_abbreviation: bool = typer.Option(
        False, "--full", help="Only sanitise; do not abbreviate."
    ),
) -> None:
    """Print the tool name derived from TEXT."""
    overrides = get_overrides(ctx)
    namespace = namespace or overrides.get("namespace")
    disable = disable_abbreviation or bool(overrides.get("disable_abbreviation"))
    with exit_on_error():
        name = abbreviate_name(text, disable, namespace)
    get_output().print_data(name)
