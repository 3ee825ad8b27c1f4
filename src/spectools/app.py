"""Typer application and console-script entry point for spectools.

The root callback turns the global flags into an installed
:class:`~spectools.output.OutputManager`, attaches a Rich log handler to the
``spectools`` logger, and stores the configuration overrides in ``ctx.obj``
for the sub-commands:

* ``inspect`` -- operations, tags, tools, statistics, and tool schemas of a
  document (:mod:`spectools.commands.inspect`).
* ``ids`` -- encode, decode, and check tool identifiers; derive tool names
  (:mod:`spectools.commands.ids`).
* ``call`` -- execute one tool against the live API
  (:mod:`spectools.commands.call`).
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import typer

from spectools import __version__
from spectools.commands.call import call_command
from spectools.commands.ids import ids_app
from spectools.commands.inspect import inspect_app
from spectools.exit_codes import EXIT_GENERIC_FAILURE
from spectools.models import SpecInputMethod
from spectools.output import OutputFormat, OutputManager, set_output

app = typer.Typer(
    name="spectools",
    help="Inspect OpenAPI 3.x documents and expose their operations as tools.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.add_typer(inspect_app, name="inspect", help="Inspect a document's operations and tools.")
app.add_typer(ids_app, name="ids", help="Encode, decode, and check tool identifiers.")
app.command("call")(call_command)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"spectools {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    spec: Optional[str] = typer.Option(
        None, "--spec", "-s", help="Document URL, file path, or inline text."
    ),
    spec_method: Optional[SpecInputMethod] = typer.Option(
        None,
        "--spec-method",
        help="How to read --spec. Guessed from the value when omitted.",
    ),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="API base URL used by 'call'."
    ),
    namespace: Optional[str] = typer.Option(
        None, "--namespace", help="Prefix for every tool name."
    ),
    disable_abbreviation: Optional[bool] = typer.Option(
        None,
        "--disable-abbreviation/--abbreviate",
        help="Keep full tool names instead of abbreviating them.",
        show_default=False,
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Only show errors on stderr."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
) -> None:
    """Set up output and logging, and collect configuration overrides.

    The overrides land in ``ctx.obj["overrides"]`` and take precedence over
    environment variables and ``./spectools.json`` when a sub-command calls
    :func:`~spectools.config.resolve_settings`.
    """
    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    output = OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose)
    set_output(output)
    _configure_logging(output)

    if spec is not None and spec_method is None:
        from spectools.config import spec_method_for

        spec_method = spec_method_for(spec)

    ctx.ensure_object(dict)
    ctx.obj["overrides"] = {
        "spec": spec,
        "spec_input_method": spec_method.value if spec_method else None,
        "api_base_url": base_url,
        "namespace": namespace,
        "disable_abbreviation": disable_abbreviation,
    }


def _configure_logging(output: OutputManager) -> None:
    """Send ``spectools.*`` log records to stderr through Rich."""
    logger = logging.getLogger("spectools")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.addHandler(output.log_handler())
    logger.setLevel(output.log_level)


def main() -> None:
    """Console-script entry point.

    Errors raised outside a command's own handling exit with the
    :attr:`~spectools.exceptions.SpectoolsError.exit_code` of the exception.
    """
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from spectools.exceptions import SpectoolsError
        from spectools.output import get_output

        if isinstance(exc, SpectoolsError):
            get_output().error(str(exc))
            sys.exit(exc.exit_code)
        get_output().error(f"Unexpected error: {exc}")
        sys.exit(EXIT_GENERIC_FAILURE)
