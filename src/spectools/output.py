"""Console output with separate data and diagnostic streams.

* **stdout** carries command results only (tables, JSON documents, ids), so
  ``spectools inspect tools --json | jq`` always sees clean data.
* **stderr** carries everything else: warnings, errors, debug notes, and the
  log records emitted by the library modules.

:class:`OutputManager` owns one :class:`rich.console.Console` per stream and
renders results as Rich tables, plain tab-separated text or JSON.  The CLI
creates one in :func:`~spectools.app.main_callback` and installs it with
:func:`set_output`; command code then uses :func:`get_output`.

``NO_COLOR`` and ``TERM=dumb`` disable colour just like ``--no-color``.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table


class OutputFormat(str, Enum):
    """Rendering of command results.

    ``AUTO`` becomes ``RICH`` on an interactive, colour-capable terminal and
    ``PLAIN`` otherwise.
    """

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Routes results to stdout and diagnostics to stderr.

    Args:
        format: Requested result format.
        no_color: Disable colour and markup on both streams.
        quiet: Hide informational messages; warnings and errors still show.
        verbose: Show debug messages.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _color_disabled_by_env()
        self._quiet = quiet
        self._verbose = verbose

        if format == OutputFormat.AUTO:
            interactive = _is_tty() and not self._no_color
            self._format = OutputFormat.RICH if interactive else OutputFormat.PLAIN
        else:
            self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=(self._format == OutputFormat.RICH),
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    @property
    def log_level(self) -> int:
        """Threshold for library log records shown on stderr."""
        if self._verbose:
            return logging.DEBUG
        if self._quiet:
            return logging.ERROR
        return logging.WARNING

    def log_handler(self) -> logging.Handler:
        """Return a :class:`~rich.logging.RichHandler` writing to the stderr console."""
        handler = RichHandler(
            console=self._stderr,
            show_time=False,
            show_path=self._verbose,
            markup=False,
            rich_tracebacks=self._verbose,
        )
        handler.setLevel(self.log_level)
        return handler

    # ------------------------------------------------------------------ #
    # Results (stdout)
    # ------------------------------------------------------------------ #

    def print_data(self, text: str) -> None:
        """Write *text* to stdout unformatted."""
        print(text, file=sys.stdout, flush=True)

    def print_document(self, data: Any) -> None:
        """Print a JSON-compatible value (schema, API response, mapping).

        Rich mode highlights it as JSON, JSON mode prints it indented, plain
        mode prints mappings as ``key<TAB>value`` lines.
        """
        if self._format == OutputFormat.RICH and isinstance(data, (dict, list)):
            syntax = Syntax(_dumps(data), "json", theme="monokai", word_wrap=True)
            self._stdout.print(syntax)
        elif self._format == OutputFormat.PLAIN and isinstance(data, dict):
            for key, value in data.items():
                rendered = _dumps(value, indent=None) if isinstance(value, (dict, list)) else value
                self.print_data(f"{key}\t{rendered}")
        elif isinstance(data, str):
            self.print_data(data)
        else:
            self.print_data(_dumps(data))

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Print rows as a Rich table, tab-separated text, or a JSON array.

        In JSON mode each row becomes an object keyed by *headers*.
        """
        if self._format == OutputFormat.JSON:
            self.print_data(_dumps([dict(zip(headers, row)) for row in rows]))
            return

        if self._format == OutputFormat.PLAIN:
            self.print_data("\t".join(headers))
            for row in rows:
                self.print_data("\t".join(row))
            return

        table = Table(title=title, show_header=True, header_style="bold cyan")
        for header in headers:
            table.add_column(header)
        for row in rows:
            table.add_row(*row)
        self._stdout.print(table)

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        if not self._quiet:
            self._diagnostic(message, "{}")

    def warning(self, message: str) -> None:
        self._diagnostic(f"Warning: {message}", "[yellow]{}[/yellow]")

    def error(self, message: str) -> None:
        self._diagnostic(f"Error: {message}", "[bold red]{}[/bold red]")

    def debug(self, message: str) -> None:
        if self._verbose:
            self._diagnostic(f"[debug] {message}", "[dim]{}[/dim]")

    def _diagnostic(self, message: str, style: str) -> None:
        if self._no_color:
            print(message, file=sys.stderr, flush=True)
        else:
            self._stderr.print(style.format(escape(message)), markup=True, highlight=False)


def _dumps(data: Any, indent: Optional[int] = 2) -> str:
    return json.dumps(data, indent=indent, ensure_ascii=False, default=str)


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _color_disabled_by_env() -> bool:
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


# ------------------------------------------------------------------ #
# Global instance
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed :class:`OutputManager`, creating a default one lazily."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager (used between tests)."""
    global _output
    _output = None
