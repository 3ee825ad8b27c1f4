"""Helpers shared by the CLI commands."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

import typer

from spectools.config import resolve_settings
from spectools.exceptions import InvalidUsageError, SpectoolsError
from spectools.models import Settings, SpecInputMethod
from spectools.output import get_output
from spectools.parser import build_document, load_spec
from spectools.tools.manager import ToolsManager


def get_overrides(ctx: typer.Context) -> dict[str, Any]:
    """Return the configuration overrides collected by the root callback."""
    obj = ctx.find_root().obj or {}
    return dict(obj.get("overrides") or {})


def load_settings(ctx: typer.Context, **extra: Any) -> Settings:
    """Resolve settings from the root overrides plus command-level *extra*."""
    overrides = get_overrides(ctx)
    overrides.update({k: v for k, v in extra.items() if v is not None})
    return resolve_settings(**overrides)


def open_manager(settings: Settings) -> ToolsManager:
    """Read, parse, and resolve the configured document.

    Raises:
        InvalidUsageError: If no document source is configured.
        ParseError: If the document cannot be read or parsed.
    """
    if settings.spec is None and settings.spec_input_method != SpecInputMethod.STDIN:
        raise InvalidUsageError(
            "No OpenAPI document given. Use --spec or set OPENAPI_SPEC_PATH."
        )

    tree, _ = load_spec(settings.spec or "", settings.spec_input_method)
    document = build_document(tree)
    return ToolsManager(
        document,
        disable_abbreviation=settings.disable_abbreviation,
        namespace=settings.namespace,
    )


@contextmanager
def exit_on_error() -> Iterator[None]:
    """Report a :class:`SpectoolsError` on stderr and exit with its code."""
    try:
        yield
    except SpectoolsError as exc:
        get_output().error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
