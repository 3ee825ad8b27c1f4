"""The ``spectools call`` command -- execute one tool against the live API."""

from __future__ import annotations

import json
from typing import Any, Optional

import typer

from spectools.client import ApiClient
from spectools.commands.common import exit_on_error, load_settings, open_manager
from spectools.exceptions import InvalidUsageError
from spectools.exit_codes import EXIT_GENERIC_FAILURE
from spectools.models import Settings
from spectools.output import get_output


def make_client(settings: Settings) -> ApiClient:
    """Create the client used by :func:`call_command`."""
    if not settings.api_base_url:
        raise InvalidUsageError("No API base URL given. Use --base-url or set API_BASE_URL.")
    return ApiClient(settings.api_base_url, settings.headers, settings.timeout)


def parse_param(raw: str) -> tuple[str, Any]:
    """Split ``name=value``; the value is decoded as JSON when it parses."""
    name, sep, value = raw.partition("=")
    if not sep or not name:
        raise InvalidUsageError(f"Invalid parameter '{raw}', expected name=value")
    try:
        return name, json.loads(value)
    except ValueError:
        return name, value


def call_command(
    ctx: typer.Context,
    tool_id: str = typer.Argument(..., help="Tool identifier, e.g. GET::pets__---petId."),
    params: Optional[list[str]] = typer.Option(
        None, "--param", "-p", help="Parameter as name=value (repeatable)."
    ),
    body: Optional[str] = typer.Option(None, "--body", help="JSON request body."),
) -> None:
    """Execute TOOL_ID and print the response body.

    Parameters are routed to the path, query, headers, or cookies using the
    tool's input schema, so the document must be available.

    Example::

        spectools --spec petstore.yaml --base-url https://petstore.example \\
            call GET::pets__---petId -p petId=7
    """
    with exit_on_error():
        settings = load_settings(ctx)
        manager = open_manager(settings)
        manager.load_tools()
        tool = manager.get_tool_by_id(tool_id)

        parameters = dict(parse_param(p) for p in params or [])
        if body is not None:
            try:
                parameters["body"] = json.loads(body)
            except ValueError as exc:
                raise InvalidUsageError(f"--body is not valid JSON: {exc}") from exc

        with make_client(settings) as client:
            result = client.execute(tool_id, parameters, tool=tool)

    output = get_output()
    if result.data not in (None, ""):
        output.print_document(result.data)
    if not result.success:
        output.error(result.error or "Request failed")
        raise typer.Exit(code=EXIT_GENERIC_FAILURE)
    output.info(f"HTTP {result.status_code}")
