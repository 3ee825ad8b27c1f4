"""Inspect commands -- examine a document and the tools derived from it.

Provides the ``spectools inspect`` sub-command group.  Every command reads
the document named by ``--spec`` (or the environment / project config),
resolves its references, and prints a table or a JSON document on stdout.
"""

from __future__ import annotations

from typing import Optional

import typer

from spectools.commands.common import exit_on_error, load_settings, open_manager
from spectools.models import ToolsMode
from spectools.output import get_output

inspect_app = typer.Typer(no_args_is_help=True)


@inspect_app.command("operations")
def inspect_operations(
    ctx: typer.Context,
    tag: Optional[str] = typer.Option(None, "--tag", "-t", help="Only this tag."),
    method: Optional[str] = typer.Option(
        None, "--method", "-m", help="Only this HTTP method."
    ),
) -> None:
    """List every operation with its tool identifier.

    Example::

        spectools --spec petstore.yaml inspect operations --tag pets
    """
    with exit_on_error():
        manager = open_manager(load_settings(ctx))
        rows = [
            [
                op["method"],
                op["path"],
                op["tool_id"],
                op["summary"] or "-",
                ", ".join(op["tags"]),
            ]
            for op in manager.list_operations(tag=tag, method=method)
        ]

    title = f"{manager.document.info.title} -- Operations ({len(rows)})"
    get_output().print_table(["Method", "Path", "Tool ID", "Summary", "Tags"], rows, title=title)


@inspect_app.command("tags")
def inspect_tags(ctx: typer.Context) -> None:
    """List global and operation tags, globally declared tags first."""
    with exit_on_error():
        manager = open_manager(load_settings(ctx))
    tags = manager.document.get_tags()
    get_output().print_table(["Tag"], [[t] for t in tags], title=f"Tags ({len(tags)})")


@inspect_app.command("tools")
def inspect_tools(
    ctx: typer.Context,
    mode: Optional[ToolsMode] = typer.Option(None, "--mode", help="Tool loading mode."),
    tags: Optional[list[str]] = typer.Option(
        None, "--tag", "-t", help="Include operations with this tag (repeatable)."
    ),
    methods: Optional[list[str]] = typer.Option(
        None, "--method", "-m", help="Include this HTTP method (repeatable)."
    ),
    resources: Optional[list[str]] = typer.Option(
        None, "--resource", "-r", help="Include paths matching this resource (repeatable)."
    ),
    tool_ids: Optional[list[str]] = typer.Option(
        None, "--tool", help="Tool id to load in explicit mode (repeatable)."
    ),
) -> None:
    """List the tools that would be exposed, meta-tools included."""
    with exit_on_error():
        settings = load_settings(
            ctx,
            mode=mode.value if mode else None,
            include_tags=tags or None,
            include_operations=methods or None,
            include_resources=resources or None,
            include_tools=tool_ids or None,
        )
        manager = open_manager(settings)
        tools = manager.load_tools(settings.tools)

    rows = [
        [t.name, t.tool_id, t.method or "-", t.resource_name or "-"]
        for t in tools
    ]
    get_output().print_table(
        ["Name", "Tool ID", "Method", "Resource"], rows, title=f"Tools ({len(rows)})"
    )


@inspect_app.command("stats")
def inspect_stats(ctx: typer.Context) -> None:
    """Show tool counts by kind, method, resource, and tag."""
    with exit_on_error():
        settings = load_settings(ctx)
        manager = open_manager(settings)
        manager.load_tools(settings.tools)
    get_output().print_document(manager.get_stats().model_dump())


@inspect_app.command("schema")
def inspect_schema(
    ctx: typer.Context,
    tool_id: str = typer.Argument(..., help="Tool identifier, e.g. GET::pets__---petId."),
) -> None:
    """Show the full definition of one tool, input schema included."""
    with exit_on_error():
        manager = open_manager(load_settings(ctx))
        manager.load_tools()
        schema = manager.get_tool_schema(tool_id)
    get_output().print_document(schema)
