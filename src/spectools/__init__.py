"""spectools -- Turn OpenAPI 3.x documents into callable, well-named tools.

This package loads an OpenAPI description (JSON or YAML), resolves its
internal ``$ref`` pointers (cycles included) into a finite tree, and derives
two artifacts for every operation: a reversible *tool identifier* encoding
the HTTP method and path template, and a short *display name* that fits a
64-character ``[a-z0-9_]`` budget.

Typical usage::

    from spectools.parser import load_document
    from spectools.tools import ToolsManager

    document = load_document(text)
    manager = ToolsManager(document, namespace="petstore")
    manager.load_tools()

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the package.
    config: Settings resolution from flags, environment and project file.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
    client: HTTP execution of tools by identifier.
"""

__version__ = "0.3.0"
