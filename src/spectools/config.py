"""Configuration loading and precedence resolution.

Settings are assembled from four layers, highest precedence first:

1. CLI flags -- keyword overrides passed to :func:`resolve_settings`.
2. Environment variables -- see :data:`ENV_VARS`.
3. Project config -- ``./spectools.json`` in the working directory
   (:func:`load_project_config`).
4. Defaults -- the field defaults of :class:`~spectools.models.Settings`.

Every layer is reduced to a plain dict shaped like
:class:`~spectools.models.Settings` (tool filter keys nested under
``tools``) and merged key by key, so a higher layer only overrides what it
actually sets.  Validation happens once, on the merged result; any problem
surfaces as :class:`~spectools.exceptions.ConfigError`.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from spectools.exceptions import ConfigError
from spectools.models import Settings, SpecInputMethod, ToolsMode

_PROJECT_CONFIG_FILENAME = "spectools.json"

ENV_VARS = (
    "API_BASE_URL",
    "OPENAPI_SPEC_PATH",
    "OPENAPI_SPEC_INLINE",
    "OPENAPI_SPEC_FROM_STDIN",
    "API_HEADERS",
    "NAMESPACE",
    "TOOLS_MODE",
    "DISABLE_ABBREVIATION",
    "INCLUDE_TAGS",
    "INCLUDE_OPERATIONS",
    "INCLUDE_RESOURCES",
    "INCLUDE_TOOLS",
)
"""Environment variables read by :func:`settings_from_env`."""

# Keys that belong to the nested ToolsFilter rather than to Settings itself
_TOOLS_KEYS = frozenset({
    "mode",
    "include_tools",
    "include_tags",
    "include_resources",
    "include_operations",
})

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off", ""})


# --- Value parsing ---


def parse_bool(value: str, name: str = "value") -> bool:
    """Parse a boolean environment value (``true``/``false``, ``1``/``0``, ...).

    Raises:
        ConfigError: If *value* is not a recognised boolean.
    """
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be true or false, got '{value}'")


def parse_list(value: str) -> list[str]:
    """Split a comma-separated value, dropping blanks."""
    return [item.strip() for item in value.split(",") if item.strip()]


def parse_headers(value: str) -> dict[str, str]:
    """Parse ``key:value,key2:value2`` into a header mapping.

    Only the first ``:`` of each pair separates name from value, so values
    may contain colons (``Authorization:Bearer a:b``).

    Raises:
        ConfigError: If a pair has no ``:`` or an empty name.
    """
    headers: dict[str, str] = {}
    for pair in parse_list(value):
        name, sep, header_value = pair.partition(":")
        name = name.strip()
        if not sep or not name:
            raise ConfigError(f"Invalid header '{pair}', expected 'Name:value'")
        headers[name] = header_value.strip()
    return headers


def spec_method_for(source: str) -> SpecInputMethod:
    """Guess whether a spec location is a URL or a file path."""
    if source.startswith(("http://", "https://")):
        return SpecInputMethod.URL
    return SpecInputMethod.FILE


# --- Layers ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./spectools.json``.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file is not valid JSON or not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


def settings_from_env(environ: Optional[Mapping[str, str]] = None) -> dict[str, Any]:
    """Read the settings layer contributed by environment variables.

    Args:
        environ: Mapping to read instead of :data:`os.environ`.

    Returns:
        A partial settings dict containing only the variables that are set.
    """
    env = os.environ if environ is None else environ
    layer: dict[str, Any] = {}
    tools: dict[str, Any] = {}

    if env.get("API_BASE_URL"):
        layer["api_base_url"] = env["API_BASE_URL"]

    # Spec source: stdin wins over inline, inline over a path/URL
    if env.get("OPENAPI_SPEC_FROM_STDIN") and parse_bool(
        env["OPENAPI_SPEC_FROM_STDIN"], "OPENAPI_SPEC_FROM_STDIN"
    ):
        layer["spec_input_method"] = SpecInputMethod.STDIN.value
    elif env.get("OPENAPI_SPEC_INLINE"):
        layer["spec"] = env["OPENAPI_SPEC_INLINE"]
        layer["spec_input_method"] = SpecInputMethod.INLINE.value
    elif env.get("OPENAPI_SPEC_PATH"):
        layer["spec"] = env["OPENAPI_SPEC_PATH"]
        layer["spec_input_method"] = spec_method_for(env["OPENAPI_SPEC_PATH"]).value

    if env.get("API_HEADERS"):
        layer["headers"] = parse_headers(env["API_HEADERS"])
    if env.get("NAMESPACE"):
        layer["namespace"] = env["NAMESPACE"]
    if env.get("DISABLE_ABBREVIATION"):
        layer["disable_abbreviation"] = parse_bool(
            env["DISABLE_ABBREVIATION"], "DISABLE_ABBREVIATION"
        )

    if env.get("TOOLS_MODE"):
        tools["mode"] = env["TOOLS_MODE"].strip().lower()
    for var, key in (
        ("INCLUDE_TAGS", "include_tags"),
        ("INCLUDE_OPERATIONS", "include_operations"),
        ("INCLUDE_RESOURCES", "include_resources"),
        ("INCLUDE_TOOLS", "include_tools"),
    ):
        if env.get(var):
            tools[key] = parse_list(env[var])
    if tools:
        layer["tools"] = tools

    return layer


def _overrides_layer(overrides: Mapping[str, Any]) -> dict[str, Any]:
    """Shape CLI keyword overrides like a settings dict, skipping ``None``."""
    layer: dict[str, Any] = {}
    tools: dict[str, Any] = {}
    for key, value in overrides.items():
        if value is None:
            continue
        if key in _TOOLS_KEYS:
            tools[key] = value
        else:
            layer[key] = value
    if tools:
        layer["tools"] = tools
    return layer


def _merge(base: dict[str, Any], layer: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in layer.items():
        if key == "tools" and isinstance(value, dict) and isinstance(merged.get("tools"), dict):
            merged["tools"] = {**merged["tools"], **value}
        else:
            merged[key] = value
    return merged


# --- Precedence resolution ---


def resolve_settings(
    environ: Optional[Mapping[str, str]] = None,
    **cli_overrides: Any,
) -> Settings:
    """Resolve the effective settings with the full precedence chain.

    Args:
        environ: Environment mapping; defaults to :data:`os.environ`.
        **cli_overrides: Settings fields set on the command line.  Tool
            filter fields (``mode``, ``include_tags``, ...) may be given flat.
            ``None`` means "not set".

    Returns:
        The validated :class:`~spectools.models.Settings`.

    Raises:
        ConfigError: If any layer is malformed or the merged values fail
            validation.
    """
    merged: dict[str, Any] = {}
    project = load_project_config()
    if project is not None:
        merged = _merge(merged, project)
    merged = _merge(merged, settings_from_env(environ))
    merged = _merge(merged, _overrides_layer(cli_overrides))

    try:
        settings = Settings.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {_first_error(exc)}") from exc

    if settings.tools.mode == ToolsMode.EXPLICIT and not settings.tools.include_tools:
        raise ConfigError("Tools mode 'explicit' requires at least one tool id")
    return settings


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "invalid value")
    return f"{location}: {message}" if location else message
