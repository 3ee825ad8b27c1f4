"""Shared test fixtures for spectools.

Provides the fixture documents under ``tests/fixtures/`` as text, parsed
trees, and resolved documents, plus a clean environment for configuration
and CLI tests.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import pytest

from spectools.config import ENV_VARS
from spectools.output import reset_output
from spectools.parser import ResolvedDocument, build_document
from spectools.tools.manager import ToolsManager

FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Global state
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_global_state() -> None:
    """Reset the global OutputManager and the ``spectools`` logger.

    The CLI callback installs an OutputManager and a Rich log handler bound
    to the streams CliRunner substitutes for the duration of one test.
    """
    yield
    reset_output()
    logger = logging.getLogger("spectools")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Unset every configuration variable and chdir into an empty directory."""
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Fixture documents
# ---------------------------------------------------------------------------


@pytest.fixture
def petstore_path() -> Path:
    return FIXTURES_DIR / "petstore.json"


@pytest.fixture
def todo_path() -> Path:
    return FIXTURES_DIR / "todo.yaml"


@pytest.fixture
def petstore_raw() -> dict[str, Any]:
    """Load the raw petstore document (pointers unresolved)."""
    with open(FIXTURES_DIR / "petstore.json") as f:
        return json.load(f)


@pytest.fixture
def cyclic_raw() -> dict[str, Any]:
    """Load a document whose schemas A and B reference each other."""
    with open(FIXTURES_DIR / "cyclic.json") as f:
        return json.load(f)


@pytest.fixture
def petstore_document(petstore_raw: dict[str, Any]) -> ResolvedDocument:
    return build_document(petstore_raw)


@pytest.fixture
def petstore_manager(petstore_document: ResolvedDocument) -> ToolsManager:
    return ToolsManager(petstore_document)
