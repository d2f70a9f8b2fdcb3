"""Shared test fixtures for specgraph.

Provides reusable fixtures for loading Swagger fixtures, building typed
documents from inline dicts, isolating config environments, managing output
state, and running CLI commands. These fixtures are automatically discovered
by pytest and available to all test modules without explicit imports.
"""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any, Callable

import pytest

from specgraph.models import SwaggerDocument
from specgraph.output import OutputFormat, OutputManager, reset_output, set_output
from specgraph.parser import build_document, resolve_refs

FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Document fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def cdn_api_path() -> Path:
    """Path of the CDN service fixture (resources, sub-resources, regions, security)."""
    return FIXTURES_DIR / "cdn_api.json"


@pytest.fixture
def cdn_api_raw(cdn_api_path: Path) -> dict[str, Any]:
    """Load the raw CDN service document."""
    with open(cdn_api_path) as f:
        return json.load(f)


@pytest.fixture
def cdn_document(cdn_api_raw: dict[str, Any]) -> SwaggerDocument:
    """The CDN service document, expanded and typed."""
    return build_document(resolve_refs(cdn_api_raw))


@pytest.fixture
def make_document() -> Callable[..., SwaggerDocument]:
    """Factory building a typed document from paths/definitions dicts.

    Example::

        doc = make_document(paths={...}, definitions={...}, security=[...])
    """

    def _make(
        paths: dict[str, Any] | None = None,
        definitions: dict[str, Any] | None = None,
        **root: Any,
    ) -> SwaggerDocument:
        raw: dict[str, Any] = {
            "swagger": "2.0",
            "info": {"title": "Test API", "version": "1.0"},
            "paths": copy.deepcopy(paths or {}),
            "definitions": copy.deepcopy(definitions or {}),
        }
        raw.update(copy.deepcopy(root))
        return build_document(resolve_refs(raw))

    return _make


CDN_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "id": {"type": "string", "readOnly": True},
        "label": {"type": "string"},
    },
}


def _cdn_paths(
    root: str = "/v1/cdns",
    instance: str = "/v1/cdns/{id}",
    schema: dict[str, Any] | None = None,
    post_extensions: dict[str, Any] | None = None,
) -> dict[str, Any]:
    body_schema = copy.deepcopy(schema if schema is not None else CDN_SCHEMA)
    post: dict[str, Any] = {
        "parameters": [{"in": "body", "name": "body", "schema": body_schema}],
        "responses": {"201": {"description": "created", "schema": copy.deepcopy(body_schema)}},
    }
    post.update(post_extensions or {})
    return {
        root: {"post": post},
        instance: {
            "get": {
                "parameters": [{"in": "path", "name": "id", "type": "string"}],
                "responses": {"200": {"description": "ok", "schema": copy.deepcopy(body_schema)}},
            }
        },
    }


@pytest.fixture
def cdn_paths() -> Callable[..., dict[str, Any]]:
    """Factory returning a minimal compliant root/instance ``paths`` map.

    Keyword arguments: ``root``, ``instance``, ``schema`` (payload schema)
    and ``post_extensions`` (extra keys merged into the POST operation).
    """
    return _cdn_paths


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points XDG_DATA_HOME at tmp_path, clears all SPECGRAPH_* environment
    variables and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for var in ["SPECGRAPH_LOG_LEVEL", "SPECGRAPH_FORMAT", "SPECGRAPH_INCLUDE_PREFIX"]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def json_output() -> OutputManager:
    """Install a JSON-format OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.JSON)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner capturing stdout and stderr separately."""
    from typer.testing import CliRunner

    return CliRunner()
