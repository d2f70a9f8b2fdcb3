"""Load Swagger 2.0 documents from a URL, local file, or stdin.

This module handles all I/O for fetching raw API documents and turning them
into Python dictionaries. JSON and YAML are both accepted with automatic
format detection.

The two public functions are:

* :func:`load_spec` -- Load and parse a document from any supported source.
* :func:`validate_swagger_version` -- Check and return the ``swagger``
  version string, rejecting OpenAPI 3.x and anything that is not ``2.0``.

After loading, the raw dict goes through
:func:`~specgraph.parser.resolver.resolve_refs` and
:func:`~specgraph.parser.document.build_document`.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml

from specgraph.exceptions import SpecParseError

logger = logging.getLogger(__name__)


def load_spec(source: str, timeout: float = 30.0) -> dict[str, Any]:
    """Load a Swagger document from URL, file path, or stdin ('-').

    Args:
        source: A URL (http/https), file path, or '-' for stdin.
        timeout: Network timeout in seconds for URL sources.

    Returns:
        The parsed document as a dictionary.

    Raises:
        SpecParseError: If the source cannot be loaded or parsed.
    """
    if not source:
        raise SpecParseError(
            "document source is empty, please provide a file path or URL"
        )
    if source == "-":
        return _load_from_stdin()
    if source.startswith(("http://", "https://")):
        return _load_from_url(source, timeout)
    return _load_from_file(source)


def _load_from_stdin() -> dict[str, Any]:
    try:
        content = sys.stdin.read()
    except OSError as exc:
        raise SpecParseError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise SpecParseError("No input received from stdin")

    return _parse_content(content, hint="stdin")


def _load_from_url(url: str, timeout: float) -> dict[str, Any]:
    """Fetch a document over HTTP(S); the content-type header picks the parser."""
    logger.debug("fetching document from %s", url)
    try:
        response = httpx.get(url, timeout=timeout, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecParseError(
            f"HTTP {exc.response.status_code} fetching document from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SpecParseError(f"Failed to fetch document from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"

    return _parse_content(response.text, hint=hint)


def _load_from_file(path: str) -> dict[str, Any]:
    """Load a document from disk, using the extension as a format hint."""
    file_path = Path(path)
    if not file_path.is_file():
        raise SpecParseError(f"Document file not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecParseError(f"Failed to read document {path}: {exc}") from exc

    if not content.strip():
        raise SpecParseError(f"Document file is empty: {path}")

    suffix = file_path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"

    return _parse_content(content, hint=hint)


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse content as JSON or YAML.

    JSON is tried first unless the hint says YAML; valid JSON is also valid
    YAML, but the JSON parser is stricter and gives better error messages.

    Raises:
        SpecParseError: If the content cannot be parsed as either format, or
            does not hold a mapping at the top level.
    """
    json_error: Exception | None = None

    if hint != "yaml":
        try:
            result = json.loads(content)
        except json.JSONDecodeError as exc:
            json_error = exc
            if hint == "json":
                raise SpecParseError(f"Invalid JSON: {exc}") from exc
        else:
            return _ensure_mapping(result)

    try:
        result = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        msg = "Failed to parse document as JSON or YAML"
        if json_error:
            msg += f"\n  JSON error: {json_error}"
        msg += f"\n  YAML error: {exc}"
        raise SpecParseError(msg) from exc

    return _ensure_mapping(result)


def _ensure_mapping(result: Any) -> dict[str, Any]:
    if not isinstance(result, dict):
        found = type(result).__name__ if result is not None else "empty document"
        raise SpecParseError(f"Document must be a JSON/YAML object (got {found})")
    return result


def validate_swagger_version(spec: dict[str, Any]) -> str:
    """Validate and return the Swagger version string.

    Only Swagger ``2.0`` documents are analysed: the analyser relies on
    ``in: body`` parameters, root-level ``definitions`` and
    ``securityDefinitions``, none of which exist in OpenAPI 3.x.

    Raises:
        SpecParseError: If the document is OpenAPI 3.x or declares no version.
    """
    if "openapi" in spec:
        raise SpecParseError(
            f"OpenAPI {spec['openapi']} is not supported. "
            "Only Swagger 2.0 documents can be analysed."
        )

    version = spec.get("swagger")
    if version is None:
        raise SpecParseError(
            "Missing 'swagger' field. Is this a Swagger 2.0 document?"
        )

    version_str = str(version)
    if version_str != "2.0":
        raise SpecParseError(
            f"Unsupported Swagger version: {version_str}. Only 2.0 is supported."
        )
    return version_str
