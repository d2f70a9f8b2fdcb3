"""Build the typed document accessor from a resolved Swagger dict.

This module walks a fully ``$ref``-expanded Swagger 2.0 dictionary and
builds a :class:`~specgraph.models.SwaggerDocument`. Internally it delegates
to private helpers that each handle one section of the document:

* ``_build_schema`` -- recursive JSON Schema objects.
* ``_build_path_item`` -- one entry of the ``paths`` map, merging path-level
  parameters into every operation.
* ``_build_security_definitions`` -- the ``securityDefinitions`` map.

Parameter merging follows the Swagger specification: path-level parameters
provide defaults, and operation-level parameters override them when they
share the same ``name`` and ``in`` values.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from pydantic import ValidationError

from specgraph.exceptions import SpecParseError
from specgraph.models import (
    Operation,
    Parameter,
    ParameterLocation,
    PathItem,
    Response,
    Schema,
    SecurityDefinitionObject,
    SwaggerDocument,
)
from specgraph.parser.loader import load_spec, validate_swagger_version
from specgraph.parser.resolver import resolve_refs

logger = logging.getLogger(__name__)

_HTTP_METHODS = ("get", "post", "put", "patch", "delete")


def load_document(source: str) -> SwaggerDocument:
    """Load, validate, expand and type a Swagger document in one call.

    Args:
        source: File path, URL, or ``-`` for stdin.

    Raises:
        SpecParseError: If any step fails; the whole analysis cannot start.
    """
    raw = load_spec(source)
    validate_swagger_version(raw)
    return build_document(resolve_refs(raw), source=source)


def build_document(spec: dict[str, Any], source: Optional[str] = None) -> SwaggerDocument:
    """Build a :class:`~specgraph.models.SwaggerDocument` from an expanded dict.

    Args:
        spec: The Swagger dictionary after :func:`resolve_refs`.
        source: Where the document came from, kept for backend host fallback.

    Raises:
        SpecParseError: If the ``paths`` or ``definitions`` sections are not
            mappings, or a field does not have the type Swagger 2.0 requires.
    """
    paths_raw = spec.get("paths") or {}
    if not isinstance(paths_raw, dict):
        raise SpecParseError("'paths' must be a mapping of path templates")
    definitions_raw = spec.get("definitions") or {}
    if not isinstance(definitions_raw, dict):
        raise SpecParseError("'definitions' must be a mapping of schemas")

    try:
        return _build_document(spec, paths_raw, definitions_raw, source)
    except ValidationError as exc:
        raise SpecParseError(f"malformed document: {exc}") from exc


def _build_document(
    spec: dict[str, Any],
    paths_raw: dict[str, Any],
    definitions_raw: dict[str, Any],
    source: Optional[str],
) -> SwaggerDocument:
    paths: dict[str, PathItem] = {}
    for path, path_item in paths_raw.items():
        if not isinstance(path_item, dict):
            logger.debug("skipping path '%s': not a path item object", path)
            continue
        paths[path] = _build_path_item(path_item)

    info = spec.get("info") or {}
    return SwaggerDocument(
        swagger=str(spec.get("swagger", "2.0")),
        title=info.get("title"),
        version=None if info.get("version") is None else str(info.get("version")),
        host=spec.get("host"),
        base_path=spec.get("basePath"),
        schemes=list(spec.get("schemes") or []),
        paths=paths,
        definitions={
            name: _build_schema(schema)
            for name, schema in definitions_raw.items()
            if isinstance(schema, dict)
        },
        security_definitions=_build_security_definitions(spec),
        security=list(spec.get("security") or []),
        extensions=_extensions(spec),
        source=source,
    )


def _extensions(obj: dict[str, Any]) -> dict[str, Any]:
    """Collect the vendor extensions (``x-*`` keys) of a Swagger object."""
    return {key: value for key, value in obj.items() if key.lower().startswith("x-")}


def _as_bool(value: Any) -> bool:
    """Read a boolean keyword, accepting the quoted ``"true"`` form."""
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return value is True


def _schema_type(schema: dict[str, Any]) -> Optional[str]:
    """Return the schema type, taking the first non-null entry of a type array."""
    type_value = schema.get("type")
    if isinstance(type_value, list):
        non_null = [t for t in type_value if t != "null"]
        return str(non_null[0]) if non_null else None
    return None if type_value is None else str(type_value)


def _build_schema(schema: dict[str, Any]) -> Schema:
    properties_raw = schema.get("properties") or {}
    items_raw = schema.get("items")
    if isinstance(items_raw, list):
        items_raw = items_raw[0] if items_raw else None

    return Schema(
        type=_schema_type(schema),
        description=schema.get("description"),
        properties={
            name: _build_schema(prop)
            for name, prop in properties_raw.items()
            if isinstance(prop, dict)
        },
        required=[str(r) for r in schema.get("required") or [] if isinstance(r, str)],
        read_only=_as_bool(schema.get("readOnly", False)),
        items=_build_schema(items_raw) if isinstance(items_raw, dict) else None,
        ref=schema.get("$ref"),
        extensions=_extensions(schema),
    )


def _merge_parameters(
    path_params: list[dict[str, Any]],
    op_params: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """Merge path-level and operation-level parameters (operation level wins)."""
    overridden = {(p.get("name", ""), p.get("in", "")) for p in op_params}
    merged = [
        p for p in path_params if (p.get("name", ""), p.get("in", "")) not in overridden
    ]
    merged.extend(op_params)
    return merged


def _build_parameters(params_list: list[Any]) -> list[Parameter]:
    """Convert raw parameter dicts, skipping entries with unknown locations."""
    parameters: list[Parameter] = []
    for param in params_list:
        if not isinstance(param, dict):
            continue
        try:
            location = ParameterLocation(param.get("in", "query"))
        except ValueError:
            logger.debug(
                "skipping parameter '%s' with unsupported location '%s'",
                param.get("name"),
                param.get("in"),
            )
            continue

        schema = param.get("schema")
        required = _as_bool(param.get("required", False))
        if location == ParameterLocation.PATH:
            required = True

        parameters.append(
            Parameter(
                name=str(param.get("name", "")),
                location=location,
                required=required,
                type=param.get("type"),
                schema=_build_schema(schema) if isinstance(schema, dict) else None,
                extensions=_extensions(param),
            )
        )
    return parameters


def _build_responses(responses: dict[str, Any]) -> dict[str, Response]:
    result: dict[str, Response] = {}
    for status_code, response in responses.items():
        if not isinstance(response, dict):
            continue
        schema = response.get("schema")
        result[str(status_code)] = Response(
            status_code=str(status_code),
            description=response.get("description"),
            schema=_build_schema(schema) if isinstance(schema, dict) else None,
        )
    return result


def _build_operation(operation: dict[str, Any], path_params: list[dict[str, Any]]) -> Operation:
    security = operation.get("security")
    return Operation(
        operation_id=operation.get("operationId"),
        summary=operation.get("summary"),
        parameters=_build_parameters(
            _merge_parameters(path_params, operation.get("parameters") or [])
        ),
        responses=_build_responses(operation.get("responses") or {}),
        security=list(security) if security is not None else None,
        extensions=_extensions(operation),
    )


def _build_path_item(path_item: dict[str, Any]) -> PathItem:
    path_params = [p for p in path_item.get("parameters") or [] if isinstance(p, dict)]
    operations = {
        method: _build_operation(path_item[method], path_params)
        for method in _HTTP_METHODS
        if isinstance(path_item.get(method), dict)
    }
    return PathItem(parameters=_build_parameters(path_params), **operations)


def _build_security_definitions(spec: dict[str, Any]) -> dict[str, SecurityDefinitionObject]:
    definitions_raw = spec.get("securityDefinitions") or {}
    definitions: dict[str, SecurityDefinitionObject] = {}
    for name, definition in definitions_raw.items():
        if not isinstance(definition, dict):
            continue
        definitions[name] = SecurityDefinitionObject(
            type=str(definition.get("type", "")),
            location=definition.get("in"),
            param_name=definition.get("name"),
            description=definition.get("description"),
            extensions=_extensions(definition),
        )
    return definitions
