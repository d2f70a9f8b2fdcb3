"""Turn validated candidates into resource and data-source descriptors.

This is where the presentation details of a resource are settled: its name
(``x-terraform-resource-name`` or the path, plus version and parent
prefixes), its host override, per-operation timeouts and security, and the
property descriptors of its payload schema.
"""

from __future__ import annotations

import re
from typing import Optional

from specgraph.analyser.compliance import ResourceCandidate
from specgraph.analyser.extensions import Extension, lookup_bool, lookup_extension, lookup_str
from specgraph.analyser.paths import resource_name_from_path
from specgraph.analyser.security import requirement_names
from specgraph.analyser.subresources import is_ignored, parent_info
from specgraph.exceptions import InvalidTimeout
from specgraph.models import (
    DataSourceDescriptor,
    Operation,
    ParameterLocation,
    PathItem,
    PropertyDescriptor,
    ResourceDescriptor,
    ResourceOperation,
    ResourceOperations,
    Schema,
    SwaggerDocument,
)

_DURATION_RE = re.compile(r"^(?:\d+(?:\.\d+)?(?:ms|s|m|h))+$")
_DURATION_PART_RE = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h)")
_UNIT_SECONDS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


def parse_timeout(value: str) -> float:
    """Parse a duration such as ``30s``, ``10m`` or ``1h30m`` into seconds.

    Raises:
        ValueError: If *value* is not a duration.
    """
    value = value.strip()
    if not _DURATION_RE.match(value):
        raise ValueError(f"invalid duration '{value}'")
    return sum(
        float(amount) * _UNIT_SECONDS[unit] for amount, unit in _DURATION_PART_RE.findall(value)
    )


def _operation_timeout(path: str, operation: Operation) -> Optional[float]:
    raw, found = lookup_extension(operation.extensions, Extension.RESOURCE_TIMEOUT)
    if not found:
        return None
    try:
        return parse_timeout(str(raw))
    except ValueError as exc:
        raise InvalidTimeout(
            path,
            f"operation '{operation.operation_id or path}' declares an invalid "
            f"'{Extension.RESOURCE_TIMEOUT.value}' value: {exc}",
        ) from exc


def build_operation(
    method: str, path: str, operation: Operation, document: SwaggerDocument
) -> ResourceOperation:
    """Describe one operation: timeout, effective security and configurable headers.

    Raises:
        InvalidTimeout: If the operation's timeout extension is malformed.
    """
    requirements = operation.security if operation.security is not None else document.security
    return ResourceOperation(
        method=method,
        path=path,
        operation_id=operation.operation_id,
        timeout=_operation_timeout(path, operation),
        security=requirement_names(requirements),
        header_parameters=sorted(
            p.name
            for p in operation.parameters
            if p.location == ParameterLocation.HEADER
            and lookup_str(p.extensions, Extension.HEADER) is not None
        ),
    )


def build_properties(schema: Schema, identifier: Optional[str] = None) -> list[PropertyDescriptor]:
    """Describe the properties of *schema*, sorted by name."""
    return [
        _build_property(name, schema.properties[name], name in schema.required, name == identifier)
        for name in sorted(schema.properties)
    ]


def _build_property(name: str, prop: Schema, required: bool, identifier: bool) -> PropertyDescriptor:
    prop_type = prop.type or ("object" if prop.properties else "string")
    nested = prop
    if prop_type == "array" and prop.items is not None:
        nested = prop.items
    return PropertyDescriptor(
        name=name,
        type=prop_type,
        description=prop.description,
        required=required,
        read_only=prop.read_only,
        identifier=identifier,
        immutable=lookup_bool(prop.extensions, Extension.IMMUTABLE),
        force_new=lookup_bool(prop.extensions, Extension.FORCE_NEW),
        sensitive=lookup_bool(prop.extensions, Extension.SENSITIVE),
        preferred_name=lookup_str(prop.extensions, Extension.FIELD_NAME),
        items_type=None if prop.items is None else (prop.items.type or "object"),
        properties=build_properties(nested) if nested.properties else [],
    )


def resource_name(root_path: str, root: PathItem) -> str:
    """Return the full resource name, parent prefix included."""
    preferred = None
    if root.post is not None:
        preferred = lookup_str(root.post.extensions, Extension.RESOURCE_NAME)
    name = resource_name_from_path(root_path, preferred)
    parent = parent_info(root_path)
    if parent is not None:
        return f"{parent.full_parent_name}_{name}"
    return name


def build_resource(candidate: ResourceCandidate, document: SwaggerDocument) -> ResourceDescriptor:
    """Build the descriptor of a compliant resource.

    Raises:
        InvalidTimeout: If any operation's timeout extension is malformed.
    """
    root, instance = candidate.root, candidate.instance
    assert root.post is not None and instance.get is not None

    def _op(method: str, path: str, operation: Optional[Operation]) -> Optional[ResourceOperation]:
        if operation is None:
            return None
        return build_operation(method, path, operation, document)

    operations = ResourceOperations(
        create=build_operation("post", candidate.root_path, root.post, document),
        read=build_operation("get", candidate.instance_path, instance.get, document),
        update=_op("put", candidate.instance_path, instance.put),
        delete=_op("delete", candidate.instance_path, instance.delete),
    )
    return ResourceDescriptor(
        name=resource_name(candidate.root_path, root),
        root_path=candidate.root_path,
        instance_path=candidate.instance_path,
        host=lookup_str(root.post.extensions, Extension.RESOURCE_HOST),
        identifier=candidate.identifier,
        properties=build_properties(candidate.schema, candidate.identifier),
        operations=operations,
        parent=parent_info(candidate.root_path),
        ignored=is_ignored(root),
        computed_only=candidate.computed_only,
    )


def build_data_source(
    path: str, path_item: PathItem, items: Schema, document: SwaggerDocument
) -> DataSourceDescriptor:
    """Build the descriptor of a data-source compliant path."""
    assert path_item.get is not None
    host = lookup_str(path_item.get.extensions, Extension.RESOURCE_HOST)
    return DataSourceDescriptor(
        name=resource_name_from_path(path.rstrip("/") or path),
        path=path,
        host=host,
        properties=build_properties(items),
        read=build_operation("get", path, path_item.get, document),
    )
