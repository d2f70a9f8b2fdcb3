"""Decide whether a root/instance path pair is a manageable resource.

A pair qualifies when:

1. the instance path declares a GET operation (PUT/DELETE are optional);
2. the root path declares a POST operation;
3. the POST operation either takes a ``body`` parameter whose schema is an
   expanded object schema with at least one property, or takes no body at
   all and returns (first of 200/201/202) a schema whose properties are
   all read-only -- a *computed-only* resource;
4. the payload schema has an identifying property: one named ``id`` or one
   flagged with ``x-terraform-id: true``.

For instance, given::

    paths:
      /v1/users:
        post:
          parameters:
          - in: body
            name: body
            schema:
              $ref: "#/definitions/User"
      /v1/users/{id}:
        get:
          responses:
            200:
              schema:
                $ref: "#/definitions/User"
    definitions:
      User:
        type: object
        properties:
          id: {type: string, readOnly: true}
          name: {type: string}

the pair ``("/v1/users", "/v1/users/{id}")`` is compliant. Each rule raises
its own :class:`~specgraph.exceptions.ComplianceError` subclass so callers
can tell exactly why a pair was rejected.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from specgraph.analyser.extensions import Extension, lookup_bool
from specgraph.exceptions import (
    DuplicateIdentifier,
    InvalidBodySchema,
    MissingCreateOperation,
    MissingIdentifier,
    MissingReadOperation,
)
from specgraph.models import Operation, PathItem, Schema, SwaggerDocument

logger = logging.getLogger(__name__)

IDENTIFIER_PROPERTY = "id"


@dataclass(frozen=True)
class ResourceCandidate:
    """A pair that passed every compliance rule, ready to become a descriptor."""

    root_path: str
    instance_path: str
    root: PathItem
    instance: PathItem
    schema: Schema
    identifier: str
    computed_only: bool = False


def validate_resource(
    root_path: str, instance_path: str, document: SwaggerDocument
) -> ResourceCandidate:
    """Run every compliance rule against a root/instance pair.

    Raises:
        MissingReadOperation: The instance path has no GET.
        MissingCreateOperation: The root path has no POST.
        InvalidBodySchema: Neither a usable body schema nor a computed-only
            response schema was found.
        MissingIdentifier: No identifying property.
        DuplicateIdentifier: Several properties claim to be the identifier.
    """
    logger.debug("validating end point compliance %s", instance_path)
    instance = document.paths[instance_path]
    if instance.get is None:
        raise MissingReadOperation(
            instance_path,
            f"resource instance path '{instance_path}' missing required GET operation",
        )

    root = document.paths.get(root_path)
    if root is None or root.post is None:
        raise MissingCreateOperation(
            instance_path,
            f"resource root path '{root_path}' missing required POST operation",
        )

    schema, computed_only = resource_payload_schema(instance_path, root_path, root.post)
    identifier = find_identifier(instance_path, schema)
    return ResourceCandidate(
        root_path=root_path,
        instance_path=instance_path,
        root=root,
        instance=instance,
        schema=schema,
        identifier=identifier,
        computed_only=computed_only,
    )


def resource_payload_schema(
    instance_path: str, root_path: str, create: Operation
) -> tuple[Schema, bool]:
    """Return the payload schema of a create operation and whether it is computed-only.

    Raises:
        InvalidBodySchema: If the body schema is unusable, or the operation
            has no body and its response schema is missing or contains a
            property that is not read-only.
    """
    body = create.body_parameter()
    if body is not None:
        return _body_schema(instance_path, root_path, body.schema_), False

    response = create.successful_response()
    if response is None:
        raise InvalidBodySchema(
            instance_path,
            f"resource root path '{root_path}' POST operation (without body "
            "parameter) is missing a successful 200, 201 or 202 response",
        )
    schema = response.schema_
    if schema is None or schema.ref is not None or not schema.properties:
        raise InvalidBodySchema(
            instance_path,
            f"resource root path '{root_path}' POST operation (without body "
            f"parameter) response '{response.status_code}' is missing the schema "
            "definition",
        )
    writable = sorted(name for name, prop in schema.properties.items() if not prop.read_only)
    if writable:
        raise InvalidBodySchema(
            instance_path,
            f"resource root path '{root_path}' POST operation (without body "
            "parameter) returns a schema with properties that are not read only: "
            f"{', '.join(writable)}",
        )
    return schema, True


def _body_schema(instance_path: str, root_path: str, schema: Optional[Schema]) -> Schema:
    if schema is None:
        raise InvalidBodySchema(
            instance_path,
            f"resource root path '{root_path}' POST body parameter is missing its schema",
        )
    if schema.ref is not None:
        raise InvalidBodySchema(
            instance_path,
            f"resource root path '{root_path}' POST body schema reference "
            f"'{schema.ref}' was not expanded",
        )
    if not schema.is_object():
        raise InvalidBodySchema(
            instance_path,
            f"resource root path '{root_path}' POST body schema is of type "
            f"'{schema.type}', expected 'object'",
        )
    if not schema.properties:
        raise InvalidBodySchema(
            instance_path,
            f"resource root path '{root_path}' POST body schema has no properties",
        )
    return schema


def find_identifier(instance_path: str, schema: Schema) -> str:
    """Return the name of the property that uniquely identifies an instance.

    A property flagged with ``x-terraform-id`` wins over one named ``id``.

    Raises:
        MissingIdentifier: If no property qualifies.
        DuplicateIdentifier: If more than one property is flagged.
    """
    flagged = sorted(
        name
        for name, prop in schema.properties.items()
        if lookup_bool(prop.extensions, Extension.IDENTIFIER)
    )
    if len(flagged) > 1:
        raise DuplicateIdentifier(
            instance_path,
            f"resource schema flags several properties with '{Extension.IDENTIFIER.value}': "
            f"{', '.join(flagged)}",
        )
    if flagged:
        return flagged[0]
    if IDENTIFIER_PROPERTY in schema.properties:
        return IDENTIFIER_PROPERTY
    raise MissingIdentifier(
        instance_path,
        "resource schema is missing a property that uniquely identifies the "
        f"resource, either a property named '{IDENTIFIER_PROPERTY}' or a property "
        f"with the extension '{Extension.IDENTIFIER.value}' set to true",
    )
