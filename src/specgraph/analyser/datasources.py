"""Classify read-only, list-returning endpoints as data sources.

A path is a data source when its GET operation answers 200 with an array of
objects that declare at least one property::

    /v1/cdns:
      get:
        responses:
          200:
            schema:
              type: array
              items:
                $ref: "#/definitions/CDN"
"""

from __future__ import annotations

from specgraph.exceptions import (
    EmptyItemsSchema,
    InvalidItemsSchema,
    MissingDataSourceReadOperation,
    MissingResponseSchema,
    MissingSuccessResponse,
    NonArrayResponse,
)
from specgraph.models import PathItem, Schema


def validate_data_source(path: str, path_item: PathItem) -> Schema:
    """Return the item schema of a data-source compliant path.

    Raises:
        MissingDataSourceReadOperation: No GET operation.
        MissingSuccessResponse: The GET has no 200 response.
        MissingResponseSchema: The 200 response has no schema.
        NonArrayResponse: The response schema is not an array.
        InvalidItemsSchema: The array items are missing or not objects.
        EmptyItemsSchema: The item object has no properties.
    """
    if path_item.get is None:
        raise MissingDataSourceReadOperation(path, "missing get operation")

    response = path_item.get.responses.get("200")
    if response is None:
        raise MissingSuccessResponse(path, "missing get 200 OK response specification")

    schema = response.schema_
    if schema is None:
        raise MissingResponseSchema(path, "missing response schema")
    if schema.type != "array":
        raise NonArrayResponse(path, "response does not return an array of items")

    items = schema.items
    if items is None or items.type != "object":
        raise InvalidItemsSchema(
            path, "the response items schema is missing or not defined as an object"
        )
    if not items.properties:
        raise EmptyItemsSchema(path, "the response items object has no properties")
    return items
