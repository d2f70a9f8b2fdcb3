"""Tests for specgraph.analyser.compliance."""

from __future__ import annotations

from typing import Any, Callable

import pytest
from hypothesis import given
from hypothesis import strategies as st

from specgraph.analyser.compliance import find_identifier, validate_resource
from specgraph.exceptions import (
    DuplicateIdentifier,
    InvalidBodySchema,
    MissingCreateOperation,
    MissingIdentifier,
    MissingReadOperation,
)
from specgraph.models import Schema, SwaggerDocument
from specgraph.parser import build_document

DocumentFactory = Callable[..., SwaggerDocument]


def _computed_only_paths(properties: dict[str, Any], status: str = "201") -> dict[str, Any]:
    schema = {"type": "object", "properties": properties}
    return {
        "/v1/tokens": {"post": {"responses": {status: {"description": "ok", "schema": schema}}}},
        "/v1/tokens/{id}": {"get": {"responses": {"200": {"description": "ok", "schema": schema}}}},
    }


class TestValidateResource:
    """The happy path and each rule's failure."""

    def test_compliant_pair(self, make_document: DocumentFactory, cdn_paths) -> None:
        document = make_document(paths=cdn_paths())
        candidate = validate_resource("/v1/cdns", "/v1/cdns/{id}", document)
        assert candidate.identifier == "id"
        assert candidate.computed_only is False
        assert sorted(candidate.schema.properties) == ["id", "label"]

    def test_missing_get(self, make_document: DocumentFactory, cdn_paths) -> None:
        paths = cdn_paths()
        paths["/v1/cdns/{id}"] = {"put": paths["/v1/cdns/{id}"]["get"]}
        with pytest.raises(MissingReadOperation) as exc_info:
            validate_resource("/v1/cdns", "/v1/cdns/{id}", make_document(paths=paths))
        assert exc_info.value.path == "/v1/cdns/{id}"

    def test_missing_post(self, make_document: DocumentFactory, cdn_paths) -> None:
        paths = cdn_paths()
        paths["/v1/cdns"] = {"get": {}}
        with pytest.raises(MissingCreateOperation, match="'/v1/cdns' missing required POST"):
            validate_resource("/v1/cdns", "/v1/cdns/{id}", make_document(paths=paths))

    def test_body_without_schema(self, make_document: DocumentFactory, cdn_paths) -> None:
        paths = cdn_paths()
        paths["/v1/cdns"]["post"]["parameters"] = [{"in": "body", "name": "body"}]
        with pytest.raises(InvalidBodySchema, match="missing its schema"):
            validate_resource("/v1/cdns", "/v1/cdns/{id}", make_document(paths=paths))

    def test_body_not_object(self, make_document: DocumentFactory, cdn_paths) -> None:
        paths = cdn_paths(schema={"type": "string"})
        with pytest.raises(InvalidBodySchema, match="expected 'object'"):
            validate_resource("/v1/cdns", "/v1/cdns/{id}", make_document(paths=paths))

    def test_body_without_properties(self, make_document: DocumentFactory, cdn_paths) -> None:
        paths = cdn_paths(schema={"type": "object"})
        with pytest.raises(InvalidBodySchema, match="no properties"):
            validate_resource("/v1/cdns", "/v1/cdns/{id}", make_document(paths=paths))

    def test_untyped_body_with_properties_is_object(self, make_document: DocumentFactory, cdn_paths) -> None:
        paths = cdn_paths(schema={"properties": {"id": {"type": "string"}}})
        candidate = validate_resource("/v1/cdns", "/v1/cdns/{id}", make_document(paths=paths))
        assert candidate.identifier == "id"


class TestComputedOnly:
    """POST without a body is accepted only when every response property is read-only."""

    def test_all_read_only_accepted(self, make_document: DocumentFactory) -> None:
        document = make_document(paths=_computed_only_paths({
            "id": {"type": "string", "readOnly": True},
            "value": {"type": "string", "readOnly": True},
        }))
        candidate = validate_resource("/v1/tokens", "/v1/tokens/{id}", document)
        assert candidate.computed_only is True
        assert candidate.identifier == "id"

    def test_writable_property_rejected(self, make_document: DocumentFactory) -> None:
        document = make_document(paths=_computed_only_paths({
            "id": {"type": "string", "readOnly": True},
            "value": {"type": "string"},
        }))
        with pytest.raises(InvalidBodySchema, match="not read only: value"):
            validate_resource("/v1/tokens", "/v1/tokens/{id}", document)

    def test_missing_success_response(self, make_document: DocumentFactory) -> None:
        paths = _computed_only_paths({"id": {"type": "string", "readOnly": True}}, status="204")
        with pytest.raises(InvalidBodySchema, match="missing a successful"):
            validate_resource("/v1/tokens", "/v1/tokens/{id}", make_document(paths=paths))

    def test_response_without_schema(self, make_document: DocumentFactory) -> None:
        paths = _computed_only_paths({})
        with pytest.raises(InvalidBodySchema, match="missing the schema"):
            validate_resource("/v1/tokens", "/v1/tokens/{id}", make_document(paths=paths))

    def test_still_requires_identifier(self, make_document: DocumentFactory) -> None:
        paths = _computed_only_paths({"value": {"type": "string", "readOnly": True}})
        with pytest.raises(MissingIdentifier):
            validate_resource("/v1/tokens", "/v1/tokens/{id}", make_document(paths=paths))


@given(
    flags=st.dictionaries(
        st.from_regex(r"[a-z]{1,8}", fullmatch=True), st.booleans(), min_size=1, max_size=6
    )
)
def test_computed_only_iff_every_property_read_only(flags: dict[str, bool]) -> None:
    properties = {name: {"type": "string", "readOnly": ro} for name, ro in flags.items()}
    properties["id"] = {"type": "string", "readOnly": True}
    document = build_document({"swagger": "2.0", "paths": _computed_only_paths(properties)})

    if all(p["readOnly"] for p in properties.values()):
        assert validate_resource("/v1/tokens", "/v1/tokens/{id}", document).computed_only
    else:
        with pytest.raises(InvalidBodySchema):
            validate_resource("/v1/tokens", "/v1/tokens/{id}", document)


class TestFindIdentifier:
    def test_named_id(self) -> None:
        schema = Schema(type="object", properties={"id": Schema(type="string")})
        assert find_identifier("/a/{id}", schema) == "id"

    def test_flag_wins_over_id(self) -> None:
        schema = Schema(
            type="object",
            properties={
                "id": Schema(type="string"),
                "uuid": Schema(type="string", extensions={"x-terraform-id": True}),
            },
        )
        assert find_identifier("/a/{id}", schema) == "uuid"

    def test_flag_is_case_insensitive(self) -> None:
        schema = Schema(properties={"key": Schema(extensions={"X-Terraform-Id": "true"})})
        assert find_identifier("/a/{id}", schema) == "key"

    def test_flag_false_is_ignored(self) -> None:
        schema = Schema(properties={"key": Schema(extensions={"x-terraform-id": False})})
        with pytest.raises(MissingIdentifier):
            find_identifier("/a/{id}", schema)

    def test_several_flags(self) -> None:
        schema = Schema(
            properties={
                "a": Schema(extensions={"x-terraform-id": True}),
                "b": Schema(extensions={"x-terraform-id": True}),
            }
        )
        with pytest.raises(DuplicateIdentifier, match="a, b"):
            find_identifier("/a/{id}", schema)
