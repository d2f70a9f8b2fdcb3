"""Tests for specgraph.analyser.security."""

from __future__ import annotations

from typing import Any, Callable

import pytest
from hypothesis import given
from hypothesis import strategies as st

from specgraph.analyser.security import (
    BEARER_PARAMETER,
    classify_security_definition,
    extract_security_definitions,
    partition_by_variant,
    requirement_names,
    resolve_global_security,
)
from specgraph.exceptions import UnresolvedGlobalSecurityScheme, UnsupportedSecurityLocation
from specgraph.exit_codes import EXIT_ANALYSIS_ERROR
from specgraph.models import (
    SecurityDefinition,
    SecurityDefinitionObject,
    SecurityVariant,
    SwaggerDocument,
)

DocumentFactory = Callable[..., SwaggerDocument]


class TestClassify:
    @pytest.mark.parametrize(
        "location, bearer, variant, parameter",
        [
            ("header", False, SecurityVariant.HEADER_API_KEY, "X-API-Key"),
            ("header", True, SecurityVariant.HEADER_BEARER, BEARER_PARAMETER),
            ("query", False, SecurityVariant.QUERY_API_KEY, "X-API-Key"),
            ("query", True, SecurityVariant.QUERY_BEARER, BEARER_PARAMETER),
        ],
    )
    def test_variants(
        self, location: str, bearer: bool, variant: SecurityVariant, parameter: str
    ) -> None:
        extensions: dict[str, Any] = (
            {"x-terraform-authentication-scheme-bearer": True} if bearer else {}
        )
        definition = SecurityDefinitionObject(
            type="apiKey", location=location, param_name="X-API-Key", extensions=extensions
        )
        result = classify_security_definition("auth", definition)
        assert result.variant == variant
        assert result.parameter == parameter
        assert result.variant.location == location
        assert result.variant.is_bearer is bearer

    def test_unsupported_location(self) -> None:
        definition = SecurityDefinitionObject(type="apiKey", location="cookie", param_name="s")
        with pytest.raises(UnsupportedSecurityLocation) as exc_info:
            classify_security_definition("cookie_auth", definition)
        assert exc_info.value.name == "cookie_auth"
        assert exc_info.value.exit_code == EXIT_ANALYSIS_ERROR


class TestExtract:
    def test_fixture_definitions(self, cdn_document: SwaggerDocument) -> None:
        definitions = extract_security_definitions(cdn_document)
        assert [(d.name, d.variant, d.parameter) for d in definitions] == [
            ("apikey_auth", SecurityVariant.HEADER_API_KEY, "X-API-Key"),
            ("query_auth", SecurityVariant.QUERY_API_KEY, "api_key"),
            ("token_auth", SecurityVariant.HEADER_BEARER, "Authorization"),
        ]

    def test_non_api_key_types_are_skipped(self, make_document: DocumentFactory) -> None:
        document = make_document(securityDefinitions={
            "basic": {"type": "basic"},
            "oauth": {"type": "oauth2", "flow": "implicit"},
        })
        assert extract_security_definitions(document) == []


class TestGlobalSecurity:
    def test_resolves_known_schemes(self, cdn_document: SwaggerDocument) -> None:
        definitions = extract_security_definitions(cdn_document)
        schemes = resolve_global_security(cdn_document, definitions)
        assert [s.name for s in schemes] == ["apikey_auth"]

    def test_unresolved_scheme_names_it(self, make_document: DocumentFactory) -> None:
        document = make_document(
            securityDefinitions={"apikey_auth": {"type": "apiKey", "in": "header", "name": "K"}},
            security=[{"token_auth": []}],
        )
        definitions = extract_security_definitions(document)
        with pytest.raises(UnresolvedGlobalSecurityScheme, match="token_auth") as exc_info:
            resolve_global_security(document, definitions)
        assert exc_info.value.name == "token_auth"

    def test_unsupported_type_in_global_list(self, make_document: DocumentFactory) -> None:
        document = make_document(
            securityDefinitions={"basic": {"type": "basic"}},
            security=[{"basic": []}],
        )
        with pytest.raises(UnresolvedGlobalSecurityScheme, match="basic"):
            resolve_global_security(document, extract_security_definitions(document))

    def test_duplicates_collapse_and_scopes_kept(self, make_document: DocumentFactory) -> None:
        document = make_document(
            securityDefinitions={"k": {"type": "apiKey", "in": "query", "name": "k"}},
            security=[{"k": ["read"]}, {"k": ["write"]}],
        )
        schemes = resolve_global_security(document, extract_security_definitions(document))
        assert len(schemes) == 1
        assert schemes[0].scopes == ["read"]


def test_requirement_names_keep_first_occurrence() -> None:
    assert requirement_names([{"b": []}, {"a": [], "b": []}]) == ["b", "a"]


@given(
    entries=st.lists(
        st.tuples(st.sampled_from(["header", "query"]), st.booleans()), max_size=12
    )
)
def test_partition_is_disjoint_and_complete(entries: list[tuple[str, bool]]) -> None:
    definitions = []
    for index, (location, bearer) in enumerate(entries):
        extensions = {"x-terraform-authentication-scheme-bearer": bearer}
        raw = SecurityDefinitionObject(
            type="apiKey", location=location, param_name="p", extensions=extensions
        )
        definitions.append(classify_security_definition(f"auth_{index}", raw))

    buckets = partition_by_variant(definitions)
    assert set(buckets) == set(SecurityVariant)
    seen: list[SecurityDefinition] = [d for bucket in buckets.values() for d in bucket]
    assert sorted(d.name for d in seen) == sorted(d.name for d in definitions)
    for variant, bucket in buckets.items():
        assert all(d.variant == variant for d in bucket)
