"""Tests for specgraph.analyser.paths."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from specgraph.analyser.paths import (
    find_root_path,
    instance_paths,
    is_instance_path,
    pair_paths,
    path_entries,
    resource_name_from_path,
    strip_instance_parameter,
)
from specgraph.exceptions import (
    AmbiguousRootPath,
    ComplianceError,
    NoMatchingRootPath,
    NotInstancePath,
)


class TestIsInstancePath:
    @pytest.mark.parametrize(
        "path",
        ["/v1/cdns/{id}", "/v1/cdns/{id}/", "/v1/cdns/{cdn_id}/v1/firewalls/{id}", "/{id}"],
    )
    def test_instance_paths(self, path: str) -> None:
        assert is_instance_path(path)

    @pytest.mark.parametrize(
        "path",
        ["/v1/cdns", "/v1/cdns/", "/v1/cdns/{id}/status", "/v1/cdns/{a}{b}", "/v1/cdns/id}"],
    )
    def test_not_instance_paths(self, path: str) -> None:
        assert not is_instance_path(path)


class TestStripInstanceParameter:
    def test_keeps_trailing_slash(self) -> None:
        assert strip_instance_parameter("/v1/cdns/{id}") == "/v1/cdns/"
        assert strip_instance_parameter("/v1/cdns/{id}/") == "/v1/cdns/"

    def test_not_instance(self) -> None:
        with pytest.raises(NotInstancePath):
            strip_instance_parameter("/v1/cdns")

    def test_consecutive_parameters_are_ambiguous(self) -> None:
        with pytest.raises(AmbiguousRootPath):
            strip_instance_parameter("/v1/cdns/{cdn_id}/{id}")

    def test_bare_root_is_ambiguous(self) -> None:
        with pytest.raises(AmbiguousRootPath):
            strip_instance_parameter("/{id}")


_SEGMENT = st.from_regex(r"[a-z][a-z0-9_]{0,8}", fullmatch=True)
_PARAM = _SEGMENT.map(lambda s: "{" + s + "}")


@given(
    static=st.lists(_SEGMENT, min_size=1, max_size=4),
    param=_PARAM,
    trailing=st.booleans(),
)
def test_derived_root_is_never_an_instance_path(static: list[str], param: str, trailing: bool) -> None:
    """Stripping the parameter of an instance path never yields another instance path."""
    instance = "/" + "/".join(static) + "/" + param + ("/" if trailing else "")
    assert is_instance_path(instance)
    root = strip_instance_parameter(instance)
    assert not is_instance_path(root)
    assert not is_instance_path(root.rstrip("/"))


class TestFindRootPath:
    def test_prefers_trailing_slash(self) -> None:
        paths = {"/v1/cdns/": {}, "/v1/cdns": {}}
        assert find_root_path("/v1/cdns/{id}", paths) == "/v1/cdns/"

    def test_falls_back_without_slash(self) -> None:
        assert find_root_path("/v1/cdns/{id}", {"/v1/cdns": {}}) == "/v1/cdns"

    def test_missing_root(self) -> None:
        with pytest.raises(NoMatchingRootPath) as exc_info:
            find_root_path("/v1/cdns/{id}", {"/v1/cdn": {}})
        assert exc_info.value.path == "/v1/cdns/{id}"
        assert exc_info.value.kind == "NoMatchingRootPath"


class TestPairPaths:
    def test_pairs_in_lexicographic_order(self) -> None:
        paths = {
            "/v1/zones": {}, "/v1/zones/{id}": {},
            "/v1/cdns": {}, "/v1/cdns/{id}": {},
            "/v1/orphans/{id}": {},
        }
        errors: list[ComplianceError] = []
        pairs = list(pair_paths(paths, errors))
        assert pairs == [("/v1/cdns", "/v1/cdns/{id}"), ("/v1/zones", "/v1/zones/{id}")]
        assert [type(e) for e in errors] == [NoMatchingRootPath]

    def test_selected_restricts_candidates_not_roots(self) -> None:
        paths = {"/v1/cdns": {}, "/v1/cdns/{id}": {}, "/v1/zones": {}, "/v1/zones/{id}": {}}
        errors: list[ComplianceError] = []
        pairs = list(pair_paths(paths, errors, selected=["/v1/cdns/{id}"]))
        assert pairs == [("/v1/cdns", "/v1/cdns/{id}")]
        assert errors == []

    def test_instance_paths_sorted(self) -> None:
        assert instance_paths(["/b/{id}", "/a", "/a/{id}"]) == ["/a/{id}", "/b/{id}"]


class TestResourceNameFromPath:
    @pytest.mark.parametrize(
        "root, expected",
        [
            ("/v1/cdns", "cdns_v1"),
            ("/v1/cdns/", "cdns_v1"),
            ("/cdns", "cdns"),
            ("/api/v2/users", "users_v2"),
            ("/v1/cdns/{cdn_id}/v2/firewalls", "firewalls_v2"),
            ("/v1/cdns/{cdn_id}/firewalls", "firewalls"),
        ],
    )
    def test_names(self, root: str, expected: str) -> None:
        assert resource_name_from_path(root) == expected

    def test_preferred_name_keeps_version(self) -> None:
        assert resource_name_from_path("/v1/cdns", "content_delivery") == "content_delivery_v1"


def test_path_entries_classify_every_path(cdn_document) -> None:
    entries = {e.path: e for e in path_entries(cdn_document)}
    assert list(entries) == sorted(cdn_document.paths)
    assert entries["/v1/cdns"].operations == ["get", "post"]
    assert not entries["/v1/cdns"].instance
    assert entries["/v1/cdns/{cdn_id}"].operations == ["get", "put", "delete"]
    assert entries["/v1/cdns/{cdn_id}"].instance
