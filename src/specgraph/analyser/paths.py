"""Classify path templates into instance and root (collection) paths.

An *instance path* ends with exactly one bracketed parameter segment and an
optional trailing slash, e.g. ``/v1/cdns/{id}`` or ``/v1/cdns/{id}/``. Its
*root path* is what remains once that segment is stripped; the document may
declare it with or without a trailing slash (``/v1/cdns/`` is tried before
``/v1/cdns``).
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Iterator, Mapping, Optional

from specgraph.exceptions import (
    AmbiguousRootPath,
    ComplianceError,
    NoMatchingRootPath,
    NotInstancePath,
)
from specgraph.models import PathEntry, SwaggerDocument

logger = logging.getLogger(__name__)

_INSTANCE_PATH_RE = re.compile(r"^(?P<root>.*/)\{[^{}/]+\}/?$")


def is_instance_path(path: str) -> bool:
    """Return True if *path* ends with a single ``{parameter}`` segment."""
    return _INSTANCE_PATH_RE.match(path) is not None


def strip_instance_parameter(instance_path: str) -> str:
    """Return the root candidate of *instance_path*, trailing slash included.

    Example::

        >>> strip_instance_parameter("/v1/cdns/{id}")
        '/v1/cdns/'

    Raises:
        NotInstancePath: If *instance_path* is not an instance path.
        AmbiguousRootPath: If the stripped root is itself an instance path
            (``/v1/cdns/{cdn_id}/{id}``), so collection and instance cannot
            be told apart, or when nothing but ``/`` is left to name the
            collection.
    """
    match = _INSTANCE_PATH_RE.match(instance_path)
    if match is None:
        raise NotInstancePath(
            instance_path, f"path '{instance_path}' is not a resource instance path"
        )
    root = match.group("root")
    if root == "/" or is_instance_path(root.rstrip("/")):
        raise AmbiguousRootPath(
            instance_path,
            f"resource instance path '{instance_path}' does not resolve to a "
            f"unique collection path (stripped root '{root}')",
        )
    return root


def find_root_path(instance_path: str, paths: Mapping[str, object]) -> str:
    """Find the root path the document declares for *instance_path*.

    Raises:
        NotInstancePath: See :func:`strip_instance_parameter`.
        AmbiguousRootPath: See :func:`strip_instance_parameter`.
        NoMatchingRootPath: If neither ``<root>/`` nor ``<root>`` is declared.
    """
    root = strip_instance_parameter(instance_path)
    if root in paths:
        logger.debug("found resource root path with trailing '/' - %s", root)
        return root

    root = root.rstrip("/")
    if root in paths:
        logger.debug("found resource root path without trailing '/' - %s", root)
        return root

    raise NoMatchingRootPath(
        instance_path,
        f"resource instance path '{instance_path}' missing resource root path",
    )


def instance_paths(paths: Iterable[str]) -> list[str]:
    """Return the instance paths among *paths* in lexicographic order."""
    return sorted(p for p in paths if is_instance_path(p))


def path_entries(document: SwaggerDocument) -> list[PathEntry]:
    """Classify every declared path, in lexicographic order."""
    return [
        PathEntry(
            path=path,
            operations=list(document.paths[path].operations()),
            instance=is_instance_path(path),
        )
        for path in sorted(document.paths)
    ]


def pair_paths(
    paths: Mapping[str, object],
    errors: list[ComplianceError],
    selected: Optional[Iterable[str]] = None,
) -> Iterator[tuple[str, str]]:
    """Yield ``(root_path, instance_path)`` pairs in lexicographic order.

    Args:
        paths: Every path the document declares; roots are looked up here.
        errors: Instance paths without a usable root are appended here and
            skipped. Non-instance paths are not candidates and are ignored.
        selected: Restrict the candidates to these paths (all by default).
    """
    for instance_path in instance_paths(paths if selected is None else selected):
        try:
            root_path = find_root_path(instance_path, paths)
        except ComplianceError as exc:
            errors.append(exc)
            continue
        yield root_path, instance_path


_VERSION_SEGMENT_RE = re.compile(r"^v\d+$")


def resource_name_from_path(root_path: str, preferred_name: str | None = None) -> str:
    """Derive a resource name from the last static section of a root path.

    The name is the final segment (or *preferred_name* when given). A version
    segment such as ``v1`` preceding it in the same section is appended, so
    two versions of one collection never collide.

    Example::

        >>> resource_name_from_path("/v1/cdns")
        'cdns_v1'
        >>> resource_name_from_path("/v1/cdns/{cdn_id}/v2/firewalls")
        'firewalls_v2'
    """
    own_section = root_path.rsplit("}", 1)[-1]
    segments = [s for s in own_section.split("/") if s]
    if not segments:
        return preferred_name or ""
    name = preferred_name or segments[-1]
    versions = [s for s in segments[:-1] if _VERSION_SEGMENT_RE.match(s)]
    if versions:
        return f"{name}_{versions[-1]}"
    return name
