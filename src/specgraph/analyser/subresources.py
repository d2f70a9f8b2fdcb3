"""Link sub-resources to their parents and validate the parent chain.

A resource is a sub-resource when its root path nests under other
resources' instance paths, e.g.::

    /v1/cdns/{cdn_id}/v1/firewalls          (root)
    /v1/cdns/{cdn_id}/v1/firewalls/{id}     (instance)

Here ``/v1/cdns`` is the parent root path and ``/v1/cdns/{cdn_id}`` the
parent instance path. Every ancestor must be declared in the document and
must not be excluded, otherwise the sub-resource is dropped.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from specgraph.analyser.extensions import Extension, lookup_bool
from specgraph.analyser.paths import resource_name_from_path
from specgraph.exceptions import MissingOrIgnoredParentRootPath, MissingParentInstancePath
from specgraph.models import ParentResourceInfo, PathItem, SwaggerDocument

logger = logging.getLogger(__name__)

_PARENT_SEGMENT_RE = re.compile(r"(?P<root>(?:/[^/{}]+)+)/(?P<param>\{[^{}/]+\})")


def parent_info(root_path: str) -> Optional[ParentResourceInfo]:
    """Derive the ancestor chain encoded in *root_path*.

    Returns:
        The parent information, outermost parent first, or ``None`` when
        the resource is not nested.

    Example::

        >>> info = parent_info("/v1/cdns/{cdn_id}/v1/firewalls")
        >>> info.parent_root_paths, info.parent_instance_paths
        (['/v1/cdns'], ['/v1/cdns/{cdn_id}'])
        >>> info.parent_property_names
        ['cdns_v1_id']
    """
    root_paths: list[str] = []
    instance_paths: list[str] = []
    names: list[str] = []
    prefix = ""
    for match in _PARENT_SEGMENT_RE.finditer(root_path):
        parent_root = prefix + match.group("root")
        prefix = prefix + match.group(0)
        root_paths.append(parent_root)
        instance_paths.append(prefix)
        names.append(resource_name_from_path(parent_root))

    if not root_paths:
        return None
    return ParentResourceInfo(
        parent_root_paths=root_paths,
        parent_instance_paths=instance_paths,
        parent_names=names,
        parent_property_names=[f"{name}_id" for name in names],
        full_parent_name="_".join(names),
    )


def is_ignored(path_item: PathItem) -> bool:
    """True when the root path's POST is flagged with ``x-terraform-exclude-resource``."""
    if path_item.post is None:
        return False
    return lookup_bool(path_item.post.extensions, Extension.EXCLUDE_RESOURCE)


def validate_parents(
    instance_path: str, parent: Optional[ParentResourceInfo], document: SwaggerDocument
) -> None:
    """Check that every ancestor of a sub-resource exists and is not ignored.

    Args:
        instance_path: The sub-resource's instance path, used in errors.
        parent: The chain returned by :func:`parent_info`; ``None`` passes.
        document: The document the paths are looked up in.

    Raises:
        MissingParentInstancePath: An ancestor instance path is not declared.
        MissingOrIgnoredParentRootPath: An ancestor root path is not declared
            or is flagged as excluded.
    """
    if parent is None:
        return

    for parent_instance in parent.parent_instance_paths:
        if document.find_path(parent_instance) is None:
            raise MissingParentInstancePath(
                instance_path,
                f"subresource with path '{instance_path}' is missing parent path "
                f"instance definition '{parent_instance}'",
            )

    for parent_root in parent.parent_root_paths:
        parent_item = document.find_path(parent_root)
        if parent_item is None:
            raise MissingOrIgnoredParentRootPath(
                instance_path,
                f"subresource with path '{instance_path}' is missing parent root "
                f"path definition '{parent_root}'",
            )
        if is_ignored(parent_item):
            raise MissingOrIgnoredParentRootPath(
                instance_path,
                f"subresource with path '{instance_path}' contains a parent "
                f"'{parent_root}' that is marked as ignored, therefore ignoring "
                "the subresource too",
            )
    logger.debug(
        "subresource '%s' parent chain %s validated", instance_path, parent.parent_root_paths
    )
