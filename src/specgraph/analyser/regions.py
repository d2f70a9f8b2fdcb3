"""Expand multi-region resources into one descriptor per region.

A resource is multi-region when the host override on its create operation
(``x-terraform-resource-host``) is parametrized with exactly one keyword,
for instance ``accounts.${region}.api.com``. The keyword picks a root-level
extension, ``x-terraform-resource-regions-<keyword>``, whose value lists the
regions as a comma-separated string::

    x-terraform-resource-regions-region: "us, eu"

A parametrized host obliges the document to declare its regions, so a
missing or unusable region list aborts the whole analysis pass.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Mapping, Optional

from specgraph.analyser.extensions import lookup_extension, region_extension_name
from specgraph.exceptions import EmptyRegionList, InvalidRegionList, MissingRegionExtension
from specgraph.models import ResourceDescriptor

logger = logging.getLogger(__name__)

_PLACEHOLDER_RE = re.compile(r"\$\{(?P<keyword>[^${}]+)\}")
_MULTI_REGION_HOST_RE = re.compile(r"^(?P<prefix>\S+)\$\{(?P<keyword>[^${}\s]+)\}(?P<suffix>\S+)$")


def region_keyword(host: Optional[str]) -> Optional[str]:
    """Return the region keyword of a parametrized host, or ``None``.

    Hosts without a placeholder, with more than one, or with the placeholder
    at either end are simply not multi-region.

    Example::

        >>> region_keyword("accounts.${region}.api.com")
        'region'
        >>> region_keyword("accounts.api.com") is None
        True
    """
    if not host or len(_PLACEHOLDER_RE.findall(host)) != 1:
        return None
    match = _MULTI_REGION_HOST_RE.match(host)
    if match is None:
        return None
    return match.group("keyword")


def substitute_region(host: str, region: str) -> str:
    """Replace the single ``${keyword}`` placeholder of *host* with *region*."""
    return _PLACEHOLDER_RE.sub(lambda _match: region, host, count=1)


def resolve_regions(keyword: str, extensions: Mapping[str, Any]) -> list[str]:
    """Read the regions declared for *keyword* at the document root.

    The extension value is a comma-separated string (a YAML list of strings
    is accepted too). Whitespace around each name is trimmed.

    Raises:
        MissingRegionExtension: The matching extension is not declared.
        EmptyRegionList: The extension holds no region at all.
        InvalidRegionList: A region name is blank or listed twice.
    """
    extension = region_extension_name(keyword)
    value, found = lookup_extension(extensions, extension)
    if not found:
        raise MissingRegionExtension(
            f"missing matching '{keyword}' root level region extension '{extension}'",
            keyword=keyword,
            extension=extension,
        )

    if isinstance(value, str):
        tokens = value.split(",")
    elif isinstance(value, list):
        tokens = [str(item) for item in value]
    else:
        tokens = []
    regions = [token.strip() for token in tokens]

    if not any(regions):
        raise EmptyRegionList(
            f"could not find any region for '{keyword}' matching region "
            f"extension {extension}: '{value}'",
            keyword=keyword,
            extension=extension,
        )
    if "" in regions:
        raise InvalidRegionList(
            f"region extension {extension} contains a blank region name: '{value}'",
            keyword=keyword,
            extension=extension,
        )
    duplicates = sorted({r for r in regions if regions.count(r) > 1})
    if duplicates:
        raise InvalidRegionList(
            f"region extension {extension} lists duplicated regions: "
            f"{', '.join(duplicates)}",
            keyword=keyword,
            extension=extension,
        )
    return regions


def multi_region_regions(
    host: Optional[str], extensions: Mapping[str, Any]
) -> Optional[list[str]]:
    """Return the regions of a multi-region host, or ``None`` if not multi-region.

    Raises:
        RegionError: See :func:`resolve_regions`.
    """
    keyword = region_keyword(host)
    if keyword is None:
        return None
    return resolve_regions(keyword, extensions)


def expand_regions(resource: ResourceDescriptor, regions: list[str]) -> list[ResourceDescriptor]:
    """Materialize one descriptor per region.

    Each copy keeps the schema and operations of *resource*, gets the
    region substituted into its host, and is named ``<name>_<region>``.
    """
    assert resource.host is not None
    expanded: list[ResourceDescriptor] = []
    for region in regions:
        regional = resource.model_copy(
            update={
                "name": f"{resource.name}_{region}",
                "host": substitute_region(resource.host, region),
                "region": region,
            }
        )
        logger.info(
            "multi region resource name = %s, region = '%s'", regional.name, region
        )
        expanded.append(regional)
    return expanded
