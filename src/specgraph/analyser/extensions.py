"""Vendor extensions recognised by the analyser.

Behaviour that the Swagger format cannot express natively (which property
identifies a resource, which resources to skip, where a resource is hosted)
is driven by ``x-terraform-*`` vendor extensions. All of them are listed in
:class:`Extension`; validation code reads them exclusively through
:func:`lookup_extension` and its typed wrappers so that no module pokes at
raw extension dicts on its own.

Extension names are matched case-insensitively, mirroring how most Swagger
tooling normalises ``x-`` keys.
"""

from __future__ import annotations

import enum
from typing import Any, Mapping, Optional

RESOURCE_REGIONS_PREFIX = "x-terraform-resource-regions-"


class Extension(str, enum.Enum):
    """Every fixed extension name the analyser reacts to."""

    # property level
    IDENTIFIER = "x-terraform-id"
    FIELD_NAME = "x-terraform-field-name"
    IMMUTABLE = "x-terraform-immutable"
    FORCE_NEW = "x-terraform-force-new"
    SENSITIVE = "x-terraform-sensitive"
    # operation level
    EXCLUDE_RESOURCE = "x-terraform-exclude-resource"
    RESOURCE_NAME = "x-terraform-resource-name"
    RESOURCE_HOST = "x-terraform-resource-host"
    RESOURCE_TIMEOUT = "x-terraform-resource-timeout"
    # parameter level
    HEADER = "x-terraform-header"
    # security definition level
    AUTH_SCHEME_BEARER = "x-terraform-authentication-scheme-bearer"


def region_extension_name(keyword: str) -> str:
    """Return the root-level extension listing the regions for *keyword*.

    Example::

        >>> region_extension_name("region")
        'x-terraform-resource-regions-region'
    """
    return f"{RESOURCE_REGIONS_PREFIX}{keyword}"


def lookup_extension(
    extensions: Mapping[str, Any], name: Extension | str
) -> tuple[Any, bool]:
    """Look up an extension value.

    Args:
        extensions: The ``x-*`` map of a document, operation, schema,
            parameter or security definition.
        name: An :class:`Extension` member, or a dynamic name built by
            :func:`region_extension_name`.

    Returns:
        A ``(value, found)`` tuple; ``value`` is ``None`` when not found.
    """
    key = name.value if isinstance(name, Extension) else name
    key = key.lower()
    for ext_key, value in extensions.items():
        if ext_key.lower() == key:
            return value, True
    return None, False


def lookup_bool(extensions: Mapping[str, Any], name: Extension) -> bool:
    """Return True only when the extension is present and set to boolean true.

    ``"true"`` strings are accepted as well since YAML authors quote values
    more often than they should.
    """
    value, found = lookup_extension(extensions, name)
    if not found:
        return False
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return value is True


def lookup_str(extensions: Mapping[str, Any], name: Extension | str) -> Optional[str]:
    """Return the extension as a stripped, non-empty string, or ``None``."""
    value, found = lookup_extension(extensions, name)
    if not found or not isinstance(value, str):
        return None
    value = value.strip()
    return value or None
