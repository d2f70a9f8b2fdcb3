"""Extract the supported authentication schemes from a Swagger document.

Only ``apiKey`` security definitions are supported, carried either in a
header or in a query parameter. Each one is further split into a *plain* and
a *bearer* flavour depending on the
``x-terraform-authentication-scheme-bearer`` extension, which gives four
variants (see :class:`~specgraph.models.SecurityVariant`)::

    securityDefinitions:
      apikey_auth:
        type: apiKey
        in: header
        name: X-API-Key             # plain: credential sent in X-API-Key
      token_auth:
        type: apiKey
        in: header
        name: Authorization
        x-terraform-authentication-scheme-bearer: true

Other definition types (``basic``, ``oauth2``) are ignored. The document's
top-level ``security`` list must only reference supported definitions.
"""

from __future__ import annotations

import logging

from specgraph.analyser.extensions import Extension, lookup_bool
from specgraph.exceptions import UnresolvedGlobalSecurityScheme, UnsupportedSecurityLocation
from specgraph.models import (
    GlobalSecurityScheme,
    SecurityDefinition,
    SecurityDefinitionObject,
    SecurityVariant,
    SwaggerDocument,
)

logger = logging.getLogger(__name__)

API_KEY_TYPE = "apiKey"
BEARER_PARAMETER = "Authorization"

_VARIANTS = {
    ("header", False): SecurityVariant.HEADER_API_KEY,
    ("header", True): SecurityVariant.HEADER_BEARER,
    ("query", False): SecurityVariant.QUERY_API_KEY,
    ("query", True): SecurityVariant.QUERY_BEARER,
}


def classify_security_definition(
    name: str, definition: SecurityDefinitionObject
) -> SecurityDefinition:
    """Map one apiKey definition onto its variant.

    Raises:
        UnsupportedSecurityLocation: If the definition is neither in a
            header nor in a query parameter.
    """
    bearer = lookup_bool(definition.extensions, Extension.AUTH_SCHEME_BEARER)
    variant = _VARIANTS.get((definition.location or "", bearer))
    if variant is None:
        raise UnsupportedSecurityLocation(name, definition.location)

    parameter = BEARER_PARAMETER if bearer else definition.param_name or ""
    return SecurityDefinition(name=name, parameter=parameter, variant=variant)


def extract_security_definitions(document: SwaggerDocument) -> list[SecurityDefinition]:
    """Return the supported apiKey definitions, sorted by name.

    Raises:
        UnsupportedSecurityLocation: See :func:`classify_security_definition`.
    """
    definitions: list[SecurityDefinition] = []
    for name in sorted(document.security_definitions):
        definition = document.security_definitions[name]
        if definition.type != API_KEY_TYPE:
            logger.debug(
                "ignoring security definition '%s' of unsupported type '%s'",
                name,
                definition.type,
            )
            continue
        definitions.append(classify_security_definition(name, definition))
    return definitions


def requirement_names(requirements: list[dict[str, list[str]]]) -> list[str]:
    """Flatten a security requirement list into ordered, unique scheme names."""
    names: list[str] = []
    for requirement in requirements:
        for name in requirement:
            if name not in names:
                names.append(name)
    return names


def resolve_global_security(
    document: SwaggerDocument, definitions: list[SecurityDefinition]
) -> list[GlobalSecurityScheme]:
    """Resolve the document's top-level ``security`` list.

    Args:
        document: The document whose ``security`` list is resolved.
        definitions: The output of :func:`extract_security_definitions`.

    Raises:
        UnresolvedGlobalSecurityScheme: If a required scheme does not match
            any supported definition.
    """
    known = {definition.name for definition in definitions}
    schemes: list[GlobalSecurityScheme] = []
    for requirement in document.security:
        for name, scopes in requirement.items():
            if name not in known:
                raise UnresolvedGlobalSecurityScheme(name)
            if any(s.name == name for s in schemes):
                continue
            schemes.append(GlobalSecurityScheme(name=name, scopes=list(scopes or [])))
    return schemes


def partition_by_variant(
    definitions: list[SecurityDefinition],
) -> dict[SecurityVariant, list[SecurityDefinition]]:
    """Group definitions into the four variant buckets (empty buckets included)."""
    buckets: dict[SecurityVariant, list[SecurityDefinition]] = {
        variant: [] for variant in SecurityVariant
    }
    for definition in definitions:
        buckets[definition.variant].append(definition)
    return buckets
