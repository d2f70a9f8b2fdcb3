"""Document-wide settings: backend location and configurable headers."""

from __future__ import annotations

from urllib.parse import urlparse

from specgraph.analyser.extensions import Extension, lookup_str
from specgraph.models import BackendConfiguration, HeaderParameter, ParameterLocation, SwaggerDocument

_PREFERRED_SCHEMES = ("https", "http")


def backend_configuration(document: SwaggerDocument) -> BackendConfiguration:
    """Work out where the API is served from.

    The ``host`` field wins; when it is missing and the document itself was
    fetched over HTTP(S), the document's own host is used instead. HTTPS is
    preferred whenever the document lists it (or lists no scheme at all).
    """
    host = document.host
    if not host and document.source and document.source.startswith(("http://", "https://")):
        host = urlparse(document.source).netloc or None

    schemes = [s.lower() for s in document.schemes]
    http_scheme = next((s for s in _PREFERRED_SCHEMES if s in schemes), "https")
    return BackendConfiguration(
        host=host,
        base_path=document.base_path or "/",
        http_scheme=http_scheme,
        schemes=schemes,
    )


def header_parameters(document: SwaggerDocument) -> list[HeaderParameter]:
    """Collect every operation header flagged with ``x-terraform-header``.

    The extension value is the name users configure the header under; the
    same header declared by several operations is reported once and is
    required if any operation requires it.
    """
    found: dict[tuple[str, str], bool] = {}
    for path in sorted(document.paths):
        for operation in document.paths[path].operations().values():
            for parameter in operation.parameters:
                if parameter.location != ParameterLocation.HEADER:
                    continue
                name = lookup_str(parameter.extensions, Extension.HEADER)
                if name is None:
                    continue
                key = (name, parameter.name)
                found[key] = found.get(key, False) or parameter.required
    return [
        HeaderParameter(name=name, header=header, required=required)
        for (name, header), required in sorted(found.items())
    ]
