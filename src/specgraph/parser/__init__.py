"""Swagger document parser -- load, expand ``$ref`` pointers, and type the result.

This sub-package is the document accessor the analyser reads from. It turns
a raw Swagger 2.0 document (JSON or YAML, local file or remote URL) into a
:class:`~specgraph.models.SwaggerDocument`.

Typical usage::

    from specgraph.parser import load_document

    document = load_document("https://api.example.com/swagger.yaml")

Sub-modules:

* :mod:`~specgraph.parser.loader` -- I/O layer (URL, file, stdin) plus format
  detection and Swagger version validation.
* :mod:`~specgraph.parser.resolver` -- Recursive ``$ref`` expansion that
  rejects reference cycles.
* :mod:`~specgraph.parser.document` -- Builds the typed document models.
"""

from specgraph.parser.document import build_document, load_document
from specgraph.parser.loader import load_spec, validate_swagger_version
from specgraph.parser.resolver import resolve_refs

__all__ = [
    "build_document",
    "load_document",
    "load_spec",
    "resolve_refs",
    "validate_swagger_version",
]
