"""Expand ``$ref`` JSON Reference pointers in Swagger documents.

Swagger documents use ``$ref`` pointers (``{"$ref": "#/definitions/CDN"}``)
to share schemas between operations. The analyser needs every schema fully
inlined, so this module performs a recursive deep-copy traversal replacing
each ``$ref`` with the object it points to.

Only **internal** references (those starting with ``#/``) are supported.
A reference cycle cannot be expanded into a finite tree and raises
:class:`~specgraph.exceptions.SpecParseError`: everything downstream
assumes a cycle-free document.

The single public function is :func:`resolve_refs`.
"""

from __future__ import annotations

import copy
from typing import Any

from specgraph.exceptions import SpecParseError


def resolve_refs(spec: dict[str, Any]) -> dict[str, Any]:
    """Return a deep copy of *spec* with every ``$ref`` replaced by its target.

    Sibling keys next to a ``$ref`` (for example ``readOnly`` or vendor
    extensions on a property that references a definition) are merged on
    top of the resolved target.

    Raises:
        SpecParseError: If a ``$ref`` is external, points to a missing
            location, or takes part in a reference cycle.

    Example::

        raw = load_spec("swagger.yaml")
        resolved = resolve_refs(raw)
        # resolved["paths"]["/v1/cdns"]["post"]["parameters"][0]["schema"]
        # now holds the inlined CDN definition.
    """
    root = copy.deepcopy(spec)
    return _deep_resolve(root, root, ())


def _resolve_ref(ref: str, root: dict[str, Any]) -> Any:
    """Resolve a single ``$ref`` string against the root document.

    Handles RFC 6901 JSON Pointer escaping (``~0`` for ``~``, ``~1`` for ``/``).
    """
    if not ref.startswith("#/"):
        raise SpecParseError(
            f"External $ref not supported: {ref}. "
            "Only internal references (#/...) are handled."
        )

    current: Any = root
    for segment in ref[2:].split("/"):
        segment = segment.replace("~1", "/").replace("~0", "~")

        if isinstance(current, dict):
            if segment not in current:
                raise SpecParseError(
                    f"Cannot resolve $ref '{ref}': key '{segment}' not found"
                )
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError) as exc:
                raise SpecParseError(
                    f"Cannot resolve $ref '{ref}': invalid array index '{segment}'"
                ) from exc
        else:
            raise SpecParseError(
                f"Cannot resolve $ref '{ref}': "
                f"cannot navigate into {type(current).__name__}"
            )

    return current


def _deep_resolve(obj: Any, root: dict[str, Any], stack: tuple[str, ...]) -> Any:
    """Recursively resolve all ``$ref`` pointers within *obj*.

    ``stack`` holds the references currently being expanded on this branch;
    meeting one of them again means the document is cyclic.
    """
    if isinstance(obj, dict):
        if "$ref" in obj and isinstance(obj["$ref"], str):
            ref = obj["$ref"]
            if ref in stack:
                chain = " -> ".join(stack + (ref,))
                raise SpecParseError(f"Circular $ref detected: {chain}")
            target = _deep_resolve(_resolve_ref(ref, root), root, stack + (ref,))
            siblings = {k: v for k, v in obj.items() if k != "$ref"}
            if not siblings or not isinstance(target, dict):
                return target
            merged = dict(target)
            merged.update(_deep_resolve(siblings, root, stack))
            return merged

        return {key: _deep_resolve(value, root, stack) for key, value in obj.items()}

    if isinstance(obj, list):
        return [_deep_resolve(item, root, stack) for item in obj]

    return obj
