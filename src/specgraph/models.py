"""Canonical Pydantic models shared across all specgraph modules.

This is the single source of truth for data shapes in the project. The models
fall into two groups:

**Document models** -- the typed, fully expanded view of a Swagger 2.0
document built by :func:`~specgraph.parser.document.build_document`:
    :class:`Schema`, :class:`ParameterLocation`, :class:`Parameter`,
    :class:`Response`, :class:`Operation`, :class:`PathItem`,
    :class:`SecurityDefinitionObject`, and :class:`SwaggerDocument`.

**Analysis output models** -- produced by
:class:`~specgraph.analyser.analyser.SpecAnalyser` and handed to downstream
collaborators:
    :class:`PathEntry`, :class:`PropertyDescriptor`, :class:`ResourceOperation`,
    :class:`ResourceOperations`, :class:`ParentResourceInfo`,
    :class:`ResourceDescriptor`, :class:`DataSourceDescriptor`,
    :class:`SecurityVariant`, :class:`SecurityDefinition`,
    :class:`GlobalSecurityScheme`, :class:`HeaderParameter`,
    :class:`BackendConfiguration`, :class:`Diagnostic`, and
    :class:`AnalysisResult`.

Every model is frozen: an analysis pass derives fresh instances from the
immutable input document and never mutates them afterwards.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

_FROZEN = ConfigDict(frozen=True)


# --- Analysis Config ---


class AnalysisConfig(BaseModel):
    """Settings for one analysis run.

    Resolved by :func:`~specgraph.config.resolve_config` from CLI flags,
    ``SPECGRAPH_*`` environment variables and the project file
    ``./specgraph.json``.

    Example::

        AnalysisConfig(include_prefix="/v1/", exclude_paths=["/v1/internal"])
    """

    log_level: str = Field(
        default="WARNING", description="Logging level: DEBUG, INFO, WARNING, ERROR"
    )
    output_format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )
    include_prefix: Optional[list[str] | str] = Field(
        default=None,
        description="Only analyse paths starting with this prefix (e.g. '/v1/' or ['/v1/', '/v2/'])",
    )
    exclude_paths: list[str] = Field(
        default_factory=list, description="Path templates never analysed"
    )

    def selects(self, path: str) -> bool:
        """Return True when *path* takes part in the analysis."""
        if path in self.exclude_paths:
            return False
        if self.include_prefix is None:
            return True
        prefixes = (
            [self.include_prefix]
            if isinstance(self.include_prefix, str)
            else self.include_prefix
        )
        return any(path.startswith(prefix) for prefix in prefixes)


# --- Document Models ---


class Schema(BaseModel):
    """A JSON Schema object as found in ``definitions`` or inline.

    Only the keywords the analyser reasons about are modelled. Vendor
    extensions (``x-*`` keys) are kept verbatim in ``extensions``. ``ref``
    is populated only when a ``$ref`` survived expansion, which the
    compliance validator treats as an invalid schema.
    """

    model_config = _FROZEN

    type: Optional[str] = None
    description: Optional[str] = None
    properties: dict[str, Schema] = Field(default_factory=dict)
    required: list[str] = Field(default_factory=list)
    read_only: bool = False
    items: Optional[Schema] = None
    ref: Optional[str] = None
    extensions: dict[str, Any] = Field(default_factory=dict)

    def is_object(self) -> bool:
        """Return True when the schema is an object (explicitly or by having properties)."""
        if self.type is not None:
            return self.type == "object"
        return bool(self.properties)


class ParameterLocation(str, enum.Enum):
    """Locations where a Swagger 2.0 parameter can appear (``in`` field)."""

    PATH = "path"
    QUERY = "query"
    HEADER = "header"
    BODY = "body"
    FORM_DATA = "formData"


class Parameter(BaseModel):
    """A single operation parameter.

    ``schema_`` is only set for ``body`` parameters; the others carry a
    primitive ``type`` instead.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    location: ParameterLocation
    required: bool = False
    type: Optional[str] = None
    schema_: Optional[Schema] = Field(default=None, alias="schema")
    extensions: dict[str, Any] = Field(default_factory=dict)


class Response(BaseModel):
    """A response declared for one HTTP status code."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    status_code: str
    description: Optional[str] = None
    schema_: Optional[Schema] = Field(default=None, alias="schema")


SUCCESSFUL_STATUS_CODES = ("200", "201", "202")


class Operation(BaseModel):
    """A Swagger *Operation Object* attached to one path + method."""

    model_config = _FROZEN

    operation_id: Optional[str] = None
    summary: Optional[str] = None
    parameters: list[Parameter] = Field(default_factory=list)
    responses: dict[str, Response] = Field(default_factory=dict)
    security: Optional[list[dict[str, list[str]]]] = Field(
        default=None, description="Operation-level security; None inherits the global list"
    )
    extensions: dict[str, Any] = Field(default_factory=dict)

    def body_parameter(self) -> Optional[Parameter]:
        """Return the first ``in: body`` parameter, if any."""
        for parameter in self.parameters:
            if parameter.location == ParameterLocation.BODY:
                return parameter
        return None

    def successful_response(self) -> Optional[Response]:
        """Return the first of the 200, 201 and 202 responses that is declared."""
        for status_code in SUCCESSFUL_STATUS_CODES:
            if status_code in self.responses:
                return self.responses[status_code]
        return None


class PathItem(BaseModel):
    """All operations declared under one path template."""

    model_config = _FROZEN

    get: Optional[Operation] = None
    post: Optional[Operation] = None
    put: Optional[Operation] = None
    patch: Optional[Operation] = None
    delete: Optional[Operation] = None
    parameters: list[Parameter] = Field(default_factory=list)

    def operations(self) -> dict[str, Operation]:
        """Return the declared operations keyed by lowercase HTTP method."""
        declared = {
            "get": self.get,
            "post": self.post,
            "put": self.put,
            "patch": self.patch,
            "delete": self.delete,
        }
        return {method: op for method, op in declared.items() if op is not None}


class SecurityDefinitionObject(BaseModel):
    """A raw entry of the document's ``securityDefinitions`` map."""

    model_config = _FROZEN

    type: str
    location: Optional[str] = None
    param_name: Optional[str] = None
    description: Optional[str] = None
    extensions: dict[str, Any] = Field(default_factory=dict)


class SwaggerDocument(BaseModel):
    """Typed, reference-expanded view of a Swagger 2.0 document.

    This is the document accessor every analyser component reads from. It
    never performs I/O; :func:`~specgraph.parser.document.load_document`
    takes care of loading and expansion before building it.
    """

    model_config = _FROZEN

    swagger: str = "2.0"
    title: Optional[str] = None
    version: Optional[str] = None
    host: Optional[str] = None
    base_path: Optional[str] = None
    schemes: list[str] = Field(default_factory=list)
    paths: dict[str, PathItem] = Field(default_factory=dict)
    definitions: dict[str, Schema] = Field(default_factory=dict)
    security_definitions: dict[str, SecurityDefinitionObject] = Field(
        default_factory=dict
    )
    security: list[dict[str, list[str]]] = Field(default_factory=list)
    extensions: dict[str, Any] = Field(default_factory=dict)
    source: Optional[str] = Field(
        default=None, description="File path or URL the document was loaded from"
    )

    def find_path(self, path: str) -> Optional[PathItem]:
        """Look up *path*, falling back to the same template with a trailing slash."""
        item = self.paths.get(path)
        if item is None:
            item = self.paths.get(path + "/")
        return item


# --- Analysis Output Models ---


class PathEntry(BaseModel):
    """A path template together with the operations it declares."""

    model_config = _FROZEN

    path: str
    operations: list[str] = Field(default_factory=list)
    instance: bool = False


class PropertyDescriptor(BaseModel):
    """One field of a resource or data-source payload."""

    model_config = _FROZEN

    name: str
    type: str = "string"
    description: Optional[str] = None
    required: bool = False
    read_only: bool = False
    identifier: bool = False
    immutable: bool = False
    force_new: bool = False
    sensitive: bool = False
    preferred_name: Optional[str] = None
    items_type: Optional[str] = None
    properties: list[PropertyDescriptor] = Field(default_factory=list)


class ResourceOperation(BaseModel):
    """One CRUD operation of a resource."""

    model_config = _FROZEN

    method: str
    path: str
    operation_id: Optional[str] = None
    timeout: Optional[float] = Field(default=None, description="Timeout in seconds")
    security: list[str] = Field(default_factory=list)
    header_parameters: list[str] = Field(default_factory=list)


class ResourceOperations(BaseModel):
    """The CRUD operations a resource supports; create and read are mandatory."""

    model_config = _FROZEN

    create: ResourceOperation
    read: ResourceOperation
    update: Optional[ResourceOperation] = None
    delete: Optional[ResourceOperation] = None

    def names(self) -> list[str]:
        """Return the declared operation names in CRUD order."""
        return [
            name
            for name in ("create", "read", "update", "delete")
            if getattr(self, name) is not None
        ]


class ParentResourceInfo(BaseModel):
    """The ancestor chain of a sub-resource, outermost parent first."""

    model_config = _FROZEN

    parent_root_paths: list[str] = Field(default_factory=list)
    parent_instance_paths: list[str] = Field(default_factory=list)
    parent_names: list[str] = Field(default_factory=list)
    parent_property_names: list[str] = Field(default_factory=list)
    full_parent_name: str = ""


class ResourceDescriptor(BaseModel):
    """A validated, manageable resource.

    Exactly one property carries ``identifier=True`` unless the resource is
    computed-only, in which case every property is read-only.
    """

    model_config = _FROZEN

    name: str
    root_path: str
    instance_path: str
    host: Optional[str] = None
    region: Optional[str] = None
    identifier: str
    properties: list[PropertyDescriptor] = Field(default_factory=list)
    operations: ResourceOperations
    parent: Optional[ParentResourceInfo] = None
    ignored: bool = False
    computed_only: bool = False

    @property
    def is_sub_resource(self) -> bool:
        """True when the resource is nested under at least one parent."""
        return self.parent is not None


class DataSourceDescriptor(BaseModel):
    """A read-only, list-returning endpoint."""

    model_config = _FROZEN

    name: str
    path: str
    host: Optional[str] = None
    properties: list[PropertyDescriptor] = Field(default_factory=list)
    read: ResourceOperation


class SecurityVariant(str, enum.Enum):
    """Where an apiKey credential travels and whether it is bearer-flavoured."""

    HEADER_API_KEY = "header_api_key"
    HEADER_BEARER = "header_bearer"
    QUERY_API_KEY = "query_api_key"
    QUERY_BEARER = "query_bearer"

    @property
    def location(self) -> str:
        return self.value.split("_", 1)[0]

    @property
    def is_bearer(self) -> bool:
        return self.value.endswith("_bearer")


class SecurityDefinition(BaseModel):
    """A supported authentication mechanism extracted from the document."""

    model_config = _FROZEN

    name: str
    parameter: str = Field(description="Header or query parameter carrying the credential")
    variant: SecurityVariant


class GlobalSecurityScheme(BaseModel):
    """A security definition the document requires by default."""

    model_config = _FROZEN

    name: str
    scopes: list[str] = Field(default_factory=list)


class HeaderParameter(BaseModel):
    """A header the API expects the caller to configure (``x-terraform-header``)."""

    model_config = _FROZEN

    name: str
    header: str
    required: bool = False


class BackendConfiguration(BaseModel):
    """Where the API lives: host, base path and preferred scheme."""

    model_config = _FROZEN

    host: Optional[str] = None
    base_path: str = "/"
    http_scheme: str = "https"
    schemes: list[str] = Field(default_factory=list)


class DiagnosticSubject(str, enum.Enum):
    """What kind of candidate a diagnostic refers to."""

    RESOURCE = "resource"
    DATA_SOURCE = "data_source"


class Diagnostic(BaseModel):
    """Why a candidate path was excluded from the result."""

    model_config = _FROZEN

    subject: DiagnosticSubject
    path: str
    kind: str
    message: str


class AnalysisResult(BaseModel):
    """Everything one analysis pass derives from a document."""

    model_config = _FROZEN

    resources: list[ResourceDescriptor] = Field(default_factory=list)
    data_sources: list[DataSourceDescriptor] = Field(default_factory=list)
    security_definitions: list[SecurityDefinition] = Field(default_factory=list)
    global_security: list[GlobalSecurityScheme] = Field(default_factory=list)
    header_parameters: list[HeaderParameter] = Field(default_factory=list)
    backend: BackendConfiguration = Field(default_factory=BackendConfiguration)
    diagnostics: list[Diagnostic] = Field(default_factory=list)

    def diagnostics_for(self, path: str) -> list[Diagnostic]:
        """Return the diagnostics recorded for *path*."""
        return [d for d in self.diagnostics if d.path == path]


Schema.model_rebuild()
PropertyDescriptor.model_rebuild()
