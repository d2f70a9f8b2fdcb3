"""Exception hierarchy for specgraph.

Errors fall into two tiers:

* **Hard errors** abort the whole analysis pass. They inherit from
  :class:`SpecParseError` (the document cannot be loaded) or
  :class:`AnalysisError` (the document asserts something it cannot honour,
  e.g. an unresolved global security scheme).
* **Soft errors** inherit from :class:`ComplianceError`. They are scoped to a
  single candidate path; :class:`~specgraph.analyser.analyser.SpecAnalyser`
  catches them, records a :class:`~specgraph.models.Diagnostic` and moves on
  to the next candidate.

Every exception carries a class-level ``exit_code`` taken from
:mod:`specgraph.exit_codes`. The CLI entry point catches
``SpecgraphError`` and exits with that code.

Subclass hierarchy::

    SpecgraphError (exit 1)
    +-- ConfigError         (exit 1)
    +-- SpecParseError      (exit 7)
    +-- AnalysisError       (exit 8)
    |   +-- SecurityError
    |   +-- RegionError
    +-- ComplianceError     (soft, per candidate)
        +-- DataSourceError
"""

from __future__ import annotations

from specgraph.exit_codes import (
    EXIT_ANALYSIS_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_SPEC_PARSE_ERROR,
)


class SpecgraphError(Exception):
    """Base exception for all specgraph errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigError(SpecgraphError):
    """Raised for configuration problems (invalid project file, bad values)."""

    exit_code = EXIT_GENERIC_FAILURE


class SpecParseError(SpecgraphError):
    """Raised when the document cannot be loaded, parsed or fully expanded."""

    exit_code = EXIT_SPEC_PARSE_ERROR


# --- Hard analysis errors ---


class AnalysisError(SpecgraphError):
    """Base class for errors that abort the whole analysis pass."""

    exit_code = EXIT_ANALYSIS_ERROR


class SecurityError(AnalysisError):
    """The document's security section cannot be honoured."""


class UnsupportedSecurityLocation(SecurityError):
    """An ``apiKey`` security definition lives somewhere other than header or query."""

    def __init__(self, name: str, location: str | None):
        super().__init__(
            f"apiKey security definition '{name}' uses location '{location}'; "
            "only 'header' and 'query' are supported"
        )
        self.name = name
        self.location = location


class UnresolvedGlobalSecurityScheme(SecurityError):
    """A global security requirement names an unknown or non-apiKey definition."""

    def __init__(self, name: str):
        super().__init__(
            f"global security scheme '{name}' not found or not matching "
            "a supported 'apiKey' security definition"
        )
        self.name = name


class RegionError(AnalysisError):
    """A multi-region host is declared without a usable region list."""

    def __init__(self, message: str, keyword: str, extension: str):
        super().__init__(message)
        self.keyword = keyword
        self.extension = extension


class MissingRegionExtension(RegionError):
    """The ``x-terraform-resource-regions-<keyword>`` extension is absent."""


class EmptyRegionList(RegionError):
    """The region extension is present but lists no region."""


class InvalidRegionList(RegionError):
    """The region extension contains blank or duplicated region names."""


# --- Soft, per-candidate errors ---


class ComplianceError(SpecgraphError):
    """A single candidate path failed validation and is excluded.

    Args:
        path: The path template the failure applies to.
        message: Human-readable reason.
    """

    def __init__(self, path: str, message: str):
        super().__init__(message)
        self.path = path

    @property
    def kind(self) -> str:
        """Stable failure kind used in diagnostics (the class name)."""
        return type(self).__name__


class NotInstancePath(ComplianceError):
    """The path does not end with a single ``{parameter}`` segment."""


class NoMatchingRootPath(ComplianceError):
    """Neither ``<root>/`` nor ``<root>`` exists for an instance path."""


class AmbiguousRootPath(ComplianceError):
    """Stripping the trailing parameter leaves another instance path."""


class MissingReadOperation(ComplianceError):
    """The instance path declares no GET operation."""


class MissingCreateOperation(ComplianceError):
    """The root path declares no POST operation."""


class InvalidBodySchema(ComplianceError):
    """The POST payload (or computed-only response) schema is unusable."""


class MissingIdentifier(ComplianceError):
    """No property named ``id`` and none flagged with ``x-terraform-id``."""


class DuplicateIdentifier(ComplianceError):
    """More than one property is flagged with ``x-terraform-id``."""


class InvalidTimeout(ComplianceError):
    """An ``x-terraform-resource-timeout`` value cannot be parsed."""


class DuplicateResource(ComplianceError):
    """Another instance path already produced a resource with the same name."""


class MissingParentInstancePath(ComplianceError):
    """A sub-resource's ancestor instance path is not declared."""


class MissingOrIgnoredParentRootPath(ComplianceError):
    """A sub-resource's ancestor root path is absent or excluded."""


class DataSourceError(ComplianceError):
    """Base class for data-source classification failures."""


class MissingDataSourceReadOperation(DataSourceError):
    """The path declares no GET operation."""


class MissingSuccessResponse(DataSourceError):
    """The GET operation has no 200 response."""


class MissingResponseSchema(DataSourceError):
    """The 200 response declares no schema."""


class NonArrayResponse(DataSourceError):
    """The 200 response schema is not an array."""


class InvalidItemsSchema(DataSourceError):
    """The array items are missing or not an object schema."""


class EmptyItemsSchema(DataSourceError):
    """The array item object declares no properties."""


class DuplicateDataSource(DataSourceError):
    """Another path already produced a data source with the same name."""
