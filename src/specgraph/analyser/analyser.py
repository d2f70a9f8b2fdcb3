"""Run a full analysis pass over a Swagger document.

:class:`SpecAnalyser` wires the individual components together::

    paths -> pair_paths -> validate_resource -> build_resource
          -> validate_parents -> (expand_regions) -> resources
    paths -> validate_data_source -> build_data_source -> data sources
    securityDefinitions + security -> security definitions + global schemes

Per-candidate failures (:class:`~specgraph.exceptions.ComplianceError`)
never stop the pass: they become :class:`~specgraph.models.Diagnostic`
records and the candidate is left out. Hard failures
(:class:`~specgraph.exceptions.AnalysisError`) propagate to the caller.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from specgraph.analyser.backend import backend_configuration, header_parameters
from specgraph.analyser.compliance import validate_resource
from specgraph.analyser.datasources import validate_data_source
from specgraph.analyser.paths import pair_paths
from specgraph.analyser.regions import expand_regions, multi_region_regions
from specgraph.analyser.resources import build_data_source, build_resource
from specgraph.analyser.security import extract_security_definitions, resolve_global_security
from specgraph.analyser.subresources import validate_parents
from specgraph.exceptions import ComplianceError, DuplicateDataSource, DuplicateResource
from specgraph.models import (
    AnalysisConfig,
    AnalysisResult,
    DataSourceDescriptor,
    Diagnostic,
    DiagnosticSubject,
    GlobalSecurityScheme,
    ResourceDescriptor,
    SecurityDefinition,
    SwaggerDocument,
)
from specgraph.parser.document import load_document

logger = logging.getLogger(__name__)


def _diagnostic(subject: DiagnosticSubject, exc: ComplianceError) -> Diagnostic:
    return Diagnostic(subject=subject, path=exc.path, kind=exc.kind, message=str(exc))


class SpecAnalyser:
    """Derive resources, data sources and security from one document.

    The analyser never mutates the document, and every method recomputes its
    result from scratch, so calling a method twice yields identical output.

    Args:
        document: The expanded document to analyse.
        config: Optional path selection; every path is analysed by default.

    Example::

        analyser = SpecAnalyser.from_source("swagger.yaml")
        result = analyser.analyse()
        for resource in result.resources:
            print(resource.name, resource.instance_path)
    """

    def __init__(self, document: SwaggerDocument, config: Optional[AnalysisConfig] = None):
        self.document = document
        self.config = config or AnalysisConfig()

    @classmethod
    def from_source(cls, source: str, config: Optional[AnalysisConfig] = None) -> SpecAnalyser:
        """Load *source* (file, URL or ``-``) and build an analyser for it.

        Raises:
            SpecParseError: If the document cannot be loaded or expanded.
        """
        return cls(load_document(source), config)

    def _selected_paths(self) -> list[str]:
        return sorted(p for p in self.document.paths if self.config.selects(p))

    # ------------------------------------------------------------------ #
    # Resources
    # ------------------------------------------------------------------ #

    def resources(self) -> tuple[list[ResourceDescriptor], list[Diagnostic]]:
        """Return the compliant resources and the diagnostics of rejected paths.

        Raises:
            RegionError: A multi-region host has no usable region list.
        """
        start = time.monotonic()
        errors: list[ComplianceError] = []
        resources: list[ResourceDescriptor] = []
        names: set[str] = set()

        for root_path, instance_path in pair_paths(
            self.document.paths, errors, self._selected_paths()
        ):
            try:
                produced = self._resource(root_path, instance_path)
            except ComplianceError as exc:
                logger.debug("resource path '%s' not compliant: %s", instance_path, exc)
                errors.append(exc)
                continue

            clash = sorted(r.name for r in produced if r.name in names)
            if clash:
                exc = DuplicateResource(
                    instance_path,
                    f"resource name '{clash[0]}' derived from '{root_path}' is "
                    "already used by another resource",
                )
                logger.warning("ignoring resource '%s': %s", instance_path, exc)
                errors.append(exc)
                continue

            for resource in produced:
                logger.info(
                    "found compliant resource [name='%s', rootPath='%s', instancePath='%s']",
                    resource.name,
                    resource.root_path,
                    resource.instance_path,
                )
                names.add(resource.name)
            resources.extend(produced)

        logger.info(
            "found %d compliant resources (time: %.3fs)",
            len(resources),
            time.monotonic() - start,
        )
        return resources, [_diagnostic(DiagnosticSubject.RESOURCE, e) for e in errors]

    def _resource(self, root_path: str, instance_path: str) -> list[ResourceDescriptor]:
        candidate = validate_resource(root_path, instance_path, self.document)
        resource = build_resource(candidate, self.document)
        try:
            validate_parents(instance_path, resource.parent, self.document)
        except ComplianceError as exc:
            logger.warning(
                "ignoring subresource name='%s' with rootPath='%s' due to not meeting "
                "validation requirements: %s",
                resource.name,
                root_path,
                exc,
            )
            raise

        regions = multi_region_regions(resource.host, self.document.extensions)
        if regions is None:
            return [resource]
        logger.info(
            "resource '%s' is configured with host override AND multi region; "
            "creating one resource per region",
            root_path,
        )
        return expand_regions(resource, regions)

    # ------------------------------------------------------------------ #
    # Data sources
    # ------------------------------------------------------------------ #

    def data_sources(self) -> tuple[list[DataSourceDescriptor], list[Diagnostic]]:
        """Return the list-returning endpoints usable as data sources."""
        data_sources: list[DataSourceDescriptor] = []
        diagnostics: list[Diagnostic] = []
        names: set[str] = set()
        for path in self._selected_paths():
            path_item = self.document.paths[path]
            try:
                items = validate_data_source(path, path_item)
                data_source = build_data_source(path, path_item, items, self.document)
            except ComplianceError as exc:
                logger.debug("path '%s' not data source compliant: %s", path, exc)
                diagnostics.append(_diagnostic(DiagnosticSubject.DATA_SOURCE, exc))
                continue
            if data_source.name in names:
                exc = DuplicateDataSource(
                    path,
                    f"data source name '{data_source.name}' derived from '{path}' is "
                    "already used by another data source",
                )
                logger.warning("ignoring data source '%s': %s", path, exc)
                diagnostics.append(_diagnostic(DiagnosticSubject.DATA_SOURCE, exc))
                continue
            names.add(data_source.name)
            logger.info(
                "found compliant data source [name='%s', path='%s']", data_source.name, path
            )
            data_sources.append(data_source)
        return data_sources, diagnostics

    # ------------------------------------------------------------------ #
    # Security
    # ------------------------------------------------------------------ #

    def security(self) -> tuple[list[SecurityDefinition], list[GlobalSecurityScheme]]:
        """Return the supported security definitions and the resolved global schemes.

        Raises:
            UnsupportedSecurityLocation: An apiKey definition is neither in a
                header nor in a query parameter.
            UnresolvedGlobalSecurityScheme: The global security list names an
                unknown definition.
        """
        definitions = extract_security_definitions(self.document)
        return definitions, resolve_global_security(self.document, definitions)

    # ------------------------------------------------------------------ #
    # Full pass
    # ------------------------------------------------------------------ #

    def analyse(self) -> AnalysisResult:
        """Run every component and collect the results.

        Raises:
            AnalysisError: On any hard failure; no partial result is returned.
        """
        definitions, global_security = self.security()
        resources, resource_diagnostics = self.resources()
        data_sources, data_source_diagnostics = self.data_sources()
        return AnalysisResult(
            resources=resources,
            data_sources=data_sources,
            security_definitions=definitions,
            global_security=global_security,
            header_parameters=header_parameters(self.document),
            backend=backend_configuration(self.document),
            diagnostics=resource_diagnostics + data_source_diagnostics,
        )
