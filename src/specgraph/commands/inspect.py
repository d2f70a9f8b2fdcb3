"""Inspect commands -- report what the analyser derives from a document.

Every command takes a spec source (file path, URL or ``-`` for stdin), runs
the relevant part of :class:`~specgraph.analyser.SpecAnalyser` and presents
the result as a table (``paths``, ``resources``, ``data-sources``, ``security``,
``diagnostics``) or as one JSON document (``analyse``).
"""

from __future__ import annotations

from typing import Optional

import typer

from specgraph.analyser import SpecAnalyser
from specgraph.analyser.paths import path_entries
from specgraph.exceptions import SpecgraphError
from specgraph.models import AnalysisConfig
from specgraph.output import error, get_output, info

SOURCE_ARGUMENT = typer.Argument(..., help="Swagger 2.0 document: file path, URL or '-'.")


def _analyser(ctx: typer.Context, source: str) -> SpecAnalyser:
    """Load *source* with the config resolved by the root callback.

    Raises:
        typer.Exit: With the error's exit code when the document cannot be
            loaded.
    """
    config: Optional[AnalysisConfig] = (ctx.obj or {}).get("config")
    try:
        return SpecAnalyser.from_source(source, config)
    except SpecgraphError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def _fail(exc: SpecgraphError) -> typer.Exit:
    error(str(exc))
    return typer.Exit(code=exc.exit_code)


def paths_command(ctx: typer.Context, source: str = SOURCE_ARGUMENT) -> None:
    """List every declared path with its operations and classification.

    Example::

        specgraph paths swagger.yaml
    """
    analyser = _analyser(ctx, source)
    headers = ["Path", "Kind", "Operations"]
    rows = [
        [entry.path, "instance" if entry.instance else "collection", ",".join(entry.operations)]
        for entry in path_entries(analyser.document)
    ]
    get_output().print_table(headers, rows, title=f"Paths ({len(rows)})")


def resources_command(ctx: typer.Context, source: str = SOURCE_ARGUMENT) -> None:
    """List the compliant resources.

    Example::

        specgraph resources swagger.yaml
        specgraph --json resources https://api.example.com/swagger.json
    """
    analyser = _analyser(ctx, source)
    try:
        resources, diagnostics = analyser.resources()
    except SpecgraphError as exc:
        raise _fail(exc) from None

    headers = ["Name", "Root Path", "Instance Path", "Identifier", "Operations", "Parent", "Host"]
    rows: list[list[str]] = []
    for r in resources:
        rows.append([
            r.name + (" (ignored)" if r.ignored else ""),
            r.root_path,
            r.instance_path,
            r.identifier,
            ",".join(r.operations.names()),
            r.parent.full_parent_name if r.parent else "",
            r.host or "",
        ])
    get_output().print_table(headers, rows, title=f"Resources ({len(rows)})")
    if diagnostics:
        info(f"{len(diagnostics)} path(s) skipped; run 'specgraph diagnostics' for details.")


def data_sources_command(ctx: typer.Context, source: str = SOURCE_ARGUMENT) -> None:
    """List the list-returning endpoints usable as data sources."""
    data_sources, _ = _analyser(ctx, source).data_sources()

    headers = ["Name", "Path", "Properties"]
    rows = [
        [d.name, d.path, ", ".join(p.name for p in d.properties)]
        for d in data_sources
    ]
    get_output().print_table(headers, rows, title=f"Data Sources ({len(rows)})")


def security_command(ctx: typer.Context, source: str = SOURCE_ARGUMENT) -> None:
    """List the supported security definitions and mark the global ones."""
    analyser = _analyser(ctx, source)
    try:
        definitions, global_schemes = analyser.security()
    except SpecgraphError as exc:
        raise _fail(exc) from None

    global_names = {g.name for g in global_schemes}
    headers = ["Name", "Variant", "Parameter", "Global"]
    rows = [
        [d.name, d.variant.value, d.parameter, "Yes" if d.name in global_names else ""]
        for d in definitions
    ]
    get_output().print_table(headers, rows, title=f"Security Definitions ({len(rows)})")


def diagnostics_command(ctx: typer.Context, source: str = SOURCE_ARGUMENT) -> None:
    """Explain why candidate paths were left out of the result."""
    analyser = _analyser(ctx, source)
    try:
        _, resource_diagnostics = analyser.resources()
    except SpecgraphError as exc:
        raise _fail(exc) from None
    _, data_source_diagnostics = analyser.data_sources()

    headers = ["Subject", "Path", "Kind", "Message"]
    rows = [
        [d.subject.value, d.path, d.kind, d.message]
        for d in resource_diagnostics + data_source_diagnostics
    ]
    if not rows:
        info("No diagnostics: every candidate path is compliant.")
        return
    get_output().print_table(headers, rows, title=f"Diagnostics ({len(rows)})")


def analyse_command(ctx: typer.Context, source: str = SOURCE_ARGUMENT) -> None:
    """Run the full analysis and print the result as one JSON document."""
    analyser = _analyser(ctx, source)
    try:
        result = analyser.analyse()
    except SpecgraphError as exc:
        raise _fail(exc) from None
    get_output().print_document(result.model_dump(mode="json"))
