"""specgraph -- Derive a validated resource graph from Swagger 2.0 documents.

This package reads a Swagger 2.0 (OpenAPI v2) document and works out which
endpoints describe manageable resources, how those resources nest, which
property identifies each instance, which resources must be expanded per
region, and which security schemes protect the API. The result is a strict
set of descriptors that downstream tooling (CRUD execution, schema
generation) can consume without touching the document again.

Typical workflow::

    specgraph resources openapi.yaml      # list compliant resources
    specgraph diagnostics openapi.yaml    # why was an endpoint skipped?

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models for the input document and the analysis output.
    config: Analysis configuration and precedence resolution.
    exceptions: Exception hierarchy split into hard and soft failures.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.3.0"
