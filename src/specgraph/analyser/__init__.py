"""Resource analysis -- derive resources, data sources and security from a document.

This sub-package is the second half of the specgraph pipeline: it takes a
:class:`~specgraph.models.SwaggerDocument` and produces an
:class:`~specgraph.models.AnalysisResult`.

Typical usage::

    from specgraph.analyser import SpecAnalyser

    result = SpecAnalyser.from_source("swagger.yaml").analyse()

Sub-modules:

* :mod:`~specgraph.analyser.paths` -- instance/root path classification.
* :mod:`~specgraph.analyser.compliance` -- resource compliance rules.
* :mod:`~specgraph.analyser.resources` -- descriptor construction.
* :mod:`~specgraph.analyser.subresources` -- parent chain validation.
* :mod:`~specgraph.analyser.regions` -- multi-region expansion.
* :mod:`~specgraph.analyser.security` -- security definition extraction.
* :mod:`~specgraph.analyser.datasources` -- data-source classification.
* :mod:`~specgraph.analyser.backend` -- backend location and headers.
* :mod:`~specgraph.analyser.extensions` -- recognised vendor extensions.
"""

from specgraph.analyser.analyser import SpecAnalyser

__all__ = ["SpecAnalyser"]
