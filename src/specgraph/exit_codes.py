"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to an error category and is referenced by the matching
:class:`~specgraph.exceptions.SpecgraphError` subclass, so shell scripts can
tell a broken document apart from a document that asserts something it
cannot honour.

Example::

    $ specgraph resources broken.yaml
    $ echo $?
    7   # EXIT_SPEC_PARSE_ERROR -- the document could not be loaded
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_SPEC_PARSE_ERROR = 7
"""The Swagger document could not be loaded, parsed or expanded."""

EXIT_ANALYSIS_ERROR = 8
"""The document loaded but carries a fatal inconsistency (security or regions)."""
