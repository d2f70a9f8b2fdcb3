"""Built-in CLI commands for specgraph."""
