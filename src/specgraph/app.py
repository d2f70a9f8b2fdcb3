"""Typer application and CLI entry point for specgraph.

This module wires together the top-level Typer application and registers the
inspect commands (``paths``, ``resources``, ``data-sources``, ``security``,
``diagnostics``, ``analyse``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs a SIGINT handler and invokes the Typer app.
Unhandled exceptions are written to a crash log under the data directory.

See Also:
    :mod:`specgraph.config`: Configuration resolution used by :func:`main_callback`.
    :mod:`specgraph.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from specgraph import __version__
from specgraph.commands.inspect import (
    analyse_command,
    data_sources_command,
    diagnostics_command,
    paths_command,
    resources_command,
    security_command,
)
from specgraph.exit_codes import EXIT_GENERIC_FAILURE

app = typer.Typer(
    name="specgraph",
    help="Derive a validated resource graph from Swagger 2.0 documents.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("paths")(paths_command)
app.command("resources")(resources_command)
app.command("data-sources")(data_sources_command)
app.command("security")(security_command)
app.command("diagnostics")(diagnostics_command)
app.command("analyse")(analyse_command)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"specgraph {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
    include_prefix: Optional[list[str]] = typer.Option(
        None,
        "--include-prefix",
        "-i",
        help="Only analyse paths starting with this prefix (repeatable).",
    ),
) -> None:
    """Root callback executed before every sub-command.

    Resolves the :class:`~specgraph.models.AnalysisConfig`, configures
    logging, initialises the global :class:`~specgraph.output.OutputManager`
    and stores the config in ``ctx.obj`` for the sub-commands.
    """
    from specgraph.config import configure_logging, resolve_config
    from specgraph.exceptions import ConfigError
    from specgraph.output import OutputFormat, OutputManager, error, set_output

    cli_format: Optional[str] = None
    if json_output:
        cli_format = OutputFormat.JSON.value
    elif plain_output:
        cli_format = OutputFormat.PLAIN.value

    cli_level: Optional[str] = None
    if verbose:
        cli_level = "DEBUG"
    elif quiet:
        cli_level = "ERROR"

    try:
        config = resolve_config(
            cli_log_level=cli_level,
            cli_format=cli_format,
            cli_include_prefix=include_prefix,
        )
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    configure_logging(config.log_level)
    set_output(
        OutputManager(
            format=OutputFormat(config.output_format),
            no_color=no_color,
            quiet=quiet,
        )
    )

    ctx.ensure_object(dict)
    ctx.obj["config"] = config


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log() -> str:
    """Write the current traceback to disk and return the log file path."""
    from specgraph.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``specgraph`` console script.

    :class:`~specgraph.exceptions.SpecgraphError` instances that escape a
    command cause a clean exit with the error's ``exit_code``. All other
    exceptions produce a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from specgraph.exceptions import SpecgraphError
        from specgraph.output import error

        if isinstance(exc, SpecgraphError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log()
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
