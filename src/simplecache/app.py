"""Typer application and CLI entry point for simplecache.

The ``simplecache`` command inspects and maintains a cache tree from the
shell: read an entry back, clear one address or the whole tree, and show
statistics or the resolved settings.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. :class:`~simplecache.exceptions.SimpleCacheError`
instances are reported on stderr and mapped to their exit codes.
"""

from __future__ import annotations

import signal
import sys
from typing import Any, Optional

import typer

from simplecache import __version__
from simplecache.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="simplecache",
    help="Inspect and maintain a file-backed response cache.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"simplecache {__version__}")
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
    directory: Optional[str] = typer.Option(
        None, "--directory", "-d", help="Cache root directory (overrides SIMPLE_CACHE_DIRECTORY)."
    ),
    enabled: Optional[bool] = typer.Option(
        None, "--enabled/--disabled", help="Force caching on or off."
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~simplecache.output.OutputManager` and
    stores the settings overrides in ``ctx.obj`` for sub-commands.
    """
    from simplecache.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))

    ctx.ensure_object(dict)
    ctx.obj["directory"] = directory
    ctx.obj["enabled"] = enabled


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


_registered = False


def register_commands() -> None:
    """Attach the built-in sub-commands to :data:`app`. Safe to call repeatedly."""
    global _registered
    if _registered:
        return

    from simplecache.commands.config import config_app
    from simplecache.commands.entries import clear_command, get_command, stats_command

    app.command("get")(get_command)
    app.command("clear")(clear_command)
    app.command("stats")(stats_command)
    app.add_typer(config_app, name="config", help="Show resolved configuration.")
    _registered = True


def main() -> None:
    """CLI entry point invoked by the ``simplecache`` console script.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        register_commands()
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from simplecache.exceptions import SimpleCacheError
        from simplecache.output import error

        if isinstance(exc, SimpleCacheError):
            error(str(exc))
            sys.exit(exc.exit_code)
        error(f"Unexpected error: {exc}")
        sys.exit(EXIT_GENERIC_FAILURE)
