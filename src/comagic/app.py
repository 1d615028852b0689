"""Typer application and CLI entry point for comagic.

The CLI is a thin operator tool on top of the library: it manages stored
profiles, checks that a login works, and sends single authenticated
requests. Every network call goes through
:class:`~comagic.client.transport.ComagicTransport`, so the CLI exercises
exactly the code path library users get.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. :class:`~comagic.exceptions.ComagicError` instances
exit with their ``exit_code``; anything else leaves a crash log under the
data directory.

See Also:
    :mod:`comagic.config`: Profile storage and precedence resolution.
    :mod:`comagic.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from comagic import __version__
from comagic.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="comagic",
    help="Talk to the CoMagic API with automatic session handling.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"comagic {__version__}")
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
    profile: Optional[str] = typer.Option(
        None, "--profile", "-p", help="Profile name to use."
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show the transport's debug trace."
    ),
) -> None:
    """Install the global output manager and stash shared options in ``ctx.obj``."""
    from comagic.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))

    ctx.ensure_object(dict)
    ctx.obj["profile"] = profile
    ctx.obj["verbose"] = verbose


def _register_commands() -> None:
    from comagic.commands.login import login_command
    from comagic.commands.profile import profile_app
    from comagic.commands.request import request_command

    app.add_typer(profile_app, name="profile", help="Manage stored connection profiles.")
    app.command("login")(login_command)
    app.command("request")(request_command)


_register_commands()


def _setup_signal_handlers() -> None:
    """Exit with 130 on Ctrl-C."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write the current traceback to the data directory and return its path."""
    from comagic.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``comagic`` console script.

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
        from comagic.exceptions import ComagicError
        from comagic.output import error

        if isinstance(exc, ComagicError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
