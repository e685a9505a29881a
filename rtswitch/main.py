"""
rtswitch — CLI entrypoint.

Usage:
    rtswitch --help
    rtswitch available node
    rtswitch install python 3.12.1 --use
    python -m rtswitch.main installed java
"""

from __future__ import annotations

import os
from pathlib import Path

import click

from rtswitch import __version__
from rtswitch.core.observability.logging_config import level_from_flags, setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="rtswitch")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False, dir_okay=False),
    default=None,
    help="Path to config.yml (default: $RTS_CONFIG or ~/.config/rtswitch/config.yml).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """rtswitch — install and switch Node.js, Python and Java versions."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    setup_logging(
        level=level_from_flags(debug=debug, verbose=verbose, quiet=quiet),
        log_file=os.environ.get("RTS_LOG_FILE"),
        log_file_level=os.environ.get("RTS_LOG_FILE_LEVEL"),
        quiet_third_party=not debug,
    )


@cli.command()
@click.option("--host", default="127.0.0.1", help="Bind address.")
@click.option("--port", "-p", default=8000, type=int, help="Port number.")
@click.pass_context
def web(ctx: click.Context, host: str, port: int) -> None:
    """Serve the JSON API for a graphical front end."""
    from rtswitch.ui.cli.runtimes import get_manager
    from rtswitch.ui.web.server import create_app, run_server

    manager = get_manager(ctx)
    app = create_app(manager)
    debug = ctx.obj.get("debug", False)

    click.echo()
    click.secho("⚡ rtswitch — runtime API", bold=True)
    click.echo(f"   API:  http://{host}:{port}/api/runtimes")
    click.echo(f"   Root: {manager.root}")
    if debug:
        click.secho("   Logging: DEBUG (all output)", fg="yellow")
    click.echo()

    run_server(app, host=host, port=port, debug=debug)


# ── Register runtime commands from rtswitch/ui/cli/ ──────────────

from rtswitch.ui.cli.runtimes import RUNTIME_COMMANDS  # noqa: E402

for _command in RUNTIME_COMMANDS:
    cli.add_command(_command)


if __name__ == "__main__":
    cli()
