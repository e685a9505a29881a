"""
CLI commands for runtime version management.

Thin wrappers over ``RuntimeManager``; each command takes the runtime
kind as its first argument (``node``, ``python``, ``java``).
"""

from __future__ import annotations

import json
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import click

from rtswitch.core.config.loader import ConfigError, load_settings
from rtswitch.core.errors import RuntimeSwitchError
from rtswitch.core.models.runtime import RuntimeKind
from rtswitch.core.services.runtimes.orchestration.manager import RuntimeManager

KIND = click.Choice([k.value for k in RuntimeKind], case_sensitive=False)


def get_manager(ctx: click.Context) -> RuntimeManager:
    """The run's manager, built from settings on first use."""
    manager = ctx.obj.get("manager")
    if manager is not None:
        return manager
    try:
        settings = load_settings(ctx.obj.get("config_path"))
        manager = RuntimeManager(settings)
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)
    except RuntimeSwitchError as e:
        click.secho(f"❌ {e.message}", fg="red", err=True)
        sys.exit(1)
    ctx.obj["manager"] = manager
    return manager


def _echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2))


@contextmanager
def _reporting(as_json: bool) -> Iterator[None]:
    """Print a RuntimeSwitchError (text or JSON) and exit 1."""
    try:
        yield
    except RuntimeSwitchError as e:
        if as_json:
            _echo_json(e.to_dict())
        else:
            click.secho(f"❌ {e.message}", fg="red", err=True)
        sys.exit(1)


def _print_notifications(notes: list[str]) -> None:
    for i, note in enumerate(notes):
        if i == 0:
            click.secho(f"✅ {note}", fg="green")
        else:
            click.echo(f"   ℹ️  {note}")


# ── Observe ─────────────────────────────────────────────────────


@click.command()
@click.argument("kind", type=KIND)
@click.option("--limit", "-n", type=int, default=None, help="Show at most N releases.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def available(ctx: click.Context, kind: str, limit: int | None, as_json: bool) -> None:
    """List releases available for this platform (newest first)."""
    manager = get_manager(ctx)
    with _reporting(as_json):
        releases = manager.list_available(kind)
        present = set(manager.list_installed(kind).installed)

    shown = releases[:limit] if limit else releases
    if as_json:
        _echo_json([r.to_dict() for r in shown])
        return

    adapter = manager.adapter(kind)
    click.secho(f"📦 {adapter.display_name} releases ({len(releases)}):", fg="cyan", bold=True)
    for release in shown:
        mark = " ✓" if release.version in present else ""
        lts = f"  (LTS {release.lts})" if release.lts else ""
        click.echo(f"   {release.version:<18}{lts}{mark}")
    if limit and len(releases) > limit:
        click.echo(f"   … {len(releases) - limit} more")


@click.command()
@click.argument("kind", type=KIND)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def installed(ctx: click.Context, kind: str, as_json: bool) -> None:
    """List installed versions and the active one."""
    manager = get_manager(ctx)
    with _reporting(as_json):
        result = manager.list_installed(kind)

    if as_json:
        _echo_json(result.to_dict())
        return

    name = manager.adapter(kind).display_name
    if not result.installed:
        click.secho(f"⚠️  No {name} versions installed", fg="yellow")
        return
    click.secho(f"📦 Installed {name} versions:", fg="cyan", bold=True)
    for version in result.installed:
        if version == result.current:
            click.secho(f"   → {version} (active)", fg="green")
        else:
            click.echo(f"     {version}")
    if result.current is None:
        click.echo("   No active version.")


@click.command()
@click.argument("kind", type=KIND)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def check(ctx: click.Context, kind: str, as_json: bool) -> None:
    """Check whether the runtime is reachable from PATH."""
    manager = get_manager(ctx)
    with _reporting(as_json):
        result = manager.check_accessible(kind)

    if as_json:
        _echo_json(result.to_dict())
        return
    icon = "✅" if result.accessible else "❌"
    click.echo(f"{icon} {result.description}")


# ── Act ─────────────────────────────────────────────────────────


@click.command()
@click.argument("kind", type=KIND)
@click.argument("version")
@click.option("--use", "activate", is_flag=True, help="Activate the version after installing.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def install(ctx: click.Context, kind: str, version: str, activate: bool, as_json: bool) -> None:
    """Download and install VERSION."""
    manager = get_manager(ctx)
    quiet = ctx.obj.get("quiet", False)

    with _reporting(as_json):
        release = manager.find_release(kind, version)
        if not as_json and not quiet:
            click.echo(f"⬇️  {release.file_name}")
        result = manager.install(kind, release)
        activation = manager.activate(kind, release.version) if activate else None

    if as_json:
        data = result.to_dict()
        if activation is not None:
            data["activation"] = activation.to_dict()
        _echo_json(data)
        return

    name = manager.adapter(kind).display_name
    if result.status == "already-present":
        click.secho(f"ℹ️  {name} {result.version} is already installed", fg="yellow")
    else:
        click.secho(f"✅ Installed {name} {result.version}", fg="green")
        click.echo(f"   {result.path}")
    if activation is not None:
        _print_notifications(activation.notifications)


@click.command()
@click.argument("kind", type=KIND)
@click.argument("version")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def use(ctx: click.Context, kind: str, version: str, as_json: bool) -> None:
    """Make an installed VERSION the active one."""
    manager = get_manager(ctx)
    with _reporting(as_json):
        result = manager.activate(kind, version)

    if as_json:
        _echo_json(result.to_dict())
        return
    _print_notifications(result.notifications)
    if ctx.obj.get("verbose"):
        for entry in result.path_entries:
            click.echo(f"   PATH += {entry}")
        for name, value in result.variables.items():
            click.echo(f"   {name} = {value}")


@click.command()
@click.argument("kind", type=KIND)
@click.argument("version")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def remove(ctx: click.Context, kind: str, version: str, yes: bool, as_json: bool) -> None:
    """Delete an installed VERSION (not the active one)."""
    manager = get_manager(ctx)
    name = manager.adapter(kind).display_name
    if not yes:
        click.confirm(f"Delete {name} {version}? This cannot be undone.", abort=True)

    with _reporting(as_json):
        result = manager.delete(kind, version)

    if as_json:
        _echo_json(result.to_dict())
        return
    click.secho(f"🗑️  Deleted {name} {result.version}", fg="green")


@click.command()
@click.argument("kind", type=KIND)
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def purge(ctx: click.Context, kind: str, yes: bool, as_json: bool) -> None:
    """Delete every installed version of KIND."""
    manager = get_manager(ctx)
    name = manager.adapter(kind).display_name
    if not yes:
        click.confirm(
            f"Delete ALL {name} versions under {manager.kind_dir(kind)}? This cannot be undone.",
            abort=True,
        )

    with _reporting(as_json):
        result = manager.purge(kind)

    if as_json:
        _echo_json(result.to_dict())
        return
    if not result.removed:
        click.secho(f"ℹ️  No {name} versions to remove", fg="yellow")
        return
    click.secho(f"🗑️  Removed {len(result.removed)} {name} version(s):", fg="green")
    for version in result.removed:
        click.echo(f"   {version}")


@click.command(
    "exec",
    context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False},
)
@click.argument("kind", type=KIND)
@click.argument("command", nargs=-1, required=True, type=click.UNPROCESSED)
@click.pass_context
def exec_(ctx: click.Context, kind: str, command: tuple[str, ...]) -> None:
    """Run COMMAND with the active version first on PATH.

    \b
    Example:
        rtswitch exec node -- npm install
    """
    manager = get_manager(ctx)
    with _reporting(False):
        result = manager.run(kind, list(command), capture=False)
    if result.stderr:
        click.secho(f"❌ {result.stderr}", fg="red", err=True)
    sys.exit(result.returncode)


RUNTIME_COMMANDS = [available, installed, check, install, use, remove, purge, exec_]
