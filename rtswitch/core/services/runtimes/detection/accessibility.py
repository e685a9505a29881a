"""
L3 Detection — is the kind's executable reachable?

First asks the shell's own PATH (the executable's ``--version``), then
falls back to the ``current`` pointer: an activated version is only
visible to shells started after the activation.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from rtswitch.adapters.base import RuntimeAdapter
from rtswitch.core.models.runtime import AccessCheck, PlatformDescriptor
from rtswitch.core.services.runtimes.detection.registry import current_version

logger = logging.getLogger(__name__)

VERSION_TIMEOUT = 10


def _run_version_command(cmd: list[str]) -> str | None:
    """Combined output of a successful version command, None if it fails."""
    try:
        result = subprocess.run(
            cmd, capture_output=True, text=True, timeout=VERSION_TIMEOUT,
        )
    except (OSError, subprocess.TimeoutExpired) as exc:
        logger.debug("%s --version failed: %s", cmd[0], exc)
        return None
    if result.returncode != 0:
        return None
    return f"{result.stdout}\n{result.stderr}".strip()


def check_accessible(
    adapter: RuntimeAdapter,
    platform: PlatformDescriptor,
    kind_dir: Path,
) -> AccessCheck:
    cmd, pattern = adapter.version_command(platform)
    output = _run_version_command(cmd)
    if output is not None:
        version = adapter.parse_version_output(output, pattern)
        shown = version or output.splitlines()[0]
        return AccessCheck(
            kind=adapter.kind,
            accessible=True,
            source="path",
            version=version,
            description=f"{adapter.display_name} {shown} found on PATH.",
        )

    active = current_version(adapter, kind_dir)
    if active is not None:
        return AccessCheck(
            kind=adapter.kind,
            accessible=True,
            source="pointer",
            version=active,
            description=(
                f"{adapter.display_name} {active} is active but not on this "
                "shell's PATH yet; open a new shell to pick it up."
            ),
        )

    return AccessCheck(
        kind=adapter.kind,
        accessible=False,
        description=f"{adapter.display_name} is not accessible from PATH.",
    )
