"""
L4 Execution — Installer.

Download a release into a temp dir, unpack it (or run its native
installer) into ``<kind root>/<version dir>``, always remove the temp
dir, and roll back the version dir on any failure so a retry sees
"not installed" rather than a half-extracted runtime.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import tempfile
from collections.abc import Callable
from pathlib import Path

from rtswitch.adapters.base import RuntimeAdapter
from rtswitch.core.errors import IncompleteInstallationError, InstallError
from rtswitch.core.models.runtime import InstallResult, PlatformDescriptor, Release
from rtswitch.core.services.runtimes.execution.extract import extract_archive

logger = logging.getLogger(__name__)

# (url, dest) -> dest
Downloader = Callable[[str, Path], Path]

NATIVE_INSTALLER_TIMEOUT = 900


def _remove_tree(path: Path, what: str) -> None:
    """Best-effort recursive removal; failures are logged, never raised."""
    if not path.exists() and not path.is_symlink():
        return
    try:
        shutil.rmtree(path)
    except OSError as exc:
        logger.warning("Could not remove %s %s: %s", what, path, exc)


def _run_native_installer(cmd: list[str]) -> None:
    logger.info("Running native installer: %s", " ".join(cmd[:2]))
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=NATIVE_INSTALLER_TIMEOUT,
        )
    except subprocess.TimeoutExpired as exc:
        raise InstallError(
            f"Native installer timed out after {NATIVE_INSTALLER_TIMEOUT}s",
            step="installer",
        ) from exc
    if result.returncode != 0:
        detail = (result.stderr or result.stdout or "").strip()
        raise InstallError(
            f"Native installer exited with code {result.returncode}: {detail[:300]}",
            step="installer",
        )


def install_release(
    adapter: RuntimeAdapter,
    release: Release,
    platform: PlatformDescriptor,
    kind_root: Path,
    *,
    downloader: Downloader,
) -> InstallResult:
    """Install ``release`` under ``kind_root``; idempotent per version.

    Returns:
        InstallResult with status ``installed`` or ``already-present``.

    Raises:
        InstallError: The version is not a valid identifier for the
            kind, or download, extraction or the native installer
            failed.  ``context`` carries ``version`` and ``step``.
        IncompleteInstallationError: The entry-point executable is
            missing afterwards; nothing is left installed.
    """
    dir_name = adapter.version_dir_name(release.version)
    if adapter.version_from_dir(dir_name) is None:
        raise InstallError(
            f"{release.version!r} is not a valid {adapter.display_name} version",
            version=release.version,
            step="validate",
        )
    target = kind_root / dir_name
    if target.exists():
        logger.info("%s %s already installed at %s", adapter.display_name, release.version, target)
        return InstallResult(
            kind=adapter.kind, version=release.version,
            status="already-present", path=str(target),
        )

    kind_root.mkdir(parents=True, exist_ok=True)
    target.mkdir()
    tmp_dir = Path(tempfile.mkdtemp(prefix="rtswitch-"))
    step = "download"
    try:
        archive = tmp_dir / release.file_name
        logger.info("Downloading %s %s from %s", adapter.display_name, release.version, release.download_url)
        downloader(release.download_url, archive)

        cmd = adapter.native_installer_command(release, str(archive), str(target), platform)
        if cmd:
            step = "installer"
            _run_native_installer(cmd)
        else:
            step = "extract"
            logger.info("Extracting %s", release.file_name)
            extract_archive(
                archive,
                target,
                entry_point=adapter.entry_point(platform),
                root_hint=adapter.archive_root_hint(release, platform),
            )

        entry = adapter.entry_point(platform)
        if not (target / entry).exists():
            raise IncompleteInstallationError(
                f"{adapter.display_name} {release.version} unpacked without {entry}",
                kind=adapter.kind.value,
                version=release.version,
            )
    except BaseException as exc:
        logger.error(
            "Install of %s %s failed during %s: %s",
            adapter.display_name, release.version, step, exc,
        )
        _remove_tree(target, "partial install")
        if isinstance(exc, InstallError):
            exc.context.setdefault("version", release.version)
            exc.context.setdefault("step", step)
            raise
        if isinstance(exc, IncompleteInstallationError) or not isinstance(exc, Exception):
            raise
        raise InstallError(
            f"Installing {adapter.display_name} {release.version} failed during {step}: {exc}",
            version=release.version,
            step=step,
        ) from exc
    finally:
        _remove_tree(tmp_dir, "temporary download")

    logger.info("Installed %s %s at %s", adapter.display_name, release.version, target)
    return InstallResult(
        kind=adapter.kind, version=release.version,
        status="installed", path=str(target),
    )
