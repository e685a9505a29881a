"""
L4 Execution — Archive extraction.

Unpacks a downloaded runtime archive so that the runtime's own files
sit directly under the version directory.  Upstream archives wrap
everything in one top-level folder whose name varies by kind and
release; the folder is located, its children are moved up, and the
staging area is removed.
"""

from __future__ import annotations

import logging
import os
import shutil
import tarfile
import zipfile
from pathlib import Path

from rtswitch.core.errors import InstallError

logger = logging.getLogger(__name__)

STAGING_DIR_NAME = ".rtswitch-extract"


def unpack(archive: Path, dest: Path) -> None:
    """Unpack a ``.zip`` or ``.tar.gz`` archive into ``dest``."""
    name = archive.name.lower()
    if name.endswith(".zip") or (not name.endswith((".tar.gz", ".tgz")) and zipfile.is_zipfile(archive)):
        with zipfile.ZipFile(archive, "r") as zf:
            zf.extractall(dest)
        return
    with tarfile.open(archive, "r:*") as tf:
        # "data" rejects absolute paths, parent traversal and device files
        tf.extractall(dest, filter="data")


def find_runtime_root(staging: Path, *, entry_point: str, root_hint: str | None) -> Path:
    """Locate the directory that holds the runtime's files.

    Order: the staging dir itself when the entry point is already at
    the top (flat archive), the expected folder name, then the first
    directory present.

    Raises:
        InstallError: The archive contained no directory at all.
    """
    if (staging / entry_point).exists():
        return staging
    if root_hint and (staging / root_hint).is_dir():
        return staging / root_hint

    dirs = sorted(p for p in staging.iterdir() if p.is_dir() and not p.is_symlink())
    if dirs:
        if root_hint:
            logger.debug("Expected folder %s not in archive; using %s", root_hint, dirs[0].name)
        return dirs[0]
    raise InstallError(
        "Archive does not contain a runtime directory", step="extract",
    )


def _move(src: Path, dest: Path) -> None:
    try:
        os.rename(src, dest)
    except PermissionError:
        # Moves across an open handle (antivirus, indexer) fail on Windows
        logger.debug("Rename of %s refused; copying instead", src)
        if src.is_dir() and not src.is_symlink():
            shutil.copytree(src, dest, symlinks=True)
            shutil.rmtree(src)
        else:
            shutil.copy2(src, dest, follow_symlinks=False)
            src.unlink()


def extract_archive(
    archive: Path,
    target: Path,
    *,
    entry_point: str,
    root_hint: str | None = None,
) -> Path:
    """Extract ``archive`` so its runtime root's contents land in ``target``.

    Args:
        archive: Downloaded ``.zip`` / ``.tar.gz``.
        target: Version directory (must exist).
        entry_point: Entry-point path relative to the runtime root.
        root_hint: Expected top-level folder inside the archive.

    Returns:
        ``target``.
    """
    staging = target / STAGING_DIR_NAME
    staging.mkdir(parents=True, exist_ok=True)
    logger.debug("Unpacking %s into %s", archive.name, staging)
    unpack(archive, staging)

    root = find_runtime_root(staging, entry_point=entry_point, root_hint=root_hint)
    for child in list(root.iterdir()):
        _move(child, target / child.name)

    shutil.rmtree(staging)
    return target
