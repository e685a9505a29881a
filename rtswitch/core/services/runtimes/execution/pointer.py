"""
L4 Execution — the ``current`` pointer.

``<kind root>/current`` is a directory symlink (POSIX) or an NTFS
junction (Windows, no elevation needed) naming the active version
directory.  PATH and home variables reference the pointer, never a
version directory, so switching versions only repoints the link.
"""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)

_WIN_LONG_PREFIX = "\\\\?\\"


def is_pointer(path: Path) -> bool:
    """True if ``path`` is a symlink or junction (dangling or not)."""
    return path.is_symlink() or path.is_junction()


def read_target(pointer: Path) -> Path | None:
    """Absolute path the pointer names, without checking it exists.

    Returns None when there is no pointer (or it is unreadable).
    """
    if not is_pointer(pointer):
        return None
    try:
        raw = os.readlink(pointer)
    except OSError as exc:
        logger.warning("Could not read pointer %s: %s", pointer, exc)
        return None
    if raw.startswith(_WIN_LONG_PREFIX):
        raw = raw[len(_WIN_LONG_PREFIX):]
    target = Path(raw)
    if not target.is_absolute():
        target = pointer.parent / target
    return Path(os.path.normpath(target))


def resolve(pointer: Path) -> Path | None:
    """Target directory of a pointer that resolves, else None."""
    target = read_target(pointer)
    if target is None or not target.is_dir():
        return None
    return target


def remove(pointer: Path) -> bool:
    """Remove the pointer itself (never the directory it names).

    Returns:
        True if a pointer was removed.
    """
    if pointer.is_junction():
        os.rmdir(pointer)
        return True
    if pointer.is_symlink():
        pointer.unlink()
        return True
    return False


def _create_junction(pointer: Path, target: Path) -> None:
    result = subprocess.run(
        ["cmd", "/c", "mklink", "/J", str(pointer), str(target)],
        capture_output=True,
        text=True,
        timeout=30,
    )
    if result.returncode != 0:
        detail = (result.stderr or result.stdout).strip()
        raise OSError(f"mklink /J failed: {detail}")


def point_to(pointer: Path, target: Path, *, windows: bool = False) -> None:
    """Make ``pointer`` name ``target``, replacing any previous pointer.

    POSIX swaps a fresh symlink in with ``os.replace`` so ``current``
    never disappears.  Junctions cannot be replaced atomically; the old
    one is removed first.

    Raises:
        OSError: The link could not be created, or ``pointer`` is a
            real directory rather than a link.
    """
    target = target.resolve()
    if pointer.exists() and not is_pointer(pointer):
        raise IsADirectoryError(f"{pointer} exists and is not a link")

    if windows:
        remove(pointer)
        _create_junction(pointer, target)
    else:
        staging = pointer.with_name(f".{pointer.name}.tmp-{os.getpid()}")
        if is_pointer(staging):
            staging.unlink()
        os.symlink(target, staging, target_is_directory=True)
        try:
            os.replace(staging, pointer)
        except OSError:
            staging.unlink(missing_ok=True)
            raise
    logger.debug("Pointer %s → %s", pointer, target)
