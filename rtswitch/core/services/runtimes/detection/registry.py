"""
L3 Detection — Version Registry.

The filesystem is the registry: installed versions are the kind
root's version-named directories, the active one is whatever the
``current`` pointer names.  Reads never fail on a missing or dangling
pointer; that is simply "no active version".
"""

from __future__ import annotations

import logging
from pathlib import Path

from rtswitch.adapters.base import RuntimeAdapter
from rtswitch.core.models.runtime import InstalledVersions
from rtswitch.core.services.runtimes.data.constants import (
    CURRENT_POINTER_NAME,
    KIND_ROOT_SUFFIX,
)
from rtswitch.core.services.runtimes.domain.versions import sort_versions
from rtswitch.core.services.runtimes.execution import pointer

logger = logging.getLogger(__name__)


def kind_root(root: Path, adapter: RuntimeAdapter) -> Path:
    """``<root>/<kind>_versions``."""
    return root / f"{adapter.kind.value}{KIND_ROOT_SUFFIX}"


def pointer_path(kind_dir: Path) -> Path:
    return kind_dir / CURRENT_POINTER_NAME


def current_version(adapter: RuntimeAdapter, kind_dir: Path) -> str | None:
    """Version the ``current`` pointer resolves to, or None."""
    target = pointer.resolve(pointer_path(kind_dir))
    if target is None:
        return None
    version = adapter.version_from_dir(target.name)
    if version is None or not (kind_dir / target.name).is_dir():
        logger.debug("Pointer in %s names %s, not a managed version", kind_dir, target)
        return None
    return version


def list_installed(adapter: RuntimeAdapter, kind_dir: Path) -> InstalledVersions:
    """Installed versions (newest first) and the active one.

    The kind root is created on demand, so a fresh root lists empty.
    """
    kind_dir.mkdir(parents=True, exist_ok=True)
    versions = []
    for entry in kind_dir.iterdir():
        if pointer.is_pointer(entry) or not entry.is_dir():
            continue
        version = adapter.version_from_dir(entry.name)
        if version is not None:
            versions.append(version)

    return InstalledVersions(
        installed=sort_versions(versions),
        current=current_version(adapter, kind_dir),
    )
