"""
L5 Orchestration — Runtime Version Manager.

One control flow for every runtime kind: the adapter supplies the
kind-specific pieces, this module sequences catalog → install →
activate → delete and owns the per-kind mutual exclusion.

Locking:
    install / activate / delete / purge hold the kind's lock, because
    the pointer swap and the active-version check are read-then-write
    on the same directory.  Different kinds run in parallel; their
    shared PATH edit is serialized by the environment store.
"""

from __future__ import annotations

import functools
import logging
import os
import shutil
import subprocess
import threading
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path

from rtswitch.adapters.base import JsonFetcher, RuntimeAdapter
from rtswitch.adapters.registry import AdapterRegistry, default_registry
from rtswitch.core.config.loader import Settings
from rtswitch.core.errors import (
    ActiveVersionUndeletableError,
    FilesystemError,
    IncompleteInstallationError,
    NoActiveVersionError,
    VersionNotFoundError,
)
from rtswitch.core.models.runtime import (
    AccessCheck,
    ActivationResult,
    DeleteResult,
    HostInfo,
    InstalledVersions,
    InstallResult,
    PlatformDescriptor,
    PurgeResult,
    Release,
    RunResult,
    RuntimeKind,
)
from rtswitch.core.persistence.environment_store import EnvironmentStore, default_store
from rtswitch.core.services.runtimes.detection import accessibility, catalog, registry
from rtswitch.core.services.runtimes.domain.path_entries import rewrite_path
from rtswitch.core.services.runtimes.domain.platform import detect_host
from rtswitch.core.services.runtimes.domain.restart import activation_notifications
from rtswitch.core.services.runtimes.domain.versions import split_build
from rtswitch.core.services.runtimes.execution import download, pointer
from rtswitch.core.services.runtimes.execution.installer import Downloader, install_release

logger = logging.getLogger(__name__)


def _same_dir(a: Path, b: Path) -> bool:
    try:
        return os.path.samefile(a, b)
    except OSError:
        return os.path.normcase(os.path.abspath(a)) == os.path.normcase(os.path.abspath(b))


class RuntimeManager:
    """Install, switch and remove versions of every registered runtime kind.

    Args:
        settings: Effective settings (managed root, timeouts, persistence).
        adapters: Adapter registry (default: node / python / java).
        host: Host platform (default: detected; unsupported hosts fail here).
        env_store: Persistent environment (default: per host and settings).
        fetch_json: JSON fetcher for catalogs (default: urllib with settings).
        downloader: File downloader for installs (default: urllib with settings).
    """

    def __init__(
        self,
        settings: Settings,
        *,
        adapters: AdapterRegistry | None = None,
        host: HostInfo | None = None,
        env_store: EnvironmentStore | None = None,
        fetch_json: JsonFetcher | None = None,
        downloader: Downloader | None = None,
    ):
        self.settings = settings
        self.root = settings.root
        self.adapters = adapters or default_registry()
        self.host = host or detect_host()
        self.env_store = env_store or default_store(
            self.root,
            windows=self.host.os == "win32",
            persist=settings.persist_environment,
            profile=settings.shell_profile,
        )
        self._fetch_json = fetch_json or functools.partial(
            download.fetch_json, timeout=settings.timeout, user_agent=settings.user_agent,
        )
        self._downloader = downloader or functools.partial(
            download.download_file, timeout=settings.timeout, user_agent=settings.user_agent,
        )
        self._locks = {kind: threading.Lock() for kind in self.adapters.kinds()}

    # ── Lookup ──────────────────────────────────────────────────

    def adapter(self, kind: RuntimeKind | str) -> RuntimeAdapter:
        return self.adapters.get(kind)

    def platform(self, kind: RuntimeKind | str) -> PlatformDescriptor:
        return self.adapter(kind).describe(self.host)

    def kind_dir(self, kind: RuntimeKind | str) -> Path:
        return registry.kind_root(self.root, self.adapter(kind))

    @contextmanager
    def _exclusive(self, adapter: RuntimeAdapter) -> Iterator[None]:
        lock = self._locks.setdefault(adapter.kind, threading.Lock())
        with lock:
            yield

    def _version_dir(self, adapter: RuntimeAdapter, version: str) -> Path:
        return self.kind_dir(adapter.kind) / adapter.version_dir_name(version)

    def _installed_dir(self, adapter: RuntimeAdapter, version: str) -> Path:
        """Directory of an installed version; build metadata is optional.

        ``21.0.2`` finds ``jdk-21.0.2+13`` (the newest build if several).

        Raises:
            VersionNotFoundError: No such version directory.
        """
        target = self._version_dir(adapter, version)
        if target.is_dir() and not pointer.is_pointer(target):
            return target

        core, build = split_build(adapter.normalize_version(version))
        if not build:
            kind_dir = self.kind_dir(adapter.kind)
            for installed in registry.list_installed(adapter, kind_dir).installed:
                if split_build(installed)[0] == core:
                    return self._version_dir(adapter, installed)

        raise VersionNotFoundError(
            f"{adapter.display_name} {version} is not installed",
            kind=adapter.kind.value, version=version,
        )

    def path_entries(self, kind: RuntimeKind | str) -> list[str]:
        """Executable directories of ``current``, in PATH order."""
        adapter = self.adapter(kind)
        plat = self.platform(kind)
        ptr = registry.pointer_path(self.kind_dir(kind))
        return [
            str(ptr.joinpath(*sub.split("/"))) if sub else str(ptr)
            for sub in adapter.bin_subpaths(plat)
        ]

    def home_variables(self, kind: RuntimeKind | str) -> dict[str, str]:
        adapter = self.adapter(kind)
        if not adapter.home_variable:
            return {}
        ptr = registry.pointer_path(self.kind_dir(kind))
        sub = adapter.home_subpath(self.platform(kind))
        home = ptr.joinpath(*sub.split("/")) if sub else ptr
        return {adapter.home_variable: str(home)}

    # ── Catalog / registry ──────────────────────────────────────

    def list_available(self, kind: RuntimeKind | str) -> list[Release]:
        """Installable releases for this host, newest first."""
        adapter = self.adapter(kind)
        return catalog.resolve_catalog(adapter, self.platform(kind), self._fetch_json)

    def find_release(self, kind: RuntimeKind | str, version: str) -> Release:
        """Resolve a version string against the live catalog."""
        adapter = self.adapter(kind)
        return catalog.find_release(adapter, self.list_available(kind), version)

    def list_installed(self, kind: RuntimeKind | str) -> InstalledVersions:
        adapter = self.adapter(kind)
        return registry.list_installed(adapter, self.kind_dir(kind))

    def check_accessible(self, kind: RuntimeKind | str) -> AccessCheck:
        adapter = self.adapter(kind)
        return accessibility.check_accessible(adapter, self.platform(kind), self.kind_dir(kind))

    # ── Install ─────────────────────────────────────────────────

    def install(self, kind: RuntimeKind | str, release: Release) -> InstallResult:
        """Install ``release``; a second call for the same version is a no-op."""
        adapter = self.adapter(kind)
        with self._exclusive(adapter):
            return install_release(
                adapter,
                release,
                self.platform(kind),
                self.kind_dir(kind),
                downloader=self._downloader,
            )

    # ── Activate ────────────────────────────────────────────────

    def activate(self, kind: RuntimeKind | str, version: str) -> ActivationResult:
        """Point ``current`` at an installed version and persist PATH.

        The persistent environment is updated for new processes only;
        the calling process keeps its environment.

        Raises:
            VersionNotFoundError: No such version directory.
            IncompleteInstallationError: The entry-point executable is missing.
            FilesystemError: The pointer could not be replaced.
            EnvironmentUpdateError: PATH / home variable write failed.
        """
        adapter = self.adapter(kind)
        plat = self.platform(kind)
        kind_dir = self.kind_dir(kind)

        with self._exclusive(adapter):
            target = self._installed_dir(adapter, version)
            entry = adapter.entry_point(plat)
            if not (target / entry).exists():
                raise IncompleteInstallationError(
                    f"{adapter.display_name} {version} is incomplete or missing "
                    f"({entry} not found); reinstall it",
                    kind=adapter.kind.value, version=version,
                )

            ptr = registry.pointer_path(kind_dir)
            try:
                pointer.point_to(ptr, target, windows=plat.is_windows)
            except OSError as exc:
                logger.error("Could not repoint %s: %s", ptr, exc)
                raise FilesystemError(
                    f"Could not point {ptr} at {target.name}: {exc}",
                    kind=adapter.kind.value, version=version,
                ) from exc

            resolved_version = adapter.version_from_dir(target.name) or version
            entries = self.path_entries(kind)
            variables = self.home_variables(kind)
            self._persist_environment(adapter, kind_dir, entries, variables)

        store = self.env_store
        notes = activation_notifications(
            adapter.display_name,
            resolved_version,
            variables=list(variables),
            persisted=store.persisted,
            windows=plat.is_windows,
            profile=str(store.profile) if store.profile else None,
        )
        logger.info("Activated %s %s", adapter.display_name, resolved_version)
        return ActivationResult(
            kind=adapter.kind,
            version=resolved_version,
            pointer=str(ptr),
            path_entries=entries,
            variables=variables,
            environment_persisted=store.persisted,
            restart_required=store.persisted,
            notifications=notes,
        )

    def _persist_environment(
        self,
        adapter: RuntimeAdapter,
        kind_dir: Path,
        entries: list[str],
        variables: dict[str, str],
    ) -> None:
        store = self.env_store
        store.read_modify_write(
            "PATH",
            lambda current: rewrite_path(
                current,
                entries,
                managed_root=str(kind_dir),
                markers=adapter.path_markers,
                shared_root=str(self.root),
                separator=store.separator,
                case_insensitive=store.case_insensitive,
            ),
        )
        for name, value in variables.items():
            store.read_modify_write(name, lambda _current, value=value: value)

    # ── Delete / purge ──────────────────────────────────────────

    def delete(self, kind: RuntimeKind | str, version: str) -> DeleteResult:
        """Remove an installed version that is not the active one.

        Raises:
            VersionNotFoundError: No such version directory.
            ActiveVersionUndeletableError: ``current`` points at it.
        """
        adapter = self.adapter(kind)
        with self._exclusive(adapter):
            target = self._installed_dir(adapter, version)
            version = adapter.version_from_dir(target.name) or version

            active = pointer.resolve(registry.pointer_path(self.kind_dir(kind)))
            if active is not None and _same_dir(active, target):
                raise ActiveVersionUndeletableError(
                    f"{adapter.display_name} {version} is the active version; "
                    "switch to another version before deleting it",
                    kind=adapter.kind.value, version=version,
                )

            try:
                shutil.rmtree(target)
            except OSError as exc:
                logger.error("Could not delete %s: %s", target, exc)
                raise FilesystemError(
                    f"Could not delete {target}: {exc}",
                    kind=adapter.kind.value, version=version,
                ) from exc

        logger.info("Deleted %s %s", adapter.display_name, version)
        return DeleteResult(kind=adapter.kind, version=version, path=str(target))

    def purge(self, kind: RuntimeKind | str) -> PurgeResult:
        """Remove every installed version and the pointer of a kind.

        The persistent PATH keeps its ``current`` entries; they simply
        resolve to nothing until a version is activated again.
        """
        adapter = self.adapter(kind)
        kind_dir = self.kind_dir(kind)
        removed: list[str] = []
        with self._exclusive(adapter):
            kind_dir.mkdir(parents=True, exist_ok=True)
            try:
                for entry in sorted(kind_dir.iterdir()):
                    if pointer.is_pointer(entry):
                        pointer.remove(entry)
                    elif entry.is_dir():
                        shutil.rmtree(entry)
                        version = adapter.version_from_dir(entry.name)
                        if version is not None:
                            removed.append(version)
                    else:
                        entry.unlink()
            except OSError as exc:
                logger.error("Purge of %s stopped: %s", kind_dir, exc)
                raise FilesystemError(
                    f"Could not clear {kind_dir}: {exc}",
                    kind=adapter.kind.value, removed=removed,
                ) from exc

        logger.info("Purged %d %s version(s)", len(removed), adapter.display_name)
        return PurgeResult(kind=adapter.kind, removed=removed)

    # ── Exec ────────────────────────────────────────────────────

    def run(
        self,
        kind: RuntimeKind | str,
        argv: Sequence[str],
        *,
        capture: bool = True,
    ) -> RunResult:
        """Run ``argv`` with the active version first on PATH.

        Works before any shell restart: the child gets ``current``'s
        directories (and home variable) in its own environment.

        Raises:
            NoActiveVersionError: No pointer resolves for the kind.
        """
        adapter = self.adapter(kind)
        if registry.current_version(adapter, self.kind_dir(kind)) is None:
            raise NoActiveVersionError(
                f"No active {adapter.display_name} version; run 'rtswitch use' first",
                kind=adapter.kind.value,
            )

        env = os.environ.copy()
        env["PATH"] = os.pathsep.join([*self.path_entries(kind), env.get("PATH", "")])
        env.update(self.home_variables(kind))

        cmd = list(argv)
        cmd[0] = shutil.which(cmd[0], path=env["PATH"]) or cmd[0]
        logger.debug("exec %s", cmd)
        try:
            result = subprocess.run(cmd, env=env, capture_output=capture, text=True)
        except OSError as exc:
            return RunResult(kind=adapter.kind, command=list(argv), returncode=127, stderr=str(exc))
        return RunResult(
            kind=adapter.kind,
            command=list(argv),
            returncode=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
        )
