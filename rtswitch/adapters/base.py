"""
Adapter base — the capability contract of a runtime kind.

Kinds differ only in their upstream index format, archive layout and
the environment variables an activation sets.  Everything else
(catalog filtering, install, switch, delete) is shared control flow
in the manager, which only talks to kinds through this interface.

To add a new runtime kind:
    1. Subclass RuntimeAdapter
    2. Implement the abstract members
    3. Register it in ``rtswitch.adapters.registry``
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from rtswitch.core.models.runtime import HostInfo, PlatformDescriptor, Release, RuntimeKind
from rtswitch.core.services.runtimes.domain.platform import describe_platform

# Fetches and decodes one JSON document; raises NetworkError / CatalogParseError.
JsonFetcher = Callable[[str], Any]


class RuntimeAdapter(ABC):
    """Abstract base class for runtime kinds."""

    #: Extra PATH substrings owned by this kind (stripped on activation).
    path_markers: tuple[str, ...] = ()

    #: Persistent variable pointing at ``current`` (e.g. ``JAVA_HOME``).
    home_variable: str | None = None

    @property
    @abstractmethod
    def kind(self) -> RuntimeKind:
        """The runtime kind this adapter implements."""

    @property
    @abstractmethod
    def display_name(self) -> str:
        """Human-readable name (``Node.js``, ``Python``, ``Java``)."""

    # ── Platform ────────────────────────────────────────────────

    def describe(self, host: HostInfo) -> PlatformDescriptor:
        return describe_platform(self.kind, host)

    # ── Catalog ─────────────────────────────────────────────────

    @abstractmethod
    def index_urls(self, platform: PlatformDescriptor, fetch_json: JsonFetcher) -> list[str]:
        """Sub-index URLs to query for the current platform.

        Some upstreams only expose per-feature-line indices; those
        adapters may fetch a discovery document through ``fetch_json``.
        """

    @abstractmethod
    def parse_catalog(self, payload: Any, platform: PlatformDescriptor) -> list[Release]:
        """Turn one decoded sub-index into candidate releases.

        Raises:
            CatalogParseError: The payload does not have the expected shape.
        """

    def matches_platform(self, release: Release, platform: PlatformDescriptor) -> bool:
        """Whether the release's binary fits the host platform."""
        return (
            platform.platform_token in release.file_name
            and release.file_name.endswith(platform.archive_ext)
        )

    def archive_root_hint(self, release: Release, platform: PlatformDescriptor) -> str | None:
        """Expected top-level folder inside the release archive."""
        if release.archive_root:
            return release.archive_root
        name = release.file_name
        for ext in (platform.archive_ext, ".tar.gz", ".tgz", ".zip"):
            if name.endswith(ext):
                return name[: -len(ext)]
        return None

    def native_installer_command(
        self,
        release: Release,
        installer: str,
        target: str,
        platform: PlatformDescriptor,
    ) -> list[str] | None:
        """Command line for a native installer, or None for archive installs."""
        return None

    # ── On-disk layout ──────────────────────────────────────────

    def normalize_version(self, version: str) -> str:
        """Canonical version identifier for user input."""
        return version.strip()

    @abstractmethod
    def version_dir_name(self, version: str) -> str:
        """Directory name of an installed version."""

    @abstractmethod
    def version_from_dir(self, name: str) -> str | None:
        """Version identifier for a directory name, or None if not a version dir."""

    @abstractmethod
    def entry_point(self, platform: PlatformDescriptor) -> str:
        """Entry-point executable, relative to the version directory."""

    @abstractmethod
    def bin_subpaths(self, platform: PlatformDescriptor) -> list[str]:
        """Executable-bearing subpaths of ``current`` to put on PATH."""

    def home_subpath(self, platform: PlatformDescriptor) -> str:
        """Subpath of ``current`` the home variable points at."""
        return ""

    # ── Detection ───────────────────────────────────────────────

    @abstractmethod
    def version_command(self, platform: PlatformDescriptor) -> tuple[list[str], str]:
        """``(command, regex)`` that reports the version found on PATH."""

    def parse_version_output(self, output: str, pattern: str) -> str | None:
        match = re.search(pattern, output)
        return match.group(1) if match else None

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} kind={self.kind.value!r}>"
