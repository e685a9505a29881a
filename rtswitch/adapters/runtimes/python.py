"""
Python adapter — CPython distributions.

Windows uses python.org's own install-manager indices (recent +
legacy).  python.org ships no relocatable POSIX builds, so Linux and
macOS read the release pages of the standalone CPython builds, whose
``install_only`` archives unpack to a single ``python/`` folder.
"""

from __future__ import annotations

import logging
import posixpath
import re
from typing import Any
from urllib.parse import urlsplit

from rtswitch.adapters.base import JsonFetcher, RuntimeAdapter
from rtswitch.core.errors import CatalogParseError
from rtswitch.core.models.runtime import PlatformDescriptor, Release, RuntimeKind
from rtswitch.core.services.runtimes.data.constants import (
    PYTHON_STANDALONE_PAGES,
    PYTHON_STANDALONE_RELEASES_URL,
    PYTHON_WINDOWS_INDEX_URLS,
)

logger = logging.getLogger(__name__)

_VERSION_DIR_RE = re.compile(r"^\d+\.\d+\.\d+$")
_WINDOWS_COMPANIES = ("PythonCore", "PythonEmbed")
_STANDALONE_ASSET_RE = re.compile(
    r"^cpython-(?P<version>\d+\.\d+\.\d+[a-z0-9]*)\+(?P<build>\d+)-(?P<triple>.+)"
    r"-(?P<flavor>install_only)\.tar\.gz$"
)


class PythonAdapter(RuntimeAdapter):
    """CPython runtime kind (version ids like ``3.12.1``)."""

    @property
    def kind(self) -> RuntimeKind:
        return RuntimeKind.PYTHON

    @property
    def display_name(self) -> str:
        return "Python"

    def index_urls(self, platform: PlatformDescriptor, fetch_json: JsonFetcher) -> list[str]:
        if platform.is_windows:
            return list(PYTHON_WINDOWS_INDEX_URLS)
        return [
            f"{PYTHON_STANDALONE_RELEASES_URL}?per_page=10&page={page}"
            for page in range(1, PYTHON_STANDALONE_PAGES + 1)
        ]

    def parse_catalog(self, payload: Any, platform: PlatformDescriptor) -> list[Release]:
        if platform.is_windows:
            return self._parse_windows_index(payload)
        return self._parse_standalone_releases(payload, platform)

    def _parse_windows_index(self, payload: Any) -> list[Release]:
        entries = payload.get("versions") if isinstance(payload, dict) else None
        if not isinstance(entries, list):
            raise CatalogParseError(
                "Python index: missing 'versions' list", kind=self.kind.value,
            )

        releases: list[Release] = []
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            if entry.get("company") not in _WINDOWS_COMPANIES:
                continue
            url = entry.get("url")
            version = entry.get("sort-version")
            if not isinstance(url, str) or not isinstance(version, str):
                continue
            releases.append(Release(
                version=version,
                download_url=url,
                file_name=posixpath.basename(urlsplit(url).path),
            ))
        return releases

    def _parse_standalone_releases(
        self, payload: Any, platform: PlatformDescriptor,
    ) -> list[Release]:
        if not isinstance(payload, list):
            raise CatalogParseError(
                f"Python releases: expected a list, got {type(payload).__name__}",
                kind=self.kind.value,
            )

        releases: list[Release] = []
        for gh_release in payload:
            if not isinstance(gh_release, dict):
                continue
            for asset in gh_release.get("assets") or []:
                name = asset.get("name", "") if isinstance(asset, dict) else ""
                match = _STANDALONE_ASSET_RE.match(name)
                if not match or match.group("triple") != platform.platform_token:
                    continue
                url = asset.get("browser_download_url")
                if not isinstance(url, str):
                    continue
                releases.append(Release(
                    version=match.group("version"),
                    build=match.group("build"),
                    download_url=url,
                    file_name=name,
                    archive_root="python",
                ))
        logger.debug("Python releases page: %d matching assets", len(releases))
        return releases

    def matches_platform(self, release: Release, platform: PlatformDescriptor) -> bool:
        name = release.file_name
        if platform.is_windows:
            return name.endswith((
                f"{platform.platform_token}{platform.archive_ext}",
                f"{platform.platform_token}.exe",
            ))
        suffix = f"-{platform.platform_token}-{platform.impl_token}{platform.archive_ext}"
        return name.endswith(suffix)

    def native_installer_command(
        self,
        release: Release,
        installer: str,
        target: str,
        platform: PlatformDescriptor,
    ) -> list[str] | None:
        if not (platform.is_windows and release.file_name.endswith(".exe")):
            return None
        return [
            installer,
            "/quiet",
            "InstallAllUsers=0",
            "PrependPath=1",
            "Include_launcher=0",
            f"TargetDir={target}",
        ]

    def normalize_version(self, version: str) -> str:
        return version.strip().lstrip("vV")

    def version_dir_name(self, version: str) -> str:
        return self.normalize_version(version)

    def version_from_dir(self, name: str) -> str | None:
        return name if _VERSION_DIR_RE.match(name) else None

    def entry_point(self, platform: PlatformDescriptor) -> str:
        return "python.exe" if platform.is_windows else "bin/python3"

    def bin_subpaths(self, platform: PlatformDescriptor) -> list[str]:
        return ["", "Scripts"] if platform.is_windows else ["bin"]

    def version_command(self, platform: PlatformDescriptor) -> tuple[list[str], str]:
        exe = "python" if platform.is_windows else "python3"
        return [f"{exe}{platform.executable_ext}", "--version"], r"Python (\d+\.\d+\.\d+)"
