"""
Node.js adapter — nodejs.org dist index and archive layout.

The index lists every release with the artifact tokens it ships
(``linux-x64``, ``osx-arm64-tar``, ``win-x64-zip``); archives unpack
to ``node-<version>-<platform>-<arch>/``.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from rtswitch.adapters.base import JsonFetcher, RuntimeAdapter
from rtswitch.core.errors import CatalogParseError
from rtswitch.core.models.runtime import PlatformDescriptor, Release, RuntimeKind
from rtswitch.core.services.runtimes.data.constants import (
    NODE_DIST_URL,
    NODE_INDEX_OS_TOKENS,
    NODE_INDEX_SUFFIXES,
    NODE_INDEX_URL,
)

logger = logging.getLogger(__name__)

_VERSION_DIR_RE = re.compile(r"^v\d+\.\d+\.\d+$")


class NodeAdapter(RuntimeAdapter):
    """Node.js runtime kind.

    Version identifiers keep the upstream ``v`` prefix (``v20.11.0``),
    which is also the version directory name.
    """

    @property
    def kind(self) -> RuntimeKind:
        return RuntimeKind.NODE

    @property
    def display_name(self) -> str:
        return "Node.js"

    def index_urls(self, platform: PlatformDescriptor, fetch_json: JsonFetcher) -> list[str]:
        return [NODE_INDEX_URL]

    def _index_file_token(self, platform: PlatformDescriptor) -> str:
        os_token = NODE_INDEX_OS_TOKENS[platform.os]
        return f"{os_token}-{platform.arch}{NODE_INDEX_SUFFIXES[platform.os]}"

    def parse_catalog(self, payload: Any, platform: PlatformDescriptor) -> list[Release]:
        if not isinstance(payload, list):
            raise CatalogParseError(
                f"Node.js index: expected a list, got {type(payload).__name__}",
                kind=self.kind.value,
            )

        file_token = self._index_file_token(platform)
        releases: list[Release] = []
        for entry in payload:
            if not isinstance(entry, dict):
                continue
            version = entry.get("version")
            files = entry.get("files") or []
            if not isinstance(version, str) or file_token not in files:
                continue

            stem = f"node-{version}-{platform.platform_token}"
            file_name = f"{stem}{platform.archive_ext}"
            lts = entry.get("lts")
            releases.append(Release(
                version=version,
                download_url=f"{NODE_DIST_URL}/{version}/{file_name}",
                file_name=file_name,
                lts=lts if isinstance(lts, str) else None,
                archive_root=stem,
            ))

        logger.debug("Node.js index: %d releases for %s", len(releases), file_token)
        return releases

    def normalize_version(self, version: str) -> str:
        version = version.strip()
        return version if version.startswith("v") else f"v{version}"

    def version_dir_name(self, version: str) -> str:
        return self.normalize_version(version)

    def version_from_dir(self, name: str) -> str | None:
        return name if _VERSION_DIR_RE.match(name) else None

    def entry_point(self, platform: PlatformDescriptor) -> str:
        return "node.exe" if platform.is_windows else "bin/node"

    def bin_subpaths(self, platform: PlatformDescriptor) -> list[str]:
        # Windows archives put node.exe and npm.cmd at the top level
        return [""] if platform.is_windows else ["bin"]

    def version_command(self, platform: PlatformDescriptor) -> tuple[list[str], str]:
        return [f"node{platform.executable_ext}", "--version"], r"v(\d+\.\d+\.\d+)"
