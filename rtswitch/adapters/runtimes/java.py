"""
Java adapter — Eclipse Temurin JDKs from the Adoptium API.

Adoptium has no single index: ``info/available_releases`` names the
feature lines, and each line is queried as its own sub-index.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urlencode

from rtswitch.adapters.base import JsonFetcher, RuntimeAdapter
from rtswitch.core.errors import CatalogParseError
from rtswitch.core.models.runtime import PlatformDescriptor, Release, RuntimeKind
from rtswitch.core.services.runtimes.data.constants import (
    ADOPTIUM_API_URL,
    JAVA_OS_TOKENS,
)

logger = logging.getLogger(__name__)

_DIR_PREFIX = "jdk-"


class JavaAdapter(RuntimeAdapter):
    """JDK runtime kind.

    Version identifiers are Adoptium semvers (``21.0.2+13``); the
    version directory is ``jdk-<semver>``.  Activation also sets
    ``JAVA_HOME`` and strips any other JDK/JRE from PATH.
    """

    path_markers = ("java", "jdk", "jre")
    home_variable = "JAVA_HOME"

    @property
    def kind(self) -> RuntimeKind:
        return RuntimeKind.JAVA

    @property
    def display_name(self) -> str:
        return "Java"

    def index_urls(self, platform: PlatformDescriptor, fetch_json: JsonFetcher) -> list[str]:
        info = fetch_json(f"{ADOPTIUM_API_URL}/info/available_releases")
        features = info.get("available_releases") if isinstance(info, dict) else None
        if not isinstance(features, list):
            raise CatalogParseError(
                "Adoptium: missing 'available_releases'", kind=self.kind.value,
            )

        query = urlencode({
            "architecture": platform.arch,
            "heap_size": "normal",
            "image_type": "jdk",
            "jvm_impl": platform.impl_token,
            "os": JAVA_OS_TOKENS[platform.os],
            "page_size": 20,
            "project": "jdk",
            "sort_order": "DESC",
            "vendor": "eclipse",
        })
        return [
            f"{ADOPTIUM_API_URL}/assets/feature_releases/{feature}/ga?{query}"
            for feature in sorted(
                (int(f) for f in features if isinstance(f, int | str) and str(f).isdigit()),
                reverse=True,
            )
        ]

    def parse_catalog(self, payload: Any, platform: PlatformDescriptor) -> list[Release]:
        if not isinstance(payload, list):
            raise CatalogParseError(
                f"Adoptium: expected a list, got {type(payload).__name__}",
                kind=self.kind.value,
            )

        os_token = JAVA_OS_TOKENS[platform.os]
        releases: list[Release] = []
        for entry in payload:
            if not isinstance(entry, dict):
                continue
            version_data = entry.get("version_data")
            semver = version_data.get("semver") if isinstance(version_data, dict) else None
            release_name = entry.get("release_name")
            if not isinstance(semver, str):
                continue

            binaries = entry.get("binaries")
            for binary in binaries if isinstance(binaries, list) else []:
                if (
                    not isinstance(binary, dict)
                    or binary.get("os") != os_token
                    or binary.get("architecture") != platform.arch
                    or binary.get("image_type") != "jdk"
                ):
                    continue
                package = binary.get("package")
                if not isinstance(package, dict):
                    continue
                name, link = package.get("name"), package.get("link")
                if not isinstance(name, str) or not isinstance(link, str):
                    continue
                if not name.endswith(platform.archive_ext):
                    continue
                releases.append(Release(
                    version=semver,
                    download_url=link,
                    file_name=name,
                    archive_root=release_name if isinstance(release_name, str) else None,
                ))
                break
        return releases

    def version_dir_name(self, version: str) -> str:
        version = self.normalize_version(version)
        return version if version.startswith(_DIR_PREFIX) else f"{_DIR_PREFIX}{version}"

    def version_from_dir(self, name: str) -> str | None:
        if name.startswith(_DIR_PREFIX) and name[len(_DIR_PREFIX):][:1].isdigit():
            return name[len(_DIR_PREFIX):]
        return None

    def entry_point(self, platform: PlatformDescriptor) -> str:
        if platform.os == "darwin":
            return "Contents/Home/bin/java"
        return f"bin/java{platform.executable_ext}"

    def bin_subpaths(self, platform: PlatformDescriptor) -> list[str]:
        return ["Contents/Home/bin"] if platform.os == "darwin" else ["bin"]

    def home_subpath(self, platform: PlatformDescriptor) -> str:
        return "Contents/Home" if platform.os == "darwin" else ""

    def version_command(self, platform: PlatformDescriptor) -> tuple[list[str], str]:
        # java -version prints to stderr: openjdk version "21.0.2" 2024-01-16
        return [f"java{platform.executable_ext}", "-version"], r'version "([^"]+)"'
