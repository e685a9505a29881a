"""
Error taxonomy — every failure a runtime operation can surface.

All errors derive from ``RuntimeSwitchError`` and carry a stable
``code`` so the CLI (``--json``) and the web API can report them
without string matching:

    network-error              request failed, non-2xx, redirect loop
    parse-error                upstream catalog JSON malformed
    catalog-unavailable        every sub-index of a catalog failed
    release-not-found          requested version absent from the catalog
    install-failed             download / extraction / native installer
    not-found                  version directory does not exist
    incomplete-installation    entry-point executable missing
    active-version-undeletable delete targeted the active version
    no-active-version          no CurrentPointer resolves
    environment-update-failed  persistent environment write failed
    filesystem-error           pointer swap or directory removal failed
    unsupported-platform       host OS / architecture not handled
"""

from __future__ import annotations

from typing import Any


class RuntimeSwitchError(Exception):
    """Base class for all runtime-management errors."""

    code = "error"

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = {k: v for k, v in context.items() if v is not None}

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output (CLI ``--json`` and web API)."""
        return {"ok": False, "error": self.message, "code": self.code, **self.context}


class UnsupportedPlatformError(RuntimeSwitchError):
    code = "unsupported-platform"


class NetworkError(RuntimeSwitchError):
    code = "network-error"


class CatalogParseError(RuntimeSwitchError):
    code = "parse-error"


class CatalogUnavailableError(RuntimeSwitchError):
    code = "catalog-unavailable"


class ReleaseNotFoundError(RuntimeSwitchError):
    code = "release-not-found"


class InstallError(RuntimeSwitchError):
    """Installation failed at ``step`` (download, extract, installer)."""

    code = "install-failed"


class VersionNotFoundError(RuntimeSwitchError):
    code = "not-found"


class IncompleteInstallationError(RuntimeSwitchError):
    code = "incomplete-installation"


class ActiveVersionUndeletableError(RuntimeSwitchError):
    code = "active-version-undeletable"


class NoActiveVersionError(RuntimeSwitchError):
    code = "no-active-version"


class EnvironmentUpdateError(RuntimeSwitchError):
    code = "environment-update-failed"


class FilesystemError(RuntimeSwitchError):
    """Pointer swap, directory removal or similar OS-level failure."""

    code = "filesystem-error"
