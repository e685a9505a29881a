"""
Runtime models — the request/response contract of every operation.

These are the literal shapes handed to the CLI and the web API.
Releases are ephemeral (built from an upstream catalog, consumed once
by the installer); everything else describes on-disk state that the
filesystem itself is the source of truth for.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RuntimeKind(StrEnum):
    """Managed toolchain kinds."""

    NODE = "node"      # script runtime
    PYTHON = "python"  # interpreted runtime
    JAVA = "java"      # managed-VM runtime


class HostInfo(BaseModel):
    """Canonical host OS + architecture (``win32``/``darwin``/``linux``, ``x64``/``arm64``/``ia32``)."""

    model_config = ConfigDict(frozen=True)

    os: str
    arch: str


class PlatformDescriptor(BaseModel):
    """Host platform expressed in one upstream's naming conventions."""

    model_config = ConfigDict(frozen=True)

    os: str
    arch: str               # upstream's own architecture token
    executable_ext: str     # ".exe" on Windows, "" elsewhere
    archive_ext: str        # ".zip" / ".tar.gz"
    platform_token: str     # substring an upstream file name must carry
    impl_token: str = ""    # implementation flavour (hotspot, install_only, ...)

    @property
    def is_windows(self) -> bool:
        return self.os == "win32"


class Release(BaseModel):
    """One upstream-advertised installable unit."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    version: str
    download_url: str = Field(alias="downloadUrl")
    file_name: str = Field(alias="fileName")
    build: str | None = None          # build metadata (ignored for identity)
    lts: str | None = None            # LTS codename, when upstream has one
    archive_root: str | None = None   # expected top-level folder in the archive

    @field_validator("file_name")
    @classmethod
    def _bare_file_name(cls, value: str) -> str:
        # Joined onto the download dir, so it must not name a path
        if not value or value in (".", "..") or any(sep in value for sep in "/\\:"):
            raise ValueError(f"fileName must be a bare file name, got {value!r}")
        return value

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "version": self.version,
            "downloadUrl": self.download_url,
            "fileName": self.file_name,
        }
        if self.lts:
            data["lts"] = self.lts
        return data


class InstalledVersions(BaseModel):
    """Installed version directories of one kind, plus the active one."""

    installed: list[str] = Field(default_factory=list)
    current: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class InstallResult(BaseModel):
    kind: RuntimeKind
    version: str
    status: Literal["installed", "already-present"]
    path: str

    def to_dict(self) -> dict[str, Any]:
        return {"ok": True, **self.model_dump(mode="json")}


class ActivationResult(BaseModel):
    """Outcome of repointing ``current``.

    The persistent environment was updated, but the calling process
    and any already-running shell still see the old values.
    """

    kind: RuntimeKind
    version: str
    pointer: str
    path_entries: list[str] = Field(default_factory=list)
    variables: dict[str, str] = Field(default_factory=dict)
    environment_persisted: bool = True
    restart_required: bool = True
    notifications: list[str] = Field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"ok": True, **self.model_dump(mode="json")}


class DeleteResult(BaseModel):
    kind: RuntimeKind
    version: str
    path: str

    def to_dict(self) -> dict[str, Any]:
        return {"ok": True, **self.model_dump(mode="json")}


class PurgeResult(BaseModel):
    kind: RuntimeKind
    removed: list[str] = Field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"ok": True, **self.model_dump(mode="json")}


class AccessCheck(BaseModel):
    """Whether a kind's executable is reachable, and how it was detected."""

    kind: RuntimeKind
    accessible: bool
    description: str
    source: Literal["path", "pointer", "none"] = "none"
    version: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class RunResult(BaseModel):
    """Result of running a command against the active version."""

    kind: RuntimeKind
    command: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def to_dict(self) -> dict[str, Any]:
        return {"ok": self.ok, **self.model_dump(mode="json")}
