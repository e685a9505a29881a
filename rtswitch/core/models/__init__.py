"""
Domain models — Pydantic types for runtime management.

All models are re-exported here for convenient access:

    from rtswitch.core.models import Release, RuntimeKind, InstalledVersions
"""

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

__all__ = [
    "AccessCheck",
    "ActivationResult",
    "DeleteResult",
    "HostInfo",
    "InstallResult",
    "InstalledVersions",
    "PlatformDescriptor",
    "PurgeResult",
    "Release",
    "RunResult",
    "RuntimeKind",
]
