"""
L1 Domain — Platform Descriptor.

Translates the canonical host (os + arch) into each upstream's own
naming conventions.  ``describe_platform`` is pure; ``detect_host``
is the single place that reads the running interpreter's platform.
"""

from __future__ import annotations

import platform
import sys

from rtswitch.core.errors import UnsupportedPlatformError
from rtswitch.core.models.runtime import HostInfo, PlatformDescriptor, RuntimeKind
from rtswitch.core.services.runtimes.data.constants import (
    _IARCH_MAP,
    _OS_MAP,
    JAVA_ARCH_TOKENS,
    JAVA_JVM_IMPL,
    JAVA_OS_TOKENS,
    NODE_ARCH_TOKENS,
    NODE_OS_TOKENS,
    PYTHON_OS_TOKENS,
    PYTHON_POSIX_ARCH_TOKENS,
    PYTHON_WIN_ARCH_TOKENS,
)


def normalize_host(os_name: str, machine: str) -> HostInfo:
    """Normalize raw ``sys.platform`` / ``platform.machine()`` values.

    Raises:
        UnsupportedPlatformError: OS is not Windows, macOS or Linux.
    """
    canonical_os = None
    for prefix, name in _OS_MAP.items():
        if os_name.lower().startswith(prefix):
            canonical_os = name
            break
    if canonical_os is None:
        raise UnsupportedPlatformError(
            f"Unsupported operating system: {os_name}", os=os_name,
        )

    key = machine.lower()
    arch = _IARCH_MAP.get(key)
    if arch is None:
        raise UnsupportedPlatformError(
            f"Unsupported CPU architecture: {machine}", arch=machine,
        )
    return HostInfo(os=canonical_os, arch=arch)


def detect_host() -> HostInfo:
    """Detect the running host."""
    return normalize_host(sys.platform, platform.machine() or "")


def describe_platform(kind: RuntimeKind, host: HostInfo) -> PlatformDescriptor:
    """Express ``host`` in the vocabulary of ``kind``'s upstream."""
    windows = host.os == "win32"
    exe_ext = ".exe" if windows else ""
    archive_ext = ".zip" if windows else ".tar.gz"

    if kind is RuntimeKind.NODE:
        os_token = NODE_OS_TOKENS[host.os]
        arch = NODE_ARCH_TOKENS[host.arch]
        return PlatformDescriptor(
            os=host.os,
            arch=arch,
            executable_ext=exe_ext,
            archive_ext=archive_ext,
            platform_token=f"{os_token}-{arch}",
        )

    if kind is RuntimeKind.PYTHON:
        if windows:
            arch = PYTHON_WIN_ARCH_TOKENS[host.arch]
            return PlatformDescriptor(
                os=host.os,
                arch=arch,
                executable_ext=exe_ext,
                archive_ext=archive_ext,
                platform_token=f"-{arch}",
                impl_token="embed",
            )
        arch = PYTHON_POSIX_ARCH_TOKENS[host.arch]
        return PlatformDescriptor(
            os=host.os,
            arch=arch,
            executable_ext=exe_ext,
            archive_ext=archive_ext,
            platform_token=f"{arch}-{PYTHON_OS_TOKENS[host.os]}",
            impl_token="install_only",
        )

    if kind is RuntimeKind.JAVA:
        arch = JAVA_ARCH_TOKENS[host.arch]
        return PlatformDescriptor(
            os=host.os,
            arch=arch,
            executable_ext=exe_ext,
            archive_ext=archive_ext,
            platform_token=f"{arch}_{JAVA_OS_TOKENS[host.os]}",
            impl_token=JAVA_JVM_IMPL,
        )

    raise UnsupportedPlatformError(f"Unknown runtime kind: {kind}", kind=str(kind))
