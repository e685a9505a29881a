"""
Tests for host normalization and per-upstream platform descriptors.
"""

import pytest

from rtswitch.core.errors import UnsupportedPlatformError
from rtswitch.core.models.runtime import HostInfo, RuntimeKind
from rtswitch.core.services.runtimes.domain.platform import (
    describe_platform,
    detect_host,
    normalize_host,
)


class TestNormalizeHost:
    @pytest.mark.parametrize("os_name, machine, expected", [
        ("linux", "x86_64", HostInfo(os="linux", arch="x64")),
        ("win32", "AMD64", HostInfo(os="win32", arch="x64")),
        ("darwin", "arm64", HostInfo(os="darwin", arch="arm64")),
        ("linux", "aarch64", HostInfo(os="linux", arch="arm64")),
        ("cygwin", "i686", HostInfo(os="win32", arch="ia32")),
    ])
    def test_known(self, os_name, machine, expected):
        assert normalize_host(os_name, machine) == expected

    def test_unsupported_os(self):
        with pytest.raises(UnsupportedPlatformError) as exc:
            normalize_host("sunos5", "x86_64")
        assert exc.value.code == "unsupported-platform"

    def test_unsupported_arch(self):
        with pytest.raises(UnsupportedPlatformError):
            normalize_host("linux", "riscv64")

    def test_detect_uses_interpreter(self, monkeypatch):
        monkeypatch.setattr("sys.platform", "linux")
        monkeypatch.setattr("platform.machine", lambda: "x86_64")
        assert detect_host() == HostInfo(os="linux", arch="x64")


class TestDescribePlatform:
    def test_node_windows(self):
        d = describe_platform(RuntimeKind.NODE, HostInfo(os="win32", arch="x64"))
        assert d.platform_token == "win-x64"
        assert d.archive_ext == ".zip"
        assert d.executable_ext == ".exe"
        assert d.is_windows

    def test_node_linux_ia32(self):
        d = describe_platform(RuntimeKind.NODE, HostInfo(os="linux", arch="ia32"))
        assert d.arch == "x86"
        assert d.archive_ext == ".tar.gz"
        assert d.executable_ext == ""

    def test_python_posix(self):
        d = describe_platform(RuntimeKind.PYTHON, HostInfo(os="darwin", arch="arm64"))
        assert d.platform_token == "aarch64-apple-darwin"
        assert d.impl_token == "install_only"

    def test_python_windows(self):
        d = describe_platform(RuntimeKind.PYTHON, HostInfo(os="win32", arch="x64"))
        assert d.arch == "amd64"
        assert d.platform_token == "-amd64"

    def test_java_arm(self):
        d = describe_platform(RuntimeKind.JAVA, HostInfo(os="linux", arch="arm64"))
        assert d.arch == "aarch64"
        assert d.platform_token == "aarch64_linux"
        assert d.impl_token == "hotspot"
