"""
L0 Data — Module-level constants.

Pure data. No logic. No imports beyond stdlib.
"""

from __future__ import annotations

# Host OS normalization (``sys.platform`` prefix → canonical name).
_OS_MAP: dict[str, str] = {
    "win32": "win32",
    "cygwin": "win32",
    "darwin": "darwin",
    "linux": "linux",
}

# Architecture name normalization.
#
# ``platform.machine()`` reports different spellings per OS (Windows says
# AMD64, macOS says arm64, Linux says aarch64).  Everything is first
# normalized to one canonical set (x64 / arm64 / ia32); each runtime kind
# then translates that into its upstream's own vocabulary below.
_IARCH_MAP: dict[str, str] = {
    "x86_64": "x64",
    "amd64": "x64",
    "x64": "x64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv8l": "arm64",
    "i386": "ia32",
    "i686": "ia32",
    "x86": "ia32",
}

# Per-kind upstream vocabularies, keyed by canonical os / arch.
NODE_OS_TOKENS: dict[str, str] = {"win32": "win", "darwin": "darwin", "linux": "linux"}
NODE_ARCH_TOKENS: dict[str, str] = {"x64": "x64", "arm64": "arm64", "ia32": "x86"}
# nodejs.org index.json lists artifacts by its own file tokens
NODE_INDEX_OS_TOKENS: dict[str, str] = {"win32": "win", "darwin": "osx", "linux": "linux"}
NODE_INDEX_SUFFIXES: dict[str, str] = {"win32": "-zip", "darwin": "-tar", "linux": ""}

PYTHON_OS_TOKENS: dict[str, str] = {
    "win32": "windows",
    "darwin": "apple-darwin",
    "linux": "unknown-linux-gnu",
}
PYTHON_WIN_ARCH_TOKENS: dict[str, str] = {"x64": "amd64", "arm64": "arm64", "ia32": "win32"}
PYTHON_POSIX_ARCH_TOKENS: dict[str, str] = {"x64": "x86_64", "arm64": "aarch64", "ia32": "i686"}

JAVA_OS_TOKENS: dict[str, str] = {"win32": "windows", "darwin": "mac", "linux": "linux"}
JAVA_ARCH_TOKENS: dict[str, str] = {"x64": "x64", "arm64": "aarch64", "ia32": "x86"}
JAVA_JVM_IMPL = "hotspot"

# Upstream indices.
NODE_INDEX_URL = "https://nodejs.org/dist/index.json"
NODE_DIST_URL = "https://nodejs.org/dist"
PYTHON_WINDOWS_INDEX_URLS: tuple[str, ...] = (
    "https://www.python.org/ftp/python/index-windows-recent.json",
    "https://www.python.org/ftp/python/index-windows-legacy.json",
)
PYTHON_STANDALONE_RELEASES_URL = (
    "https://api.github.com/repos/astral-sh/python-build-standalone/releases"
)
PYTHON_STANDALONE_PAGES = 2
ADOPTIUM_API_URL = "https://api.adoptium.net/v3"

# Layout.
CURRENT_POINTER_NAME = "current"
KIND_ROOT_SUFFIX = "_versions"

# HTTP.
DEFAULT_TIMEOUT = 60.0
DOWNLOAD_CHUNK_SIZE = 64 * 1024

# Shell rc files that get the env-file source hook (POSIX only).
# fish cannot source POSIX ``export`` lines; it falls back to ~/.profile.
_PROFILE_MAP: dict[str, str] = {
    "bash": "~/.bashrc",
    "zsh": "~/.zshrc",
    "sh": "~/.profile",
    "dash": "~/.profile",
    "ash": "~/.profile",
}
DEFAULT_PROFILE = "~/.profile"
ENV_FILE_NAME = "env.sh"
