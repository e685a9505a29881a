"""
Persistent environment — user-level variables outside this process.

Activation never touches ``os.environ``; it writes the durable store
new shells read from:

    Windows   HKCU\\Environment (registry) + WM_SETTINGCHANGE broadcast
    POSIX     <root>/env.sh, sourced from the user's shell rc file
    memory    tests, and ``persist_environment: false``

Every store serializes ``read_modify_write`` on one process-wide lock,
so two kinds editing PATH at once cannot lose each other's update.
"""

from __future__ import annotations

import logging
import os
import re
import shutil
import tempfile
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path

from rtswitch.core.errors import EnvironmentUpdateError
from rtswitch.core.services.runtimes.data.constants import (
    _PROFILE_MAP,
    DEFAULT_PROFILE,
    ENV_FILE_NAME,
)

logger = logging.getLogger(__name__)

_ENV_LOCK = threading.Lock()

PATH_SENTINEL = "$PATH"


class EnvironmentStore(ABC):
    """Durable, session-surviving environment variables."""

    #: PATH separator of the store's platform.
    separator: str = os.pathsep
    #: Compare PATH entries case-insensitively (Windows).
    case_insensitive: bool = False
    #: False when writes never leave this process (nothing to restart).
    persisted: bool = True
    #: File a POSIX user can ``source`` to pick changes up immediately.
    profile: Path | None = None

    @abstractmethod
    def read(self, name: str) -> str | None:
        """Current durable value, or None if unset."""

    @abstractmethod
    def write(self, name: str, value: str) -> None:
        """Persist ``value``.

        Raises:
            EnvironmentUpdateError: The store could not be written.
        """

    def read_modify_write(self, name: str, transform: Callable[[str], str]) -> str:
        """Atomically (process-wide) apply ``transform`` to a variable."""
        with _ENV_LOCK:
            current = self.read(name) or ""
            updated = transform(current)
            if updated != current:
                self.write(name, updated)
            return updated


# ── Memory ──────────────────────────────────────────────────────


class MemoryEnvironmentStore(EnvironmentStore):
    """In-memory store — tests, and runs that must not touch the user env."""

    def __init__(
        self,
        initial: dict[str, str] | None = None,
        *,
        persisted: bool = True,
        separator: str = os.pathsep,
    ):
        self.values: dict[str, str] = dict(initial or {})
        self.persisted = persisted
        self.separator = separator

    def read(self, name: str) -> str | None:
        return self.values.get(name)

    def write(self, name: str, value: str) -> None:
        self.values[name] = value


# ── POSIX: env file + shell hook ────────────────────────────────

_EXPORT_RE = re.compile(r'^export ([A-Za-z_][A-Za-z0-9_]*)="(.*)"$')
_HOOK_MARKER = "# Added by rtswitch"


def _quote(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"').replace("`", "\\`")


def _unquote(value: str) -> str:
    return re.sub(r"\\(.)", r"\1", value)


def profile_for_shell(shell: str | None = None) -> Path:
    """The rc file that gets the source hook for ``$SHELL``."""
    shell = shell if shell is not None else os.environ.get("SHELL", "")
    rc_file = _PROFILE_MAP.get(os.path.basename(shell), DEFAULT_PROFILE)
    return Path(os.path.expanduser(rc_file))


class ProfileEnvironmentStore(EnvironmentStore):
    """Managed variables in an ``export`` file sourced by the shell profile.

    PATH is kept as a template ending in ``$PATH`` so the managed
    entries are prepended to whatever the login environment provides.
    """

    separator = ":"

    def __init__(self, env_file: Path, profile: Path | None = None):
        self.env_file = env_file
        self.profile = profile or profile_for_shell()

    def _load(self) -> dict[str, str]:
        if not self.env_file.is_file():
            return {}
        values: dict[str, str] = {}
        for line in self.env_file.read_text(encoding="utf-8").splitlines():
            match = _EXPORT_RE.match(line.strip())
            if match:
                values[match.group(1)] = _unquote(match.group(2))
        return values

    def read(self, name: str) -> str | None:
        value = self._load().get(name)
        if value is None and name == "PATH":
            return PATH_SENTINEL
        return value

    def write(self, name: str, value: str) -> None:
        if name == "PATH" and PATH_SENTINEL not in value.split(self.separator):
            value = self.separator.join(p for p in (value, PATH_SENTINEL) if p)

        try:
            values = self._load()
            values[name] = value
            self._save(values)
            self.ensure_hook()
        except OSError as exc:
            raise EnvironmentUpdateError(
                f"Could not persist {name}: {exc}", variable=name,
            ) from exc
        logger.debug("Persisted %s in %s", name, self.env_file)

    def _save(self, values: dict[str, str]) -> None:
        lines = ["# Managed by rtswitch. Changes are overwritten on activation."]
        lines += [f'export {k}="{_quote(v)}"' for k, v in values.items()]
        content = "\n".join(lines) + "\n"

        self.env_file.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=self.env_file.parent, prefix=".env_", suffix=".tmp",
        )
        os.close(fd)
        tmp = Path(tmp_path)
        try:
            tmp.write_text(content, encoding="utf-8")
            os.replace(tmp, self.env_file)
        except Exception:
            tmp.unlink(missing_ok=True)
            raise

    def hook_line(self) -> str:
        quoted = _quote(str(self.env_file))
        return f'[ -f "{quoted}" ] && . "{quoted}"'

    def ensure_hook(self) -> bool:
        """Append the source hook to the profile once.

        The profile is backed up before its first edit.

        Returns:
            True if the profile was modified.
        """
        hook = self.hook_line()
        existing = ""
        if self.profile.is_file():
            existing = self.profile.read_text(encoding="utf-8")
            if hook in existing:
                return False
            backup = self.profile.with_name(f"{self.profile.name}.backup.{int(time.time())}")
            try:
                shutil.copy2(self.profile, backup)
            except OSError as exc:
                logger.warning("Could not back up %s: %s", self.profile, exc)

        self.profile.parent.mkdir(parents=True, exist_ok=True)
        with open(self.profile, "a", encoding="utf-8") as f:
            if existing and not existing.endswith("\n"):
                f.write("\n")
            f.write(f"\n{_HOOK_MARKER}\n{hook}\n")
        logger.info("Added rtswitch hook to %s", self.profile)
        return True


# ── Windows: registry ───────────────────────────────────────────

_HWND_BROADCAST = 0xFFFF
_WM_SETTINGCHANGE = 0x001A
_SMTO_ABORTIFHUNG = 0x0002


class WindowsEnvironmentStore(EnvironmentStore):
    """``HKEY_CURRENT_USER\\Environment`` — the user's persistent variables."""

    separator = ";"
    case_insensitive = True

    def read(self, name: str) -> str | None:
        import winreg

        with winreg.OpenKey(winreg.HKEY_CURRENT_USER, "Environment") as key:
            try:
                value, _kind = winreg.QueryValueEx(key, name)
            except FileNotFoundError:
                return None
        return str(value)

    def write(self, name: str, value: str) -> None:
        import winreg

        try:
            with winreg.OpenKey(
                winreg.HKEY_CURRENT_USER, "Environment", 0, winreg.KEY_SET_VALUE,
            ) as key:
                winreg.SetValueEx(key, name, 0, winreg.REG_EXPAND_SZ, value)
        except OSError as exc:
            raise EnvironmentUpdateError(
                f"Could not persist {name}: {exc}", variable=name,
            ) from exc
        self._broadcast()
        logger.debug("Persisted %s in HKCU\\Environment", name)

    def _broadcast(self) -> None:
        """Tell Explorer (and new consoles) the environment changed."""
        import ctypes
        from ctypes import wintypes

        result = wintypes.DWORD()
        sent = ctypes.windll.user32.SendMessageTimeoutW(
            _HWND_BROADCAST, _WM_SETTINGCHANGE, 0, "Environment",
            _SMTO_ABORTIFHUNG, 5000, ctypes.byref(result),
        )
        if not sent:
            logger.warning("WM_SETTINGCHANGE broadcast timed out")


def default_store(root: Path, *, windows: bool, persist: bool = True,
                  profile: Path | None = None) -> EnvironmentStore:
    """The store matching the host and the ``persist_environment`` setting."""
    if not persist:
        return MemoryEnvironmentStore(persisted=False)
    if windows:
        return WindowsEnvironmentStore()
    return ProfileEnvironmentStore(root / ENV_FILE_NAME, profile)
