"""
Configuration loader — reads config.yml into ``Settings``.

Lookup order: explicit ``--config`` path, ``$RTS_CONFIG``, then
``~/.config/rtswitch/config.yml``.  A missing default file just means
defaults; an explicitly named file that is missing or invalid is a
``ConfigError``.  ``RTS_HOME`` and ``RTS_TIMEOUT`` override the file.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from rtswitch import __version__
from rtswitch.core.services.runtimes.data.constants import DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("~/.config/rtswitch/config.yml")
DEFAULT_ROOT = "~/.rtswitch"


class ConfigError(Exception):
    """Raised when the configuration file is invalid or missing."""


class Settings(BaseModel):
    """Effective settings for one run."""

    root: Path = Field(default=Path(DEFAULT_ROOT), validate_default=True)
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    user_agent: str = f"rtswitch/{__version__}"
    persist_environment: bool = True
    shell_profile: Path | None = None

    @field_validator("root", "shell_profile", mode="after")
    @classmethod
    def _expand(cls, value: Path | None) -> Path | None:
        if value is None:
            return None
        return Path(os.path.expandvars(os.path.expanduser(str(value))))


def find_config_file(explicit: Path | None = None) -> tuple[Path | None, bool]:
    """Resolve which config file to read.

    Returns:
        ``(path, required)`` — ``required`` is True when the user named
        the file (flag or env var), so its absence is an error.
    """
    if explicit is not None:
        return explicit, True
    env_path = os.environ.get("RTS_CONFIG")
    if env_path:
        return Path(env_path).expanduser(), True
    default = DEFAULT_CONFIG_PATH.expanduser()
    return (default if default.is_file() else None), False


def _read_yaml(path: Path) -> dict:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")
    return data


def load_settings(path: Path | None = None) -> Settings:
    """Load and validate settings.

    Args:
        path: Explicit config file (``--config``).

    Raises:
        ConfigError: If a named file is missing, or any file is invalid.
    """
    config_path, required = find_config_file(path)
    data: dict = {}
    if config_path is not None:
        if not config_path.is_file():
            if required:
                raise ConfigError(f"Config file not found: {config_path}")
        else:
            logger.debug("Loading config from %s", config_path)
            data = _read_yaml(config_path)

    env_home = os.environ.get("RTS_HOME")
    if env_home:
        data["root"] = env_home
    env_timeout = os.environ.get("RTS_TIMEOUT")
    if env_timeout:
        data["timeout"] = env_timeout

    try:
        settings = Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e

    logger.debug("Managed root: %s", settings.root)
    return settings
