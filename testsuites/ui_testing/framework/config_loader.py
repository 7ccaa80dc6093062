"""
================================================================================
Configuration Loader
================================================================================

Harness settings come from config/config.yaml. Any dotted key can be replaced
at run time by an environment variable named after its path, which is how
run_tests.py passes --browser / --no-headless down to pytest workers.

    ui.base_url          -> UI_BASE_URL
    ui.timeouts.settle   -> UI_TIMEOUTS_SETTLE
    runner.retries       -> RUNNER_RETRIES

Environment values arrive as strings; they are coerced to the type of the
default the caller passes to get().

This module also owns the Timeouts bundle the page components wait with,
and init_logger(), which installs the Loguru sinks once per process.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from loguru import logger


REPO_ROOT = Path(__file__).resolve().parents[3]
DEFAULT_CONFIG_PATH = REPO_ROOT / "config" / "config.yaml"

DEFAULT_LOG_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"
)

_TRUTHY = frozenset({"1", "true", "yes", "on"})

_logger_ready: bool = False


class ConfigurationError(Exception):
    """Config file exists but cannot be parsed."""


def env_var_for(key: str) -> str:
    """Environment variable that overrides a dotted config key."""
    return key.replace(".", "_").upper()


def coerce_env_value(raw: str, like: Any) -> Any:
    """Convert an environment string to the type of `like`; keep it if that fails."""
    if isinstance(like, bool):
        return raw.strip().lower() in _TRUTHY
    for kind in (int, float):
        if isinstance(like, kind):
            try:
                return kind(raw)
            except ValueError:
                logger.warning(f"⚠️ Cannot read {raw!r} as {kind.__name__}, using it as text")
                return raw
    return raw


class ConfigLoader:
    """
    Process-wide view of the harness configuration.

    Lookup order for get(key, default): environment override, YAML value,
    then the default. The first instantiation fixes the file; later calls
    return the same object until reset().
    """

    _instance: Optional["ConfigLoader"] = None
    _data: Dict[str, Any] = {}

    def __new__(cls, config_path: Optional[Path] = None) -> "ConfigLoader":
        if cls._instance is None:
            instance = super().__new__(cls)
            instance._ready = False
            cls._instance = instance
        return cls._instance

    def __init__(self, config_path: Optional[Path] = None) -> None:
        if self._ready:
            return
        self.path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        self._data = self._read(self.path)
        self._ready = True

    @staticmethod
    def _read(path: Path) -> Dict[str, Any]:
        if not path.is_file():
            logger.warning(f"⚠️ No configuration at {path}; running on defaults and environment")
            return {}
        try:
            with path.open("r", encoding="utf-8") as handle:
                data = yaml.safe_load(handle)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"{path} is not valid YAML: {e}") from e
        logger.debug(f"Configuration loaded: {path}")
        return data or {}

    def _walk(self, key: str) -> Any:
        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, Mapping) or part not in node:
                return None
            node = node[part]
        return node

    def get(self, key: str, default: Any = None) -> Any:
        """
        Read a dotted key.

        Args:
            key: Path such as "ui.timeouts.transition"
            default: Returned when the key is absent; also decides how an
                     environment override is coerced

        Returns:
            Override, file value or default
        """
        raw = os.environ.get(env_var_for(key))
        if raw is not None:
            return coerce_env_value(raw, default)
        value = self._walk(key)
        return default if value is None else value

    def get_section(self, section: str) -> Dict[str, Any]:
        """Top-level mapping from the file (no environment overrides)."""
        value = self._data.get(section)
        return value if isinstance(value, dict) else {}

    def reload(self) -> None:
        """Re-read the same file."""
        self._data = self._read(self.path)
        logger.info(f"Configuration reloaded: {self.path}")

    @classmethod
    def reset(cls) -> None:
        """Forget the current instance so the next ConfigLoader() reads again."""
        cls._instance = None
        cls._data = {}


@dataclass(frozen=True)
class Timeouts:
    """
    Wait bounds in milliseconds, read from `ui.timeouts.*`.

    element       generic visibility
    transition    slide fade completing
    field_reveal  next form step becoming visible
    settle        committed step showing its outcome
    redirect      terminal address after the last step
    toggle        disclosure panel flipping state
    overlay       gallery opening or closing
    stale_error   how long an error shown before a commit must persist to count
    """
    element: int = 5000
    transition: int = 1000
    field_reveal: int = 5000
    settle: int = 5000
    redirect: int = 10000
    toggle: int = 1000
    overlay: int = 2000
    stale_error: int = 500

    @classmethod
    def from_config(cls, config: Optional[ConfigLoader] = None) -> "Timeouts":
        config = config or ConfigLoader()
        values = {}
        for item in fields(cls):
            values[item.name] = int(config.get(f"ui.timeouts.{item.name}", item.default))
        return cls(**values)


def init_logger(
    level: Optional[str] = None,
    format_str: Optional[str] = None,
    config: Optional[ConfigLoader] = None,
) -> None:
    """
    Install the Loguru sinks: stderr always, plus a rotating file when
    `logging.file` is set. Only the first call has an effect.
    """
    global _logger_ready

    if _logger_ready:
        return

    config = config or ConfigLoader()
    log_level = (level or config.get("logging.level", "INFO")).upper()
    log_format = format_str or config.get("logging.format", DEFAULT_LOG_FORMAT)

    logger.remove()
    logger.add(sys.stderr, level=log_level, format=log_format, colorize=True, diagnose=False)

    log_file = config.get("logging.file")
    if log_file:
        log_path = Path(log_file)
        if not log_path.is_absolute():
            log_path = REPO_ROOT / log_path
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path,
            level=log_level,
            format=log_format,
            rotation=config.get("logging.rotation", "10 MB"),
            retention=config.get("logging.retention", "7 days"),
            encoding="utf-8",
        )

    _logger_ready = True
    logger.debug(f"Logger ready at {log_level}")


__all__ = [
    "ConfigLoader",
    "ConfigurationError",
    "Timeouts",
    "coerce_env_value",
    "env_var_for",
    "init_logger",
]
