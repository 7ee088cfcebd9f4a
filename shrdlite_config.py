"""
shrdlite_config.py

Runtime configuration for the Shrdlite interpreter and planner.

Values are resolved in three layers, later layers winning:
1. Defaults from common.constants
2. An optional YAML file (SHRDLITE_CONFIG, else config.yaml next to this module)
3. SHRDLITE_* environment variables

Usage:
    from shrdlite_config import get_config

    config = get_config()
    timeout = config.search.timeout_seconds

Environment variables:
    SHRDLITE_CONFIG                 path of the YAML file
    SHRDLITE_SEARCH_TIMEOUT         float, seconds
    SHRDLITE_HEURISTIC              "max" or "sum"
    SHRDLITE_MAX_GOAL_COMBINATIONS  int
    SHRDLITE_LOG_LEVEL              logging level name for the console
    SHRDLITE_FILE_LOGGING           "1" to enable rotating log files
"""

import logging
import os
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from common.constants import (
    CACHE_HEURISTIC_MAXSIZE,
    CACHE_HEURISTIC_TTL,
    CACHE_RESOLUTION_MAXSIZE,
    CACHE_RESOLUTION_TTL,
    DEFAULT_HEURISTIC_STRATEGY,
    DEFAULT_MAX_GOAL_COMBINATIONS,
    DEFAULT_SEARCH_TIMEOUT,
    HEURISTIC_MAX,
    HEURISTIC_SUM,
)
from shrdlite_exceptions import InvalidConfigError, wrap_exception

PROJECT_ROOT = Path(__file__).resolve().parent
DEFAULT_CONFIG_FILE = PROJECT_ROOT / "config.yaml"


@dataclass
class SearchConfig:
    timeout_seconds: float = DEFAULT_SEARCH_TIMEOUT
    heuristic: str = DEFAULT_HEURISTIC_STRATEGY


@dataclass
class InterpreterConfig:
    max_goal_combinations: int = DEFAULT_MAX_GOAL_COMBINATIONS


@dataclass
class CacheConfig:
    heuristic_maxsize: int = CACHE_HEURISTIC_MAXSIZE
    heuristic_ttl: int = CACHE_HEURISTIC_TTL
    resolution_maxsize: int = CACHE_RESOLUTION_MAXSIZE
    resolution_ttl: int = CACHE_RESOLUTION_TTL


@dataclass
class LoggingConfig:
    console_level: str = "WARNING"
    file_logging: bool = False
    log_dir: str = "logs"


@dataclass
class ShrdliteConfig:
    """Complete configuration, one dataclass per section."""

    search: SearchConfig = field(default_factory=SearchConfig)
    interpreter: InterpreterConfig = field(default_factory=InterpreterConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def validate(self) -> None:
        """Raise InvalidConfigError on the first invalid value."""
        if self.search.timeout_seconds <= 0:
            raise InvalidConfigError(
                f"search.timeout_seconds must be positive, got {self.search.timeout_seconds}"
            )
        if self.search.heuristic not in (HEURISTIC_MAX, HEURISTIC_SUM):
            raise InvalidConfigError(
                f"search.heuristic must be '{HEURISTIC_MAX}' or '{HEURISTIC_SUM}', "
                f"got '{self.search.heuristic}'"
            )
        if self.interpreter.max_goal_combinations <= 0:
            raise InvalidConfigError(
                "interpreter.max_goal_combinations must be positive, "
                f"got {self.interpreter.max_goal_combinations}"
            )
        for name in ("heuristic_maxsize", "heuristic_ttl", "resolution_maxsize", "resolution_ttl"):
            if getattr(self.cache, name) <= 0:
                raise InvalidConfigError(
                    f"cache.{name} must be positive, got {getattr(self.cache, name)}"
                )
        if not isinstance(logging.getLevelName(self.logging.console_level.upper()), int):
            raise InvalidConfigError(
                f"logging.console_level is not a logging level: '{self.logging.console_level}'"
            )

    @property
    def console_log_level(self) -> int:
        return logging.getLevelName(self.logging.console_level.upper())


def _apply_section(section: Any, values: Dict[str, Any], section_name: str) -> None:
    for key, value in values.items():
        if not hasattr(section, key):
            raise InvalidConfigError(f"Unknown configuration key '{section_name}.{key}'")
        current = getattr(section, key)
        try:
            if isinstance(current, bool):
                value = bool(value)
            elif isinstance(current, (int, float)):
                value = type(current)(value)
            else:
                value = str(value)
        except (TypeError, ValueError) as e:
            raise wrap_exception(
                e, InvalidConfigError, f"Invalid value for '{section_name}.{key}'", value=value
            )
        setattr(section, key, value)


def _load_yaml(config_path: Path) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to YAML config file

    Returns:
        The parsed mapping, or {} if the file does not exist
    """
    if not config_path.exists():
        return {}

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise wrap_exception(e, InvalidConfigError, "Could not read config file", path=str(config_path))

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidConfigError(
            "Config file must contain a mapping", context={"path": str(config_path)}
        )
    return data


def _env_overrides(environ: Dict[str, str]) -> Dict[str, Dict[str, Any]]:
    overrides: Dict[str, Dict[str, Any]] = {}

    def put(section: str, key: str, value: Any) -> None:
        overrides.setdefault(section, {})[key] = value

    if "SHRDLITE_SEARCH_TIMEOUT" in environ:
        put("search", "timeout_seconds", environ["SHRDLITE_SEARCH_TIMEOUT"])
    if "SHRDLITE_HEURISTIC" in environ:
        put("search", "heuristic", environ["SHRDLITE_HEURISTIC"])
    if "SHRDLITE_MAX_GOAL_COMBINATIONS" in environ:
        put("interpreter", "max_goal_combinations", environ["SHRDLITE_MAX_GOAL_COMBINATIONS"])
    if "SHRDLITE_LOG_LEVEL" in environ:
        put("logging", "console_level", environ["SHRDLITE_LOG_LEVEL"])
    if "SHRDLITE_FILE_LOGGING" in environ:
        put("logging", "file_logging", environ["SHRDLITE_FILE_LOGGING"] == "1")
    return overrides


def load_config(
    config_path: Optional[Path] = None, environ: Optional[Dict[str, str]] = None
) -> ShrdliteConfig:
    """
    Build a validated configuration.

    Args:
        config_path: YAML file to read (default: SHRDLITE_CONFIG or config.yaml)
        environ: Environment mapping (default: os.environ)

    Returns:
        ShrdliteConfig instance

    Raises:
        InvalidConfigError: Unknown keys, unreadable file or invalid values
    """
    environ = dict(os.environ) if environ is None else environ
    if config_path is None:
        config_path = Path(environ.get("SHRDLITE_CONFIG", str(DEFAULT_CONFIG_FILE)))

    config = ShrdliteConfig()
    for layer in (_load_yaml(Path(config_path)), _env_overrides(environ)):
        for section_name, values in layer.items():
            section = getattr(config, section_name, None)
            if section is None or not isinstance(values, dict):
                raise InvalidConfigError(f"Unknown configuration section '{section_name}'")
            _apply_section(section, values, section_name)

    config.validate()
    return config


_config: Optional[ShrdliteConfig] = None
_config_lock = threading.Lock()


def get_config() -> ShrdliteConfig:
    """Return the process-wide configuration, loading it on first use."""
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:
                _config = load_config()
    return _config


def set_config(config: Optional[ShrdliteConfig]) -> None:
    """Replace the process-wide configuration (None forces a reload on next use)."""
    global _config
    with _config_lock:
        if config is not None:
            config.validate()
        _config = config
