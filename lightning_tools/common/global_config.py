"""
================================================================================
Global Configuration for the Lightning Suite
================================================================================

This module provides centralized configuration management for the suite,
including logging setup, the run summary stream and configuration file loading.

Features:
    - YAML-based configuration loading (config/config.yaml + config/{ENV}.yaml)
    - Environment variable overrides (SECTION__KEY=value)
    - Centralized Loguru logging configuration
    - A dedicated RUN_SUMMARY stream for condensed per-scenario outcomes

Author: Automation Team
License: MIT
================================================================================
"""

import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from loguru import logger

# Global configuration storage
_config: Dict[str, Any] = {}
_logger_initialized: bool = False

RUN_SUMMARY_CHANNEL = "RUN_SUMMARY"

# Condensed outcome stream: one line per scenario start/status and per handled error
RUN_SUMMARY = logger.bind(channel=RUN_SUMMARY_CHANNEL)


def _is_run_summary(record: Dict[str, Any]) -> bool:
    return record["extra"].get("channel") == RUN_SUMMARY_CHANNEL


def init_logger(level: str = None, format_str: str = None) -> None:
    """
    Initializes the global Loguru logger with consistent configuration.

    Adds the stderr sink, the optional rotating diagnostic file and the run
    summary file, which only receives records bound to RUN_SUMMARY.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to config value.
        format_str: Custom log format string. Defaults to config value.
    """
    global _logger_initialized

    if _logger_initialized:
        return

    # Load config first to get logging settings
    _ensure_config_loaded()

    log_level = level or get_config("logging.level", "INFO")
    log_format = format_str or get_config(
        "logging.format",
        "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"
    )

    logger.remove()
    logger.add(
        sys.stderr,
        level=log_level.upper(),
        format=log_format,
        colorize=True,
        backtrace=True,
        diagnose=True,
    )

    log_file = get_config("logging.file", None)
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            level=log_level.upper(),
            format=log_format.replace("{level: <8}", "{level}"),
            rotation=get_config("logging.rotation", "10 MB"),
            retention=get_config("logging.retention", "7 days"),
            compression="zip",
        )

    summary_file = get_config("logging.run_summary_file", None)
    if summary_file:
        Path(summary_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            summary_file,
            level="INFO",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {message}",
            filter=_is_run_summary,
        )

    _logger_initialized = True
    logger.debug(f"Logger initialized with level: {log_level}")


def get_logger():
    """
    Returns the configured Loguru logger instance.

    Ensures the logger is initialized before returning.
    """
    if not _logger_initialized:
        init_logger()
    return logger


def _ensure_config_loaded() -> None:
    global _config
    if not _config:
        _load_config()


def _find_config_dir() -> Optional[Path]:
    possible_config_dirs = [
        Path("config"),
        Path(__file__).parent.parent.parent / "config",
    ]
    for dir_path in possible_config_dirs:
        if dir_path.exists():
            return dir_path
    return None


def _load_config(config_dir: Optional[Union[str, Path]] = None) -> None:
    """
    Loads configuration from YAML files and environment variables.

    Configuration loading order:
        1. Default configuration file (config/config.yaml)
        2. Environment-specific configuration (config/{ENV}.yaml)
        3. Environment variables (override YAML settings)
    """
    global _config

    config_dir = Path(config_dir) if config_dir else _find_config_dir()

    if not config_dir or not config_dir.exists():
        logger.warning("No configuration directory found. Using defaults.")
        _config = _get_defaults()
        _apply_env_overrides()
        return

    default_config_path = config_dir / "config.yaml"
    if default_config_path.exists():
        with open(default_config_path, "r", encoding="utf-8") as f:
            _config = _deep_merge(_get_defaults(), yaml.safe_load(f) or {})
        logger.debug(f"Loaded configuration from {default_config_path}")
    else:
        _config = _get_defaults()

    env = os.getenv("ENVIRONMENT", os.getenv("ENV", "dev"))
    env_config_path = config_dir / f"{env.lower()}.yaml"
    if env_config_path.exists():
        with open(env_config_path, "r", encoding="utf-8") as f:
            env_config = yaml.safe_load(f) or {}
        _config = _deep_merge(_config, env_config)
        logger.debug(f"Merged environment config: {env_config_path}")

    _apply_env_overrides()


def _get_defaults() -> Dict[str, Any]:
    """
    Returns default configuration values.
    """
    return {
        "logging": {
            "level": "INFO",
            "format": "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}",
            "run_summary_file": "reports/run_summary.log",
        },
        "environment": "DEV",
        "policy": {
            "treat_technical_errors_as_skips": True,
            "assert_rethrow": True,
        },
        "waits": {
            "short": 7,
            "default": 61,
            "long": 360,
            "fifteen": 15,
            "two": 2,
            "poll_interval": 0.2,
            "clickable_poll_interval": 0.25,
        },
        "browser": {
            "type": "chromium",
            "headless": True,
            "live": False,
            "action_timeout_ms": 5000,
        },
    }


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Deep merges two dictionaries, with override taking precedence.
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _apply_env_overrides() -> None:
    """
    Applies environment variable overrides to the configuration.

    Environment variable naming convention:
        - Use double underscore to separate nested keys
        - Example: LOGGING__LEVEL=DEBUG overrides logging.level
        - Values are parsed as YAML scalars, so "true" and "15" become bool/int
        - Existing keys match case-insensitively (ENVIRONMENTS__DEV__URL
          overrides environments.DEV.url); new keys are added lower case
    """
    global _config

    for key, value in os.environ.items():
        if "__" not in key:
            continue
        parts = key.split("__")
        if not all(parts):
            continue
        _set_nested(_config, _match_keys(_config, parts), _parse_scalar(value))


def _match_keys(d: Dict, parts: list) -> list:
    keys = []
    node: Any = d
    for part in parts:
        existing = None
        if isinstance(node, dict):
            existing = next((k for k in node if str(k).lower() == part.lower()), None)
        keys.append(existing if existing is not None else part.lower())
        node = node.get(existing) if existing is not None else None
    return keys


def _parse_scalar(value: str) -> Any:
    try:
        parsed = yaml.safe_load(value)
    except yaml.YAMLError:
        return value
    if isinstance(parsed, (dict, list)) or parsed is None:
        return value
    return parsed


def _set_nested(d: Dict, keys: list, value: Any) -> None:
    for key in keys[:-1]:
        existing = d.get(key)
        if not isinstance(existing, dict):
            existing = d[key] = {}
        d = existing
    d[keys[-1]] = value


def get_config(key: str, default: Any = None) -> Any:
    """
    Retrieves a configuration value using a dot-separated key path.

    Args:
        key: Dot-separated key path (e.g., "logging.level", "waits.short").
        default: Default value to return if key is not found.

    Returns:
        The configuration value, or the default if not found.

    Examples:
        >>> get_config("waits.short", 7)
        7
        >>> get_config("policy.treat_technical_errors_as_skips")
        True
    """
    _ensure_config_loaded()

    value = _config
    for k in key.split("."):
        if isinstance(value, dict) and k in value:
            value = value[k]
        else:
            return default

    return value


def set_config(key: str, value: Any) -> None:
    """
    Sets a configuration value at runtime.

    Args:
        key: Dot-separated key path.
        value: Value to set.
    """
    _ensure_config_loaded()
    _set_nested(_config, key.split("."), value)


def reload_config(config_dir: Optional[Union[str, Path]] = None) -> None:
    """
    Reloads the configuration from files.

    Args:
        config_dir: Directory holding config.yaml. Defaults to the usual lookup.
    """
    global _config
    _config = {}
    _load_config(config_dir)
    logger.info("Configuration reloaded.")
