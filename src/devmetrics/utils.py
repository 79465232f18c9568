"""
DevMetrics Utility Functions

This module provides helper functions for:
    - Configuration management
    - Logging utilities
"""

import copy
import logging
from pathlib import Path
from typing import Dict, Any, Optional

import yaml

# Configure module logger
logger = logging.getLogger("devmetrics")

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


# =============================================================================
# Configuration Management
# =============================================================================

def get_default_config() -> Dict[str, Any]:
    """Return default configuration values."""
    return {
        "exporter": {
            "listen_address": "0.0.0.0",
            "port": 9835,
            "namespace": "node",
        },
        "collectors": {
            "netdev": {
                "enabled": True,
                "ignored_devices": [],
                "ignored_pattern": None,
                "accepted_pattern": None,
            },
            "gpu": {
                "enabled": True,
                "average_window_seconds": 10,
            },
        },
        "debug": {
            "verbose": False,
            "log_level": "INFO",
            "save_debug_logs": False,
            "debug_log_file": "logs/debug.log",
        },
    }


def merge_config(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Recursively merge ``override`` into a copy of ``base``.

    Nested dictionaries are merged key by key. An empty (None) value over a
    section keeps that section's defaults; any other value in ``override``
    replaces the one in ``base``.
    """
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if value is None and isinstance(merged.get(key), dict):
            continue
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        Configuration dictionary, merged over the defaults
    """
    if config_path is None:
        config_path = PROJECT_ROOT / "configs" / "config.yaml"

    config_path = Path(config_path)

    if not config_path.exists():
        logger.warning(f"Config file not found: {config_path}. Using defaults.")
        return get_default_config()

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Error loading config: {e}")
        return get_default_config()

    if not isinstance(config, dict):
        return get_default_config()
    return merge_config(get_default_config(), config)


# =============================================================================
# Logging Utilities
# =============================================================================

CONSOLE_HANDLER_NAME = "devmetrics.console"
FILE_HANDLER_NAME = "devmetrics.file"


def _install_handler(logger: logging.Logger, handler: logging.Handler, name: str) -> None:
    """Attach ``handler`` under ``name``, replacing one installed earlier."""
    for existing in logger.handlers[:]:
        if existing.get_name() == name:
            logger.removeHandler(existing)
            existing.close()
    handler.set_name(name)
    logger.addHandler(handler)


def setup_logging(config: Optional[Dict[str, Any]] = None) -> logging.Logger:
    """
    Set up the ``devmetrics`` logger from the ``debug`` config section.

    Safe to call more than once: handlers installed by an earlier call are
    replaced, not duplicated.
    """
    config = config or get_default_config()
    debug_config = config.get("debug") or {}

    level_name = str(debug_config.get("log_level") or "INFO").upper()
    log_level = getattr(logging, level_name, logging.INFO)
    if not isinstance(log_level, int):
        log_level = logging.INFO

    logger = logging.getLogger("devmetrics")
    logger.setLevel(log_level)

    if debug_config.get("verbose") or log_level == logging.DEBUG:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)
        console_handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        ))
        _install_handler(logger, console_handler, CONSOLE_HANDLER_NAME)

    if debug_config.get("save_debug_logs"):
        log_file = Path(debug_config.get("debug_log_file") or "logs/debug.log")
        if not log_file.is_absolute():
            log_file = PROJECT_ROOT / log_file
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"
        ))
        _install_handler(logger, file_handler, FILE_HANDLER_NAME)

    return logger
