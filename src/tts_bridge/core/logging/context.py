"""
Request Context and Configuration State for Logging.

The request id lives in a ContextVar so that log lines emitted while a
conversion runs (including from chunk worker threads started with a
copied context) carry the same correlation id.

Environment Variables:
    - TTS_BRIDGE_SETTINGS: Settings file to read the logging section from
    - TTS_BRIDGE_LOG_LEVEL: Override log level (1-4 or name)
    - TTS_BRIDGE_LOG_DIR: Directory for the JSONL log file
    - TTS_BRIDGE_JSONL_FILE: JSONL filename
    - TTS_BRIDGE_LOG_ROTATE_BYTES: Max log file size
    - TTS_BRIDGE_LOG_ROTATE_BACKUP: Number of rotated files to keep
"""
from __future__ import annotations

import os
from contextvars import ContextVar
from typing import Any, Dict

from .levels import LEVEL_NAMES, LogLevel

_request_id: ContextVar[str] = ContextVar("request_id", default="-")

_configured: bool = False
_log_config: Dict[str, Any] = {}
_current_level: LogLevel = LogLevel.NORMAL


def get_request_id() -> str:
    """Current request id, or "-" outside a conversion."""
    return _request_id.get()


def set_request_id(rid: str) -> None:
    _request_id.set(rid)


def get_level() -> LogLevel:
    return _current_level


def set_level(level: LogLevel) -> None:
    global _current_level
    _current_level = level


def get_level_name() -> str:
    return LEVEL_NAMES.get(_current_level, "NORMAL")


def is_configured() -> bool:
    return _configured


def set_configured(value: bool) -> None:
    global _configured
    _configured = value


def get_log_config() -> Dict[str, Any]:
    return _log_config


def set_log_config(config: Dict[str, Any]) -> None:
    global _log_config
    _log_config = config


def read_logging_config() -> Dict[str, Any]:
    """
    Read logging configuration from the settings file and environment.

    Priority (highest first): environment, settings.yaml ``logging``
    section, defaults.
    """
    cfg: Dict[str, Any] = {}

    settings_path = os.getenv("TTS_BRIDGE_SETTINGS", "config/settings.yaml")
    try:
        from tts_bridge.core.config import load_settings
        settings = load_settings(settings_path, missing_ok=True)
        cfg.update(settings.raw.get("logging") or {})
    except Exception:
        # Logging must come up even when the settings file is broken;
        # load_settings reports the real error to the caller later.
        pass

    if os.getenv("TTS_BRIDGE_LOG_LEVEL"):
        cfg["level"] = os.environ["TTS_BRIDGE_LOG_LEVEL"]
    if os.getenv("TTS_BRIDGE_LOG_DIR"):
        cfg["log_dir"] = os.environ["TTS_BRIDGE_LOG_DIR"]
    if os.getenv("TTS_BRIDGE_JSONL_FILE"):
        cfg["jsonl_file"] = os.environ["TTS_BRIDGE_JSONL_FILE"]
    for env_name, key in (
        ("TTS_BRIDGE_LOG_ROTATE_BYTES", "rotate_max_bytes"),
        ("TTS_BRIDGE_LOG_ROTATE_BACKUP", "rotate_backup_count"),
    ):
        value = os.getenv(env_name)
        if value:
            try:
                cfg[key] = int(value)
            except ValueError:
                pass

    return cfg
