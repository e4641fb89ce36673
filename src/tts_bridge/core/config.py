"""
Configuration Management for tts-bridge.

This module provides centralized configuration handling with:
    - Default values (Defaults class)
    - Dataclass-based views per provider
    - YAML file loading with environment variable overrides
    - Validation raising ConfigurationError

Configuration Hierarchy (highest priority first):
    1. Environment variables (TTS_BRIDGE_DRIVER, TTS_BRIDGE_LOG_LEVEL, ...)
    2. YAML config file (config/settings.yaml)
    3. Defaults class values

Example settings.yaml:
    tts:
      driver: polly
      language: en-US
      output_format: mp3
      text_type: text
      services:
        polly:
          credentials:
            key: AKIA...
            secret: ...
          region: eu-west-1
          voice: Amy

    storage:
      base_dir: ./storage

    logging:
      level: 2  # NORMAL
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional
import os
import yaml

from tts_bridge.core.errors import ConfigurationError


class Defaults:
    """
    Centralized default configuration values.

    Used whenever neither the YAML file nor the environment provides
    an override.
    """

    # ─────────────────────────────────────────────────────────────────────────
    # Conversion
    # ─────────────────────────────────────────────────────────────────────────
    DRIVER = "null"                 # Driver used when none is configured
    LANGUAGE = "en-US"              # Language code sent to providers
    OUTPUT_FORMAT = "mp3"           # Audio format of stored files
    TEXT_TYPE = "text"              # "text" or "ssml"
    CHUNK_WORKERS = 1               # 1 = chunks are synthesized sequentially

    # ─────────────────────────────────────────────────────────────────────────
    # Amazon Polly
    # ─────────────────────────────────────────────────────────────────────────
    POLLY_REGION = "us-east-1"
    POLLY_VERSION = "latest"
    POLLY_VOICE = "Amy"
    POLLY_ENGINE = "standard"
    POLLY_CHUNK_LIMIT = 3000        # Polly rejects longer billed text

    # ─────────────────────────────────────────────────────────────────────────
    # Google Cloud Text-to-Speech
    # ─────────────────────────────────────────────────────────────────────────
    GOOGLE_GENDER = "MALE"
    GOOGLE_CHUNK_LIMIT = 2000

    # ─────────────────────────────────────────────────────────────────────────
    # Storage
    # ─────────────────────────────────────────────────────────────────────────
    STORAGE_BASE_DIR = "./storage"
    STORAGE_PREFIX = "TTS"          # Sub-directory for generated files

    # ─────────────────────────────────────────────────────────────────────────
    # Text sources
    # ─────────────────────────────────────────────────────────────────────────
    SOURCE_TIMEOUT_S = 10.0         # HTTP timeout for url sources

    # ─────────────────────────────────────────────────────────────────────────
    # Logging
    # ─────────────────────────────────────────────────────────────────────────
    LOGGING_TEXT_PREVIEW_CHARS = 80
    LOGGING_LEVEL = 2               # 1=MINIMAL, 2=NORMAL, 3=VERBOSE, 4=DEBUG


OUTPUT_FORMATS = ("mp3", "ogg_vorbis", "pcm")
TEXT_TYPES = ("text", "ssml")
GOOGLE_GENDERS = ("MALE", "FEMALE", "NEUTRAL", "SSML_VOICE_GENDER_UNSPECIFIED")


@dataclass
class PollyConfig:
    """
    Amazon Polly driver configuration.

    ``credentials`` holds ``key``, ``secret`` and an optional ``token``.
    When it is empty the default boto3 credential chain is used.
    """
    credentials: Dict[str, Optional[str]] = field(default_factory=dict)
    region: str = Defaults.POLLY_REGION
    version: str = Defaults.POLLY_VERSION
    voice: str = Defaults.POLLY_VOICE
    engine: str = Defaults.POLLY_ENGINE
    chunk_limit: int = Defaults.POLLY_CHUNK_LIMIT


@dataclass
class GoogleConfig:
    """
    Google Cloud Text-to-Speech driver configuration.

    ``credentials`` is either a service-account info dict, a path to a
    service-account JSON file, or None for application default credentials.
    """
    credentials: Any = None
    voice: Optional[str] = None
    gender: str = Defaults.GOOGLE_GENDER
    chunk_limit: int = Defaults.GOOGLE_CHUNK_LIMIT


@dataclass
class StorageConfig:
    """Local storage for converted audio files."""
    base_dir: str = Defaults.STORAGE_BASE_DIR
    prefix: str = Defaults.STORAGE_PREFIX


@dataclass
class LoggingConfig:
    """
    Logging configuration.

    Log levels:
        1 = MINIMAL: Errors and failures only
        2 = NORMAL: Conversion lifecycle (default)
        3 = VERBOSE: Per-chunk timing
        4 = DEBUG: Request payload previews
    """
    text_preview_chars: int = Defaults.LOGGING_TEXT_PREVIEW_CHARS
    level: int = Defaults.LOGGING_LEVEL


@dataclass
class TTSConfig:
    """
    Validated configuration for converters and the driver manager.

    Usage:
        settings = load_settings("config/settings.yaml")
        config = TTSConfig.from_settings(settings)
        print(config.polly.voice)
    """
    driver: Optional[str] = None
    language: str = Defaults.LANGUAGE
    output_format: str = Defaults.OUTPUT_FORMAT
    text_type: str = Defaults.TEXT_TYPE
    chunk_workers: int = Defaults.CHUNK_WORKERS
    source_timeout_s: float = Defaults.SOURCE_TIMEOUT_S
    polly: PollyConfig = field(default_factory=PollyConfig)
    google: GoogleConfig = field(default_factory=GoogleConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_settings(cls, settings: "Settings") -> "TTSConfig":
        """
        Create TTSConfig from Settings with validation.

        Raises:
            ConfigurationError: If any value fails validation.
        """
        raw = settings.raw
        tts_raw = _section(raw, "tts")
        services = _section(tts_raw, "services")

        try:
            # ─────────────────────────────────────────────────────────────────
            # Polly
            # ─────────────────────────────────────────────────────────────────
            polly_raw = _section(services, "polly")
            polly_creds = polly_raw.get("credentials") or {}
            if not isinstance(polly_creds, dict):
                raise ConfigurationError("tts.services.polly.credentials must be a mapping")
            polly = PollyConfig(
                credentials=dict(polly_creds),
                region=str(_value(polly_raw, "region", Defaults.POLLY_REGION)),
                version=str(_value(polly_raw, "version", Defaults.POLLY_VERSION)),
                voice=str(_value(polly_raw, "voice", Defaults.POLLY_VOICE)),
                engine=str(_value(polly_raw, "engine", Defaults.POLLY_ENGINE)),
                chunk_limit=int(_value(polly_raw, "chunk_limit", Defaults.POLLY_CHUNK_LIMIT)),
            )
            cls._validate_positive("tts.services.polly.chunk_limit", polly.chunk_limit)

            # ─────────────────────────────────────────────────────────────────
            # Google
            # ─────────────────────────────────────────────────────────────────
            google_raw = _section(services, "google")
            google = GoogleConfig(
                credentials=google_raw.get("credentials"),
                voice=google_raw.get("voice"),
                gender=str(_value(google_raw, "gender", Defaults.GOOGLE_GENDER)).upper(),
                chunk_limit=int(_value(google_raw, "chunk_limit", Defaults.GOOGLE_CHUNK_LIMIT)),
            )
            cls._validate_positive("tts.services.google.chunk_limit", google.chunk_limit)
            cls._validate_choice("tts.services.google.gender", google.gender, GOOGLE_GENDERS)

            # ─────────────────────────────────────────────────────────────────
            # Storage
            # ─────────────────────────────────────────────────────────────────
            storage_raw = _section(raw, "storage")
            storage = StorageConfig(
                base_dir=str(_value(storage_raw, "base_dir", Defaults.STORAGE_BASE_DIR)),
                prefix=str(_value(storage_raw, "prefix", Defaults.STORAGE_PREFIX)).strip("/"),
            )

            # ─────────────────────────────────────────────────────────────────
            # Logging
            # ─────────────────────────────────────────────────────────────────
            logging_raw = _section(raw, "logging")
            log_level_raw = _value(logging_raw, "level", Defaults.LOGGING_LEVEL)
            if isinstance(log_level_raw, str):
                level_map = {
                    "MINIMAL": 1, "1": 1,
                    "NORMAL": 2, "INFO": 2, "2": 2,
                    "VERBOSE": 3, "3": 3,
                    "DEBUG": 4, "TRACE": 4, "4": 4,
                }
                log_level = level_map.get(log_level_raw.upper(), Defaults.LOGGING_LEVEL)
            else:
                log_level = int(log_level_raw)
            logging_cfg = LoggingConfig(
                text_preview_chars=int(_value(logging_raw, "text_preview_chars", Defaults.LOGGING_TEXT_PREVIEW_CHARS)),
                level=log_level,
            )
            cls._validate_non_negative("logging.text_preview_chars", logging_cfg.text_preview_chars)
            cls._validate_range("logging.level", logging_cfg.level, 1, 4)

            # ─────────────────────────────────────────────────────────────────
            # Conversion
            # ─────────────────────────────────────────────────────────────────
            driver = tts_raw.get("driver")
            config = cls(
                driver=str(driver).strip().lower() if driver else None,
                language=str(_value(tts_raw, "language", Defaults.LANGUAGE)),
                output_format=str(_value(tts_raw, "output_format", Defaults.OUTPUT_FORMAT)).lower(),
                text_type=str(_value(tts_raw, "text_type", Defaults.TEXT_TYPE)).lower(),
                chunk_workers=int(_value(tts_raw, "chunk_workers", Defaults.CHUNK_WORKERS)),
                source_timeout_s=float(_value(tts_raw, "source_timeout_s", Defaults.SOURCE_TIMEOUT_S)),
                polly=polly,
                google=google,
                storage=storage,
                logging=logging_cfg,
            )
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Invalid configuration value: {exc}") from exc

        cls._validate_choice("tts.output_format", config.output_format, OUTPUT_FORMATS)
        cls._validate_choice("tts.text_type", config.text_type, TEXT_TYPES)
        cls._validate_positive("tts.chunk_workers", config.chunk_workers)
        cls._validate_positive("tts.source_timeout_s", config.source_timeout_s)
        return config

    @staticmethod
    def _validate_positive(name: str, value: int | float) -> None:
        if value <= 0:
            raise ConfigurationError(f"{name} must be positive, got {value}")

    @staticmethod
    def _validate_non_negative(name: str, value: int | float) -> None:
        if value < 0:
            raise ConfigurationError(f"{name} must be non-negative, got {value}")

    @staticmethod
    def _validate_range(name: str, value: int | float, min_val: int | float, max_val: int | float) -> None:
        if not (min_val <= value <= max_val):
            raise ConfigurationError(f"{name} must be between {min_val} and {max_val}, got {value}")

    @staticmethod
    def _validate_choice(name: str, value: str, choices: tuple) -> None:
        if value not in choices:
            raise ConfigurationError(f"{name} must be one of {', '.join(choices)}, got {value!r}")


def _section(raw: Dict[str, Any], key: str) -> Dict[str, Any]:
    """Return a nested mapping, treating a missing or null section as empty."""
    value = raw.get(key) or {}
    if not isinstance(value, dict):
        raise ConfigurationError(f"'{key}' section must be a mapping, got {type(value).__name__}")
    return value


def _value(section: Dict[str, Any], key: str, default: Any) -> Any:
    """Return ``section[key]``, or ``default`` when the key is missing or null."""
    value = section.get(key)
    return default if value is None else value


@dataclass(frozen=True)
class Settings:
    """
    Immutable settings container loaded from YAML.

    This is the raw settings object before validation. Use
    get_config() to get the validated TTSConfig.
    """
    raw: Dict[str, Any]

    @property
    def driver(self) -> Optional[str]:
        """Configured driver name, or None when unset."""
        value = (self.raw.get("tts") or {}).get("driver")
        return str(value).strip().lower() if value else None

    def get_config(self) -> TTSConfig:
        """
        Get validated TTSConfig from these settings.

        Raises:
            ConfigurationError: If validation fails.
        """
        return TTSConfig.from_settings(self)


def load_settings(path: str = "config/settings.yaml", missing_ok: bool = False) -> Settings:
    """
    Load settings from a YAML configuration file.

    Environment variable overrides:
        - TTS_BRIDGE_DRIVER: Override tts.driver
        - TTS_BRIDGE_LANGUAGE: Override tts.language

    Args:
        path: Path to the YAML configuration file.
        missing_ok: Return empty settings instead of raising when the
            file does not exist.

    Raises:
        FileNotFoundError: If the file doesn't exist and missing_ok is False.
        ConfigurationError: If the file is not valid YAML.
    """
    p = Path(path)
    raw: Dict[str, Any] = {}
    if p.exists():
        try:
            with p.open("r", encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Invalid YAML in {p}: {exc}") from exc
        if not isinstance(raw, dict):
            raise ConfigurationError(f"Settings file {p} must contain a mapping")
    elif not missing_ok:
        raise FileNotFoundError(f"settings file not found: {p.resolve()}")

    driver = os.getenv("TTS_BRIDGE_DRIVER")
    language = os.getenv("TTS_BRIDGE_LANGUAGE")
    if (driver or language) and not raw.get("tts"):
        raw["tts"] = {}
    if driver:
        raw["tts"]["driver"] = driver
    if language:
        raw["tts"]["language"] = language

    return Settings(raw=raw)
