"""
Driver Manager.

Maps driver names to converter factories, builds converters lazily on
first use and caches one instance per name.

Driver Selection:
    manager.driver() uses, in order:
        1. TTS_BRIDGE_DRIVER environment variable
        2. tts.driver from settings
        3. "null"

Built-in Drivers:
    - polly: PollyConverter (boto3)
    - google: GoogleConverter (google-cloud-texttospeech)
    - null: NullConverter

The SDK of a built-in driver is checked when the driver is first created
(see core/requirements.py); a missing SDK raises ConfigurationError with
the pip command to run.

Usage:
    manager = get_manager(load_settings())
    result = manager.driver("polly").convert("Hello world")

    # Custom drivers
    manager.extend("acme", lambda settings: AcmeConverter(settings))
    manager.driver("acme").convert("Hello")
"""
from __future__ import annotations

import os
import threading
from typing import Callable, Dict, List, Optional

from tts_bridge.core.config import Defaults, Settings
from tts_bridge.core.errors import ConfigurationError
from tts_bridge.core.logging import get_logger, info, verbose
from tts_bridge.core.requirements import ensure_driver_ready
from tts_bridge.tts.converter import BaseConverter

_LOG = get_logger("tts-bridge.manager")

DriverFactory = Callable[[Settings], BaseConverter]


def _create_polly(settings: Settings) -> BaseConverter:
    ensure_driver_ready("polly")
    from tts_bridge.tts.converters.polly import PollyConverter
    return PollyConverter(settings)


def _create_google(settings: Settings) -> BaseConverter:
    ensure_driver_ready("google")
    from tts_bridge.tts.converters.google import GoogleConverter
    return GoogleConverter(settings)


def _create_null(settings: Settings) -> BaseConverter:
    from tts_bridge.tts.converters.null import NullConverter
    return NullConverter(settings)


BUILTIN_DRIVERS: Dict[str, DriverFactory] = {
    "polly": _create_polly,
    "google": _create_google,
    "null": _create_null,
}


class DriverManager:
    """
    Registry and cache of converters.

    Args:
        settings: Application settings passed to every factory.
    """

    def __init__(self, settings: Settings):
        self._settings = settings
        self._factories: Dict[str, DriverFactory] = dict(BUILTIN_DRIVERS)
        self._drivers: Dict[str, BaseConverter] = {}
        self._lock = threading.RLock()

    @property
    def settings(self) -> Settings:
        return self._settings

    def get_default_driver(self) -> str:
        name = os.getenv("TTS_BRIDGE_DRIVER") or self._settings.driver or Defaults.DRIVER
        return name.strip().lower()

    def driver(self, name: Optional[str] = None) -> BaseConverter:
        """
        Get the converter for ``name`` (default driver when None).

        Raises:
            ConfigurationError: If the driver is unknown or cannot be created.
        """
        name = (name or self.get_default_driver()).strip().lower()

        converter = self._drivers.get(name)
        if converter is not None:
            return converter

        with self._lock:
            converter = self._drivers.get(name)
            if converter is None:
                factory = self._factories.get(name)
                if factory is None:
                    raise ConfigurationError(
                        f"Driver [{name}] not supported. Available: {', '.join(self.available_drivers())}",
                        details={"driver": name},
                    )
                converter = factory(self._settings)
                self._drivers[name] = converter
                info(_LOG, "driver_created", driver=name, converter=type(converter).__name__)
        return converter

    def engine(self, name: Optional[str] = None) -> BaseConverter:
        """Alias of driver()."""
        return self.driver(name)

    def extend(self, name: str, factory: DriverFactory) -> "DriverManager":
        """Register a custom driver factory, replacing any cached instance of that name."""
        name = name.strip().lower()
        if not name:
            raise ConfigurationError("Driver name must not be empty")
        with self._lock:
            self._factories[name] = factory
            self._drivers.pop(name, None)
        verbose(_LOG, "driver_registered", driver=name)
        return self

    def forget_drivers(self) -> "DriverManager":
        """Drop all cached converter instances."""
        with self._lock:
            self._drivers.clear()
        return self

    def available_drivers(self) -> List[str]:
        return sorted(self._factories)

    def created_drivers(self) -> List[str]:
        return sorted(self._drivers)


_manager: Optional[DriverManager] = None
_manager_lock = threading.Lock()


def get_manager(settings: Settings) -> DriverManager:
    """
    Get or create the global DriverManager.

    Thread-safe lazy singleton. The settings of the first call are kept;
    call reset_manager() to start over with new settings.
    """
    global _manager
    if _manager is None:
        with _manager_lock:
            if _manager is None:
                _manager = DriverManager(settings)
    return _manager


def reset_manager() -> None:
    """Reset the global manager instance (used by tests)."""
    global _manager
    with _manager_lock:
        _manager = None
