"""
Provider Converters.

Available Converters:
    - PollyConverter: Amazon Polly (boto3)
    - GoogleConverter: Google Cloud Text-to-Speech
    - NullConverter: no-op, used when no driver is configured

Converter classes are imported lazily; provider SDKs themselves are only
imported when a client is built.

Usage:
    from tts_bridge.tts.converters import PollyConverter

    converter = PollyConverter(settings)
    result = converter.convert("Hello world")

    # Or through the driver manager (recommended)
    from tts_bridge.tts.manager import get_manager
    converter = get_manager(settings).driver("polly")

Adding New Drivers:
    1. Create converters/<name>.py with a BaseConverter subclass
    2. Add it to __all__ and __getattr__ in this file
    3. Register it in manager.py, or call DriverManager.extend() at runtime
"""
from __future__ import annotations

from typing import TYPE_CHECKING

__all__ = [
    "GoogleConverter",
    "NullConverter",
    "PollyConverter",
]


def __getattr__(name: str):
    if name == "GoogleConverter":
        from tts_bridge.tts.converters.google import GoogleConverter
        return GoogleConverter
    if name == "NullConverter":
        from tts_bridge.tts.converters.null import NullConverter
        return NullConverter
    if name == "PollyConverter":
        from tts_bridge.tts.converters.polly import PollyConverter
        return PollyConverter
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


if TYPE_CHECKING:
    from tts_bridge.tts.converters.google import GoogleConverter
    from tts_bridge.tts.converters.null import NullConverter
    from tts_bridge.tts.converters.polly import PollyConverter
