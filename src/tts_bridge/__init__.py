"""
tts-bridge: Text-to-Speech driver abstraction for cloud providers.

Routes conversion requests to one of several providers behind a single
converter interface, so application code never touches vendor SDK types.

Supported Drivers:
    - polly: Amazon Polly via boto3
    - google: Google Cloud Text-to-Speech
    - null: No-op driver for tests and disabled environments

Key Features:
    - Driver selection from YAML settings or TTS_BRIDGE_DRIVER
    - Automatic chunking of text above the provider's length limit
    - Ordered merge of per-chunk audio into a single file
    - Literal text, local file and URL text sources
    - Local disk storage with content-derived filenames

Example Usage:
    >>> from tts_bridge.core.config import Settings
    >>> from tts_bridge.tts.manager import DriverManager
    >>>
    >>> settings = Settings(raw={'tts': {'driver': 'polly'}})
    >>> converter = DriverManager(settings).driver()
    >>> result = converter.convert("Hello there", {"voice": "Joanna"})
    >>> print(result.path)
    TTS/3f1c....mp3
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
