"""Null converter: accepts every conversion and does nothing."""
from __future__ import annotations

import sys

from tts_bridge.core.logging import get_logger, verbose
from tts_bridge.tts.clients import SpeechClient
from tts_bridge.tts.converter import BaseConverter, ConvertResult
from tts_bridge.tts.options import OptionsInput

_LOG = get_logger("tts-bridge.null")


class NullConverter(BaseConverter):
    """
    Driver used when no provider is configured.

    convert() makes no provider call and writes nothing to storage.
    """

    name = "null"

    @property
    def chunk_limit(self) -> int:
        return sys.maxsize

    def _build_client(self) -> SpeechClient:
        return SpeechClient()

    def convert(self, source: str, options: OptionsInput = None) -> ConvertResult:
        verbose(_LOG, "convert_skipped", driver=self.name)
        return ConvertResult(path=None, driver=self.name, chunks=0, bytes=0)
