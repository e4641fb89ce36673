"""
Amazon Polly Converter.

Maps generic options onto a Polly SynthesizeSpeech request:

    voice     -> VoiceId       (default tts.services.polly.voice, "Amy")
    format    -> OutputFormat  (default tts.output_format, "mp3")
    engine    -> Engine        (default tts.services.polly.engine, "standard")
    language  -> LanguageCode  (default tts.language)
    text_type -> TextType      ("text" or "ssml")

Speech Marks:
    Polly can return timing metadata instead of audio. With
    ``converter.speech_marks(["word", "sentence"])`` the output format is
    forced to "json", the JSON-lines payload of every chunk is decoded and
    the marks are returned on ConvertResult.speech_marks. Marks are not
    written to storage.

    >>> result = manager.driver("polly").speech_marks(["word"]).convert("Hello world")
    >>> result.speech_marks[0]
    {'time': 6, 'type': 'word', 'start': 0, 'end': 5, 'value': 'Hello'}
"""
from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List, Optional, Tuple

from tts_bridge.core.errors import InvalidArgumentError, ProviderError
from tts_bridge.core.logging import fail, get_logger
from tts_bridge.tts.clients import SpeechClient, VoiceParams, build_client
from tts_bridge.tts.converter import BaseConverter, ConvertResult, SynthesisRequest, merge_outputs

_LOG = get_logger("tts-bridge.polly")

SPEECH_MARK_TYPES = ("sentence", "ssml", "viseme", "word")


def parse_speech_marks(payload: bytes) -> List[Dict[str, Any]]:
    """Decode a Polly speech marks payload (one JSON object per line)."""
    marks = []
    for line in payload.decode("utf-8").splitlines():
        line = line.strip()
        if line:
            marks.append(json.loads(line))
    return marks


class PollyConverter(BaseConverter):
    """Converter backed by Amazon Polly."""

    name = "polly"

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self._speech_marks: Tuple[str, ...] = ()

    @property
    def chunk_limit(self) -> int:
        return self._config.polly.chunk_limit

    def speech_marks(self, types: Optional[Iterable[str]] = None) -> "PollyConverter":
        """
        Return speech marks of the given types instead of audio.

        Args:
            types: Subset of sentence, ssml, viseme, word. Defaults to
                word and sentence marks.
        """
        selected = tuple(types) if types is not None else ("word", "sentence")
        unknown = [t for t in selected if t not in SPEECH_MARK_TYPES]
        if not selected or unknown:
            raise InvalidArgumentError(
                f"Speech mark types must be a non-empty subset of {', '.join(SPEECH_MARK_TYPES)}",
                details={"unknown": unknown},
            )
        return self._with(_speech_marks=selected)

    def _build_client(self) -> SpeechClient:
        return build_client(self.name, self._config)

    def _voice_params(self, request: SynthesisRequest) -> VoiceParams:
        polly = self._config.polly
        return VoiceParams(
            language_code=self._resolve_language(request),
            voice_id=request.options.voice or polly.voice,
            engine=request.options.engine or polly.engine,
        )

    def _audio_encoding(self, request: SynthesisRequest) -> str:
        if self._speech_marks:
            return "json"
        encoding = super()._audio_encoding(request)
        if encoding == "json":
            raise InvalidArgumentError("Output format 'json' is only available with speech_marks()")
        return encoding

    def _synthesize(self, chunk: str, request: SynthesisRequest, voice: VoiceParams, encoding: str) -> bytes:
        if self._speech_marks:
            return self.client.synthesize(
                chunk, request.text_kind.value, voice, encoding,
                speech_mark_types=self._speech_marks,
            )
        return super()._synthesize(chunk, request, voice, encoding)

    def _finish(self, source, request, payloads, encoding, timings) -> ConvertResult:
        if not self._speech_marks:
            return super()._finish(source, request, payloads, encoding, timings)

        marks: List[Dict[str, Any]] = []
        for index, payload in enumerate(payloads):
            try:
                marks.extend(parse_speech_marks(payload))
            except (UnicodeDecodeError, ValueError) as exc:
                fail(_LOG, "speech_marks_invalid", chunk=index + 1, error=str(exc))
                raise ProviderError(
                    f"polly returned malformed speech marks on chunk {index + 1}",
                    cause=exc,
                    details={"driver": self.name, "chunk": index + 1},
                ) from exc

        return ConvertResult(
            path=None,
            driver=self.name,
            chunks=len(payloads),
            bytes=len(merge_outputs(payloads)),
            timings_s=timings,
            speech_marks=marks,
        )
