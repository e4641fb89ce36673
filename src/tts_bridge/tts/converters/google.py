"""
Google Cloud Text-to-Speech Converter.

Maps generic options onto a Google synthesize_speech request:

    voice     -> VoiceSelectionParams.name
    language  -> VoiceSelectionParams.language_code
    (config)  -> VoiceSelectionParams.ssml_gender (default MALE)
    format    -> AudioConfig.audio_encoding (mp3 -> MP3, ogg_vorbis -> OGG_OPUS, pcm -> LINEAR16)
    text_type -> SynthesisInput(text=...) or SynthesisInput(ssml=...)

Voice Selection:
    1. options["voice"]
    2. tts.services.google.voice
    3. DEFAULT_VOICES entry for the language, when that voice belongs to
       the requested language (e.g. "de-DE" -> "de-DE-Neural2-A")
    4. None: Google picks a voice for language and gender
"""
from __future__ import annotations

from typing import Optional

from tts_bridge.core.errors import InvalidArgumentError
from tts_bridge.tts.clients import GOOGLE_ENCODINGS, SpeechClient, VoiceParams, build_client
from tts_bridge.tts.converter import BaseConverter, SynthesisRequest

# Two-letter language -> default voice name
DEFAULT_VOICES = {
    "af": "af-ZA-Standard-A",
    "ar": "ar-XA-Wavenet-D",
    "bg": "bg-BG-Standard-A",
    "bn": "bn-IN-Wavenet-C",
    "cs": "cs-CZ-Wavenet-A",
    "da": "da-DK-Neural2-D",
    "de": "de-DE-Neural2-A",
    "el": "el-GR-Wavenet-A",
    "en": "en-GB-News-H",
    "es": "es-ES-Neural2-A",
    "fi": "fi-FI-Wavenet-A",
    "fr": "fr-FR-Neural2-C",
    "he": "he-IL-Wavenet-C",
    "hi": "hi-IN-Neural2-D",
    "id": "id-ID-Wavenet-A",
}


def default_voice(language_code: str) -> Optional[str]:
    """
    Default voice for ``language_code``, or None.

    Example:
        >>> default_voice("fr-FR")
        'fr-FR-Neural2-C'
        >>> default_voice("en-US") is None   # table voice is en-GB
        True
    """
    voice = DEFAULT_VOICES.get(language_code[:2].lower())
    if voice and voice.lower().startswith(language_code.lower()):
        return voice
    return None


class GoogleConverter(BaseConverter):
    """Converter backed by Google Cloud Text-to-Speech."""

    name = "google"

    @property
    def chunk_limit(self) -> int:
        return self._config.google.chunk_limit

    def _build_client(self) -> SpeechClient:
        return build_client(self.name, self._config)

    def _voice_params(self, request: SynthesisRequest) -> VoiceParams:
        google = self._config.google
        language = self._resolve_language(request)
        return VoiceParams(
            language_code=language,
            voice_id=request.options.voice or google.voice or default_voice(language),
            gender=google.gender,
        )

    def _audio_encoding(self, request: SynthesisRequest) -> str:
        encoding = super()._audio_encoding(request)
        if encoding not in GOOGLE_ENCODINGS:
            raise InvalidArgumentError(
                f"Google does not support output format '{encoding}'. "
                f"Available: {', '.join(GOOGLE_ENCODINGS)}",
            )
        return encoding
