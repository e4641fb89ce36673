"""
Provider Client Factory.

Builds authenticated SDK clients from configuration and wraps them in a
small capability interface, so converters never depend on vendor types:

    client.synthesize(content, content_kind, voice, audio_encoding) -> bytes

SDK imports are deferred to the build functions; importing this module
does not require boto3 or google-cloud-texttospeech.

Clients:
    - PollySpeechClient: boto3 "polly" client
    - GoogleSpeechClient: google.cloud.texttospeech.TextToSpeechClient

build_client(driver, config) dispatches to build_polly_client() or
build_google_client() by driver name.

SDK exceptions are not caught here. The converter wraps them into
ProviderError with the chunk position attached.
"""
from __future__ import annotations

from contextlib import closing
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from tts_bridge.core.config import GoogleConfig, PollyConfig, TTSConfig
from tts_bridge.core.errors import ConfigurationError, InvalidArgumentError
from tts_bridge.core.logging import get_logger, verbose
from tts_bridge.core.requirements import ensure_driver_ready

_LOG = get_logger("tts-bridge.clients")

# Generic output format -> Google AudioEncoding member name
GOOGLE_ENCODINGS = {
    "mp3": "MP3",
    "ogg_vorbis": "OGG_OPUS",
    "pcm": "LINEAR16",
}


@dataclass(frozen=True)
class VoiceParams:
    """
    Voice selection for one synthesis call.

    Attributes:
        language_code: e.g. "en-US".
        voice_id: Polly VoiceId or Google voice name; None lets Google pick.
        gender: Google SSML gender name ("MALE", "FEMALE", ...).
        engine: Polly engine ("standard", "neural", ...).
    """
    language_code: str
    voice_id: Optional[str] = None
    gender: Optional[str] = None
    engine: Optional[str] = None


class SpeechClient:
    """Capability interface: one synthesis call returning raw audio bytes."""

    name: str = "base"

    def synthesize(self, content: str, content_kind: str, voice: VoiceParams, audio_encoding: str) -> bytes:
        raise NotImplementedError


class PollySpeechClient(SpeechClient):
    """Amazon Polly through a boto3 client."""

    name = "polly"

    def __init__(self, client: Any):
        self.client = client

    def synthesize(
        self,
        content: str,
        content_kind: str,
        voice: VoiceParams,
        audio_encoding: str,
        speech_mark_types: Sequence[str] = (),
    ) -> bytes:
        request = {
            "Text": content,
            "TextType": content_kind,
            "OutputFormat": audio_encoding,
            "VoiceId": voice.voice_id,
            "LanguageCode": voice.language_code,
        }
        if voice.engine:
            request["Engine"] = voice.engine
        if speech_mark_types:
            request["SpeechMarkTypes"] = list(speech_mark_types)

        response = self.client.synthesize_speech(**request)
        with closing(response["AudioStream"]) as stream:
            return stream.read()


class GoogleSpeechClient(SpeechClient):
    """Google Cloud Text-to-Speech through the official client."""

    name = "google"

    def __init__(self, client: Any):
        self.client = client

    def synthesize(self, content: str, content_kind: str, voice: VoiceParams, audio_encoding: str) -> bytes:
        from google.cloud import texttospeech

        encoding_name = GOOGLE_ENCODINGS.get(audio_encoding)
        if encoding_name is None:
            raise InvalidArgumentError(
                f"Google does not support output format '{audio_encoding}'. "
                f"Available: {', '.join(GOOGLE_ENCODINGS)}",
            )

        if content_kind == "ssml":
            synthesis_input = texttospeech.SynthesisInput(ssml=content)
        else:
            synthesis_input = texttospeech.SynthesisInput(text=content)

        voice_params = texttospeech.VoiceSelectionParams(
            language_code=voice.language_code,
            ssml_gender=texttospeech.SsmlVoiceGender[voice.gender or "SSML_VOICE_GENDER_UNSPECIFIED"],
        )
        if voice.voice_id:
            voice_params.name = voice.voice_id

        audio_config = texttospeech.AudioConfig(
            audio_encoding=texttospeech.AudioEncoding[encoding_name],
        )

        response = self.client.synthesize_speech(
            input=synthesis_input,
            voice=voice_params,
            audio_config=audio_config,
        )
        return response.audio_content


def build_polly_client(config: PollyConfig) -> PollySpeechClient:
    """
    Create a Polly client from configuration.

    ``credentials`` must contain both ``key`` and ``secret`` when given;
    without credentials boto3 falls back to its default chain.

    Raises:
        ConfigurationError: If boto3 is missing or credentials are incomplete.
    """
    ensure_driver_ready("polly")
    import boto3

    kwargs: dict = {"region_name": config.region}
    if config.version and config.version != "latest":
        kwargs["api_version"] = config.version

    creds = config.credentials or {}
    if any(creds.values()):
        if not creds.get("key") or not creds.get("secret"):
            raise ConfigurationError(
                "Polly credentials require both 'key' and 'secret'",
                details={"provided": sorted(k for k, v in creds.items() if v)},
            )
        kwargs["aws_access_key_id"] = creds["key"]
        kwargs["aws_secret_access_key"] = creds["secret"]
        if creds.get("token"):
            kwargs["aws_session_token"] = creds["token"]

    verbose(_LOG, "polly_client", region=config.region, explicit_credentials=bool(any(creds.values())))
    return PollySpeechClient(boto3.client("polly", **kwargs))


def build_google_client(config: GoogleConfig) -> GoogleSpeechClient:
    """
    Create a Google Text-to-Speech client from configuration.

    ``credentials`` may be service-account info (a mapping), the path of
    a service-account JSON file, or None for application default
    credentials.

    Raises:
        ConfigurationError: If the SDK is missing or credentials are invalid.
    """
    ensure_driver_ready("google")
    from google.cloud import texttospeech
    from google.oauth2 import service_account

    creds = config.credentials
    credentials = None
    try:
        if isinstance(creds, dict) and creds:
            credentials = service_account.Credentials.from_service_account_info(creds)
        elif isinstance(creds, str) and creds:
            credentials = service_account.Credentials.from_service_account_file(creds)
        elif creds:
            raise ConfigurationError(
                "Google credentials must be a mapping or a file path, "
                f"got {type(creds).__name__}",
            )
    except (ValueError, OSError) as exc:
        raise ConfigurationError(f"Invalid Google credentials: {exc}") from exc

    verbose(_LOG, "google_client", explicit_credentials=credentials is not None)
    if credentials is None:
        return GoogleSpeechClient(texttospeech.TextToSpeechClient())
    return GoogleSpeechClient(texttospeech.TextToSpeechClient(credentials=credentials))


def build_client(driver: str, config: TTSConfig) -> SpeechClient:
    """
    Create the SpeechClient of a built-in provider ``driver``.

    Raises:
        ConfigurationError: For a driver without an SDK client, or any
            error raised by the provider's build function.
    """
    if driver == "polly":
        return build_polly_client(config.polly)
    if driver == "google":
        return build_google_client(config.google)
    raise ConfigurationError(
        f"No SDK client for driver [{driver}]",
        details={"driver": driver},
    )
