"""
Converter Base Class.

Every provider driver is a BaseConverter subclass. The base class owns the
conversion pipeline; subclasses only describe how to reach their provider.

Pipeline:
    Source -> Resolve text -> Chunk -> Synthesize per chunk -> Merge -> Store

    1. The source identifier is resolved to text (literal text, a file, a URL)
    2. Text above the provider's chunk limit is split with chunk_text()
    3. Each chunk is sent to the provider client; a failure on any chunk
       raises ProviderError and abandons the whole conversion
    4. One payload is used as-is; several are concatenated in chunk order
    5. The merged audio is written to storage, named after the identifier

Per-conversion Modifiers:
    Modifiers return a configured copy, so the converter cached by the
    driver manager is never changed by a single conversion:

        manager.driver("polly").source("path").ssml().save_to("book.mp3").convert("book.xml")

Subclass Hooks:
    - chunk_limit: provider length limit
    - _build_client(): create the SDK-backed SpeechClient
    - _voice_params(request): voice selection for the request
    - _audio_encoding(request): provider output format
    - _synthesize(chunk, request, voice, encoding): one provider call
"""
from __future__ import annotations

import contextvars
import copy
import threading
import uuid
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

import httpx

from tts_bridge.core.config import Settings, TTSConfig
from tts_bridge.core.errors import InvalidArgumentError, ProviderError, TTSError
from tts_bridge.core.logging import debug, fail, get_logger, info, set_request_id, success, verbose
from tts_bridge.tts.chunker import chunk_text, is_above_limit
from tts_bridge.tts.clients import SpeechClient, VoiceParams
from tts_bridge.tts.options import ConversionOptions, OptionsInput, parse_options
from tts_bridge.tts.sources import SourceKind, TextSource
from tts_bridge.tts.storage import BaseStorage, LocalStorage, extension_for
from tts_bridge.utils.timeit import timeit

_LOG = get_logger("tts-bridge.converter")


class TextKind(str, Enum):
    """Content kind of the text sent to the provider."""
    PLAIN = "text"
    MARKUP = "ssml"


@dataclass(frozen=True)
class SynthesisRequest:
    """
    One conversion request, created per convert() call.

    Attributes:
        raw_text: Resolved text to synthesize.
        options: Validated conversion options.
        text_kind: Plain text or SSML markup.
    """
    raw_text: str
    options: ConversionOptions
    text_kind: TextKind = TextKind.PLAIN


@dataclass
class ConvertResult:
    """
    Result of a conversion.

    Attributes:
        path: Storage reference of the written file (None when nothing was stored).
        driver: Name of the driver that produced the result.
        chunks: Number of provider requests made.
        bytes: Size of the merged payload.
        timings_s: Per-stage timing breakdown in seconds.
        speech_marks: Parsed Polly speech marks, when requested.
    """
    path: Optional[str]
    driver: str
    chunks: int
    bytes: int
    timings_s: Dict[str, float] = field(default_factory=dict)
    speech_marks: Optional[List[Dict[str, Any]]] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "ok": True,
            "path": self.path,
            "driver": self.driver,
            "chunks": self.chunks,
            "bytes": self.bytes,
            "timings_s": {k: round(v, 4) for k, v in self.timings_s.items()},
        }
        if self.speech_marks is not None:
            result["speech_marks"] = self.speech_marks
        return result


def merge_outputs(payloads: Sequence[bytes]) -> bytes:
    """
    Merge per-chunk payloads into one buffer.

    Payloads are appended in chunk order without re-encoding. For MP3 this
    plays back in most players; other encodings may not produce a valid
    single file.
    """
    if len(payloads) == 1:
        return payloads[0]
    return b"".join(payloads)


class _LazyClient:
    """Builds the provider client once, on first use, shared by converter copies."""

    def __init__(self, factory: Callable[[], SpeechClient], client: Optional[SpeechClient] = None):
        self._factory = factory
        self._client = client
        self._lock = threading.Lock()

    def get(self) -> SpeechClient:
        if self._client is None:
            with self._lock:
                if self._client is None:
                    self._client = self._factory()
        return self._client


class BaseConverter:
    """
    Shared conversion pipeline for provider drivers.

    Args:
        settings: Application settings.
        client: Pre-built SpeechClient (tests inject doubles); built lazily otherwise.
        storage: Storage backend; LocalStorage from config by default.
        http_client: httpx.Client used by url sources.
    """

    name: str = "base"

    def __init__(
        self,
        settings: Settings,
        client: Optional[SpeechClient] = None,
        storage: Optional[BaseStorage] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        self._settings = settings
        self._config: TTSConfig = settings.get_config()
        self._client = _LazyClient(self._build_client, client)
        self._storage = storage if storage is not None else LocalStorage.from_config(self._config.storage)
        self._http_client = http_client

        # Per-conversion state, changed only on copies
        self._source_kind = SourceKind.TEXT
        self._language: Optional[str] = None
        self._text_type: Optional[str] = None
        self._save_to: Optional[str] = None

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def config(self) -> TTSConfig:
        return self._config

    @property
    def client(self) -> SpeechClient:
        """Provider client, created on first access."""
        return self._client.get()

    @property
    def storage(self) -> BaseStorage:
        return self._storage

    @property
    def chunk_limit(self) -> int:
        raise NotImplementedError

    # =========================================================================
    # Per-conversion modifiers
    # =========================================================================

    def _with(self, **changes: Any) -> "BaseConverter":
        clone = copy.copy(self)
        for key, value in changes.items():
            setattr(clone, key, value)
        return clone

    def source(self, kind: str) -> "BaseConverter":
        """Read the source identifier as ``text``, a ``path`` or a ``url``."""
        kind = (kind or "").strip().lower()
        if kind not in SourceKind.ALL:
            raise InvalidArgumentError(
                f"Unknown text source '{kind}'. Available: {', '.join(SourceKind.ALL)}",
            )
        return self._with(_source_kind=kind)

    def language(self, code: str) -> "BaseConverter":
        if not code or not isinstance(code, str):
            raise InvalidArgumentError(f"Language code must be a non-empty string, got {code!r}")
        return self._with(_language=code)

    def ssml(self) -> "BaseConverter":
        """Treat the input as SSML markup."""
        return self._with(_text_type=TextKind.MARKUP.value)

    def text(self) -> "BaseConverter":
        """Treat the input as plain text."""
        return self._with(_text_type=TextKind.PLAIN.value)

    def save_to(self, path: str) -> "BaseConverter":
        """Store the result at ``path`` (relative to the storage root)."""
        if not path or not isinstance(path, str):
            raise InvalidArgumentError(f"Target path must be a non-empty string, got {path!r}")
        return self._with(_save_to=path)

    # =========================================================================
    # Subclass hooks
    # =========================================================================

    def _build_client(self) -> SpeechClient:
        raise NotImplementedError

    def _voice_params(self, request: SynthesisRequest) -> VoiceParams:
        return VoiceParams(language_code=self._resolve_language(request))

    def _audio_encoding(self, request: SynthesisRequest) -> str:
        return request.options.format or self._config.output_format

    def _synthesize(self, chunk: str, request: SynthesisRequest, voice: VoiceParams, encoding: str) -> bytes:
        return self.client.synthesize(chunk, request.text_kind.value, voice, encoding)

    def _resolve_language(self, request: SynthesisRequest) -> str:
        return request.options.language or self._language or self._config.language

    # =========================================================================
    # Public API: convert()
    # =========================================================================

    def convert(self, source: str, options: OptionsInput = None) -> ConvertResult:
        """
        Convert ``source`` to speech and store the audio.

        Args:
            source: Source identifier (text, file path or URL, see source()).
            options: Conversion options mapping (voice, format, engine,
                language, text_type).

        Returns:
            ConvertResult with the storage reference.

        Raises:
            InvalidArgumentError: Bad options or unreadable source.
            ConfigurationError: Provider client cannot be built.
            ProviderError: A provider call failed; nothing was stored.
        """
        set_request_id(uuid.uuid4().hex[:12])
        timings: Dict[str, float] = {}

        opts = parse_options(options)

        with timeit("resolve") as t_resolve:
            text = TextSource(
                self._source_kind,
                timeout_s=self._config.source_timeout_s,
                client=self._http_client,
            ).resolve(source)
        timings["resolve"] = t_resolve.seconds

        text_kind = TextKind(opts.text_type or self._text_type or self._config.text_type)
        request = SynthesisRequest(raw_text=text, options=opts, text_kind=text_kind)

        preview_chars = self._config.logging.text_preview_chars
        info(
            _LOG, "convert_start",
            driver=self.name,
            source=self._source_kind,
            chars=len(text),
            text_kind=text_kind.value,
            text_preview=text[:preview_chars] if preview_chars > 0 else "",
        )

        if is_above_limit(text, self.chunk_limit):
            chunked = chunk_text(text, self.chunk_limit)
            chunks = chunked.chunks
            timings.update(chunked.timings_s)
        else:
            chunks = [text]

        voice = self._voice_params(request)
        encoding = self._audio_encoding(request)
        debug(_LOG, "resolved", voice=voice.voice_id, language=voice.language_code, encoding=encoding)

        with timeit("synth") as t_synth:
            payloads = self._synthesize_chunks(chunks, request, voice, encoding)
        timings["synth"] = t_synth.seconds
        verbose(_LOG, "stage", event="synth", chunks=len(chunks), seconds=round(timings["synth"], 4))

        result = self._finish(source, request, payloads, encoding, timings)
        success(
            _LOG, "done",
            driver=self.name,
            path=result.path,
            chunks=result.chunks,
            bytes=result.bytes,
            seconds=round(sum(timings.values()), 3),
        )
        return result

    # =========================================================================
    # Pipeline stages
    # =========================================================================

    def _synthesize_chunks(
        self,
        chunks: List[str],
        request: SynthesisRequest,
        voice: VoiceParams,
        encoding: str,
    ) -> List[bytes]:
        total = len(chunks)
        workers = min(self._config.chunk_workers, total)

        if workers <= 1:
            return [
                self._call_provider(i, total, chunk, request, voice, encoding)
                for i, chunk in enumerate(chunks)
            ]

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix=f"tts-{self.name}") as pool:
            futures = [
                pool.submit(
                    contextvars.copy_context().run,
                    self._call_provider, i, total, chunk, request, voice, encoding,
                )
                for i, chunk in enumerate(chunks)
            ]
            try:
                # Collected in submission order, so the merge keeps chunk order
                return [f.result() for f in futures]
            except Exception:
                for f in futures:
                    f.cancel()
                raise

    def _call_provider(
        self,
        index: int,
        total: int,
        chunk: str,
        request: SynthesisRequest,
        voice: VoiceParams,
        encoding: str,
    ) -> bytes:
        debug(_LOG, "chunk_request", index=index + 1, total=total, chars=len(chunk))
        try:
            with timeit("chunk_synth") as t:
                payload = self._synthesize(chunk, request, voice, encoding)
        except TTSError:
            raise
        except Exception as exc:
            fail(
                _LOG, "provider_failed",
                driver=self.name,
                chunk=index + 1,
                chunks=total,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            raise ProviderError(
                f"{self.name} synthesis failed on chunk {index + 1} of {total}: {exc}",
                cause=exc,
                details={"driver": self.name, "chunk": index + 1, "chunks": total},
            ) from exc

        verbose(_LOG, "chunk_done", index=index + 1, total=total, bytes=len(payload), seconds=round(t.seconds, 4))
        return payload

    def _finish(
        self,
        source: str,
        request: SynthesisRequest,
        payloads: List[bytes],
        encoding: str,
        timings: Dict[str, float],
    ) -> ConvertResult:
        """Merge payloads and store them."""
        with timeit("merge") as t_merge:
            merged = merge_outputs(payloads)
        timings["merge"] = t_merge.seconds

        with timeit("store") as t_store:
            ref = self._storage.store(source, merged, extension=extension_for(encoding), path=self._save_to)
        timings["store"] = t_store.seconds

        return ConvertResult(
            path=ref,
            driver=self.name,
            chunks=len(payloads),
            bytes=len(merged),
            timings_s=timings,
        )
