"""Shared fixtures: provider client doubles, in-memory storage, settings."""
from __future__ import annotations

import threading
from typing import Dict, List, Optional, Sequence

import pytest

from tts_bridge.core.config import Settings
from tts_bridge.tts.clients import SpeechClient, VoiceParams
from tts_bridge.tts.storage import BaseStorage


class FakeSpeechClient(SpeechClient):
    """
    Records every synthesize() call.

    payloads: returned per call in call order (cycled); by default each
        call returns the chunk text encoded as bytes.
    fail_on: 1-based call number that raises RuntimeError.
    """

    name = "fake"

    def __init__(self, payloads: Optional[Sequence[bytes]] = None, fail_on: Optional[int] = None):
        self.payloads = list(payloads) if payloads else None
        self.fail_on = fail_on
        self.calls: List[dict] = []
        self._lock = threading.Lock()

    def synthesize(self, content, content_kind, voice: VoiceParams, audio_encoding, **kwargs) -> bytes:
        with self._lock:
            number = len(self.calls) + 1
            self.calls.append({
                "content": content,
                "content_kind": content_kind,
                "voice": voice,
                "audio_encoding": audio_encoding,
                **kwargs,
            })
        if self.fail_on == number:
            raise RuntimeError(f"provider exploded on call {number}")
        if self.payloads:
            return self.payloads[(number - 1) % len(self.payloads)]
        return content.encode("utf-8")


class MemoryStorage(BaseStorage):
    """Keeps written files in a dict."""

    def __init__(self, prefix: str = "TTS"):
        super().__init__(prefix=prefix)
        self.files: Dict[str, bytes] = {}

    def write(self, ref: str, data: bytes) -> None:
        self.files[ref] = data


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep driver/language overrides from the outer environment out of tests."""
    for name in ("TTS_BRIDGE_DRIVER", "TTS_BRIDGE_LANGUAGE", "TTS_BRIDGE_SKIP_SETUP"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fake_client():
    return FakeSpeechClient()


@pytest.fixture
def memory_storage():
    return MemoryStorage()


@pytest.fixture
def settings(tmp_path):
    return Settings(raw={"storage": {"base_dir": str(tmp_path / "storage")}})


def words(count: int, word: str = "abcd") -> str:
    """``count`` copies of ``word`` separated by single spaces."""
    return " ".join([word] * count)
