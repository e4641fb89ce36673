"""
Tests for audio storage.

Tests cover:
- Deterministic file naming from the source identifier
- LocalStorage writes, reads and directory creation
- Explicit target paths and rejection of paths escaping the root
- No temp files left behind after a failed write
"""
from __future__ import annotations

import hashlib

import pytest

from tts_bridge.core.config import StorageConfig
from tts_bridge.core.errors import InvalidArgumentError
from tts_bridge.tts.storage import LocalStorage, extension_for, hash_text, make_filename


class TestNaming:

    def test_hash_text(self):
        assert hash_text("Hello") == hashlib.sha256(b"Hello").hexdigest()

    def test_make_filename(self):
        assert make_filename("Hello", "mp3") == f"TTS/{hash_text('Hello')}.mp3"

    def test_make_filename_without_prefix(self):
        assert make_filename("Hello", "ogg", prefix="") == f"{hash_text('Hello')}.ogg"

    def test_same_identifier_same_name(self):
        assert make_filename("a b c") == make_filename("a b c")
        assert make_filename("a b c") != make_filename("a b d")

    @pytest.mark.parametrize("fmt,ext", [("mp3", "mp3"), ("ogg_vorbis", "ogg"), ("pcm", "pcm"), ("json", "json")])
    def test_extension_for(self, fmt, ext):
        assert extension_for(fmt) == ext


class TestLocalStorage:

    def test_store_and_read(self, tmp_path):
        storage = LocalStorage(str(tmp_path))

        ref = storage.store("Hello there", b"ID3audio", extension="mp3")

        assert ref == make_filename("Hello there", "mp3")
        assert storage.read(ref) == b"ID3audio"
        assert (tmp_path / ref).is_file()

    def test_overwrites_same_identifier(self, tmp_path):
        storage = LocalStorage(str(tmp_path))

        ref1 = storage.store("same", b"first")
        ref2 = storage.store("same", b"second")

        assert ref1 == ref2
        assert storage.read(ref1) == b"second"

    def test_explicit_path(self, tmp_path):
        storage = LocalStorage(str(tmp_path))

        ref = storage.store("ignored", b"data", path="podcasts/ep1.mp3")

        assert ref == "podcasts/ep1.mp3"
        assert (tmp_path / "podcasts" / "ep1.mp3").read_bytes() == b"data"

    @pytest.mark.parametrize("path", ["/etc/passwd", "../outside.mp3", "a/../../b.mp3", "."])
    def test_rejects_escaping_paths(self, tmp_path, path):
        storage = LocalStorage(str(tmp_path))
        with pytest.raises(InvalidArgumentError):
            storage.store("x", b"data", path=path)

    def test_no_temp_file_left(self, tmp_path):
        storage = LocalStorage(str(tmp_path))
        storage.store("Hello", b"data")

        assert not list(tmp_path.rglob("*.tmp"))

    def test_failed_write_raises_and_cleans_up(self, tmp_path):
        storage = LocalStorage(str(tmp_path))
        # A directory where the file should go makes the rename fail
        ref = make_filename("Hello", "mp3")
        (tmp_path / ref).mkdir(parents=True)

        with pytest.raises(OSError):
            storage.store("Hello", b"data")
        assert not list(tmp_path.rglob("*.tmp"))

    def test_from_config(self, tmp_path):
        storage = LocalStorage.from_config(StorageConfig(base_dir=str(tmp_path), prefix="speech"))

        ref = storage.store("Hi", b"x", extension="pcm")

        assert ref.startswith("speech/")
        assert ref.endswith(".pcm")
