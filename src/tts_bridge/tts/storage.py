"""
Audio Storage.

Converted audio is handed to a storage backend which writes it under a
name derived from the source identifier and returns a reference the
caller can use to locate the file.

File Naming:
    {prefix}/{sha256(identifier)}.{extension}

    The same source identifier and format always map to the same file,
    so converting the same text twice overwrites the earlier file rather
    than accumulating copies. A conversion can also name its target
    explicitly with ``converter.save_to("podcasts/ep1.mp3")``.

Layout (LocalStorage):
    {base_dir}/
        TTS/
            3f1c...9a.mp3
        podcasts/
            ep1.mp3

Usage:
    storage = LocalStorage("./storage")
    ref = storage.store("Hello there", audio_bytes, extension="mp3")
    storage.full_path(ref)  # PosixPath('storage/TTS/3f1c...9a.mp3')
"""
from __future__ import annotations

import hashlib
from pathlib import Path, PurePosixPath
from typing import Optional

from tts_bridge.core.config import Defaults, StorageConfig
from tts_bridge.core.errors import InvalidArgumentError
from tts_bridge.core.logging import fail, get_logger, info
from tts_bridge.utils.timeit import timeit

_LOG = get_logger("tts-bridge.storage")

# Output format -> file extension
AUDIO_EXTENSIONS = {
    "mp3": "mp3",
    "ogg_vorbis": "ogg",
    "pcm": "pcm",
    "json": "json",
}


def hash_text(text: str) -> str:
    """SHA256 hex digest of ``text`` encoded as UTF-8."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def extension_for(output_format: str) -> str:
    return AUDIO_EXTENSIONS.get(output_format, output_format)


def make_filename(identifier: str, extension: str = "mp3", prefix: str = Defaults.STORAGE_PREFIX) -> str:
    """
    Derive the storage reference for a source identifier.

    Example:
        >>> make_filename("Hello", "mp3")
        'TTS/185f8db32271fe25f561a6fc938b2e264306ec304eda518007d1764826381969.mp3'
    """
    name = f"{hash_text(identifier)}.{extension}"
    prefix = prefix.strip("/")
    return f"{prefix}/{name}" if prefix else name


class BaseStorage:
    """
    Storage backend interface.

    Subclasses implement ``write()``; ``store()`` handles naming.
    """

    def __init__(self, prefix: str = Defaults.STORAGE_PREFIX):
        self.prefix = prefix

    def store(self, identifier: str, data: bytes, extension: str = "mp3", path: Optional[str] = None) -> str:
        """
        Persist ``data`` and return its reference.

        Args:
            identifier: Source identifier the name is derived from.
            data: Audio bytes.
            extension: File extension for derived names.
            path: Explicit reference overriding the derived name.
        """
        ref = _clean_reference(path) if path else make_filename(identifier, extension, self.prefix)
        self.write(ref, data)
        return ref

    def write(self, ref: str, data: bytes) -> None:
        raise NotImplementedError


class LocalStorage(BaseStorage):
    """Writes files below ``base_dir`` on the local filesystem."""

    def __init__(self, base_dir: str = Defaults.STORAGE_BASE_DIR, prefix: str = Defaults.STORAGE_PREFIX):
        super().__init__(prefix=prefix)
        self.base_dir = Path(base_dir)

    @classmethod
    def from_config(cls, config: StorageConfig) -> "LocalStorage":
        return cls(base_dir=config.base_dir, prefix=config.prefix)

    def full_path(self, ref: str) -> Path:
        return self.base_dir / ref

    def write(self, ref: str, data: bytes) -> None:
        p = self.full_path(ref)
        tmp = p.with_name(p.name + ".tmp")
        try:
            p.parent.mkdir(parents=True, exist_ok=True)
            with timeit("storage_write") as t:
                # Write then rename so readers never see a partial file
                tmp.write_bytes(data)
                tmp.replace(p)
        except OSError as exc:
            fail(_LOG, "storage_write_error", ref=ref, error=str(exc))
            tmp.unlink(missing_ok=True)
            raise

        info(_LOG, "saved", ref=ref, bytes=len(data), seconds=round(t.seconds, 4))

    def read(self, ref: str) -> bytes:
        return self.full_path(ref).read_bytes()


def _clean_reference(path: str) -> str:
    """Normalize an explicit target path, rejecting escapes from the storage root."""
    pure = PurePosixPath(path.replace("\\", "/"))
    if pure.is_absolute() or ".." in pure.parts or not pure.name:
        raise InvalidArgumentError(
            f"Storage path must be relative and stay inside the storage root: {path!r}",
        )
    return str(pure)
