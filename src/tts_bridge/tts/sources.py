"""
Text Sources.

A converter receives a source identifier and resolves it to the text to
synthesize. The source kind is chosen per conversion:

    text  - the identifier is the text itself (default)
    path  - the identifier is a local file path, read as UTF-8
    url   - the identifier is an http(s) URL; the document is fetched
            and HTML markup is stripped

Example:
    >>> TextSource("text").resolve("Hello")
    'Hello'
    >>> TextSource("path").resolve("chapters/01.txt")
    'It was a bright cold day...'
"""
from __future__ import annotations

import html
import re
from pathlib import Path

import httpx

from tts_bridge.core.config import Defaults
from tts_bridge.core.errors import InvalidArgumentError
from tts_bridge.core.logging import get_logger, verbose

_LOG = get_logger("tts-bridge.sources")

_DROP_BLOCKS = re.compile(r"<(script|style|head)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL)
_TAGS = re.compile(r"<[^>]+>")
_SPACES = re.compile(r"\s+")


class SourceKind:
    """Supported text source kinds."""
    TEXT = "text"
    PATH = "path"
    URL = "url"

    ALL = (TEXT, PATH, URL)


def strip_html(document: str) -> str:
    """Reduce an HTML document to its readable text on one line."""
    document = _DROP_BLOCKS.sub(" ", document)
    document = _TAGS.sub(" ", document)
    return _SPACES.sub(" ", html.unescape(document)).strip()


class TextSource:
    """
    Resolves source identifiers to text.

    Args:
        kind: One of SourceKind.ALL.
        timeout_s: HTTP timeout for url sources.
        client: Optional httpx.Client (tests inject a MockTransport client).

    Raises:
        InvalidArgumentError: For an unknown kind.
    """

    def __init__(
        self,
        kind: str = SourceKind.TEXT,
        timeout_s: float = Defaults.SOURCE_TIMEOUT_S,
        client: httpx.Client | None = None,
    ):
        kind = (kind or SourceKind.TEXT).strip().lower()
        if kind not in SourceKind.ALL:
            raise InvalidArgumentError(
                f"Unknown text source '{kind}'. Available: {', '.join(SourceKind.ALL)}",
            )
        self.kind = kind
        self.timeout_s = timeout_s
        self._client = client

    def resolve(self, identifier: str) -> str:
        """
        Return the text behind ``identifier``.

        Raises:
            InvalidArgumentError: If the identifier is not a string, the
                file cannot be read, or the URL cannot be fetched.
        """
        if not isinstance(identifier, str):
            raise InvalidArgumentError(
                f"Source identifier must be a string, got {type(identifier).__name__}",
            )
        if self.kind == SourceKind.PATH:
            return self._read_path(identifier)
        if self.kind == SourceKind.URL:
            return self._fetch_url(identifier)
        return identifier

    def _read_path(self, identifier: str) -> str:
        path = Path(identifier)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise InvalidArgumentError(
                f"Cannot read text source file: {path}",
                details={"path": str(path), "error": str(exc)},
            ) from exc
        verbose(_LOG, "source_read", kind=self.kind, chars=len(text))
        return text

    def _fetch_url(self, identifier: str) -> str:
        if not identifier.startswith(("http://", "https://")):
            raise InvalidArgumentError(f"URL source must be http(s): {identifier!r}")
        try:
            if self._client is not None:
                response = self._client.get(identifier, timeout=self.timeout_s, follow_redirects=True)
            else:
                with httpx.Client(timeout=self.timeout_s, follow_redirects=True) as client:
                    response = client.get(identifier)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise InvalidArgumentError(
                f"Cannot fetch text source URL: {identifier}",
                details={"url": identifier, "error": str(exc)},
            ) from exc

        content_type = response.headers.get("content-type", "")
        text = strip_html(response.text) if "html" in content_type else response.text.strip()
        verbose(_LOG, "source_fetched", kind=self.kind, status=response.status_code, chars=len(text))
        return text
