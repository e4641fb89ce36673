"""
Text Chunking for Provider Length Limits.

Cloud providers reject requests above a fixed character count (Polly
3000, Google 2000 by default). Text above the limit is split into an
ordered list of chunks, each sent as its own synthesis request.

Strategy:
    Greedy word wrap. Whitespace-delimited tokens are appended to the
    current line while it stays within the limit; the next token that
    would overflow starts a new line. Newlines already present in the text
    always end a line. A single token longer than the limit
    becomes its own oversized chunk and is never cut.

Guarantees:
    - len(text) <= limit  -> exactly one chunk, equal to text
    - " ".join(chunks) equals the text with whitespace runs collapsed
    - no chunk exceeds limit unless it is one oversized token

Markup input (SSML) is wrapped like plain text; a tag may end up split
across chunks.

Example:
    >>> chunk_text("one two three four", limit=9).chunks
    ['one two', 'three', 'four']
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

from tts_bridge.core.errors import InvalidArgumentError
from tts_bridge.core.logging import get_logger, verbose
from tts_bridge.utils.timeit import timeit

_LOG = get_logger("tts-bridge.chunker")


@dataclass
class ChunkResult:
    """
    Result of text chunking.

    Attributes:
        chunks: Ordered chunks ready for synthesis.
        timings_s: Timing measurements in seconds.
    """
    chunks: List[str]
    timings_s: Dict[str, float]


def _validate_limit(limit: int) -> None:
    if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
        raise InvalidArgumentError(
            f"Chunk limit must be a positive integer, got {limit!r}",
            details={"limit": repr(limit)},
        )


def is_above_limit(text: str, limit: int) -> bool:
    """Whether ``text`` has to be chunked for a provider with ``limit``."""
    _validate_limit(limit)
    return len(text) > limit


def wrap_words(text: str, limit: int) -> List[str]:
    """
    Greedy word wrap of ``text`` into lines of at most ``limit`` chars.

    Lines are built from whitespace-delimited tokens joined by single
    spaces. An existing line break closes the current line; blank lines
    are dropped, so empty or all-whitespace text yields no lines.
    """
    lines: List[str] = []

    for paragraph in text.splitlines():
        current = ""
        for token in paragraph.split():
            if not current:
                current = token
            elif len(current) + 1 + len(token) <= limit:
                current = f"{current} {token}"
            else:
                lines.append(current)
                current = token
        if current:
            lines.append(current)

    return lines


def chunk_text(text: str, limit: int) -> ChunkResult:
    """
    Split ``text`` into chunks no longer than ``limit`` characters.

    Args:
        text: Input text.
        limit: Provider length limit, a positive integer.

    Returns:
        ChunkResult. Text within the limit (including "") comes back as a
        single unchanged chunk.

    Raises:
        InvalidArgumentError: If limit is not a positive integer.
    """
    _validate_limit(limit)
    timings: Dict[str, float] = {}

    with timeit("chunk") as t:
        if len(text) <= limit:
            chunks = [text]
        else:
            chunks = wrap_words(text, limit) or [""]

    timings["chunk"] = t.seconds
    verbose(
        _LOG, "chunked",
        chars=len(text),
        chunks=len(chunks),
        limit=limit,
        seconds=round(timings["chunk"], 4),
    )
    return ChunkResult(chunks=chunks, timings_s=timings)
