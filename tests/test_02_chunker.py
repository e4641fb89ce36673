"""
Tests for the text chunker.

Tests cover:
- Text within the limit is returned as one unchanged chunk
- Oversized text is word-wrapped within the limit
- Word order and whitespace-normalized content are preserved
- Oversized single tokens become their own chunk
- Existing line breaks end a chunk
- Invalid limits raise InvalidArgumentError
"""
from __future__ import annotations

import pytest

from conftest import words
from tts_bridge.core.errors import InvalidArgumentError
from tts_bridge.tts.chunker import chunk_text, is_above_limit, wrap_words


class TestWithinLimit:
    """len(text) <= limit -> exactly one chunk equal to text."""

    def test_short_text_unchanged(self):
        text = "  Hello   there,  world.  "
        cr = chunk_text(text, limit=100)
        assert cr.chunks == [text]

    def test_exactly_at_limit(self):
        text = "x" * 50
        assert chunk_text(text, limit=50).chunks == [text]

    def test_empty_text(self):
        assert chunk_text("", limit=10).chunks == [""]

    def test_rechunking_a_chunk_is_stable(self):
        text = words(1000)
        for chunk in chunk_text(text, limit=2000).chunks:
            assert chunk_text(chunk, limit=2000).chunks == [chunk]

    def test_timing_recorded(self):
        cr = chunk_text("Hello", limit=10)
        assert isinstance(cr.timings_s.get("chunk"), float)


class TestAboveLimit:
    """len(text) > limit -> greedy word wrap."""

    def test_example(self):
        assert chunk_text("one two three four", limit=9).chunks == ["one two", "three", "four"]

    def test_2500_chars_limit_2000_gives_two_chunks(self):
        text = words(500)  # 2499 chars
        cr = chunk_text(text, limit=2000)

        assert len(cr.chunks) == 2
        assert all(len(c) <= 2000 for c in cr.chunks)

    def test_join_reconstructs_normalized_text(self):
        text = "The  quick brown\tfox   jumps over\n the lazy dog. " * 40
        cr = chunk_text(text, limit=64)

        assert " ".join(cr.chunks) == " ".join(text.split())

    def test_no_chunk_exceeds_limit(self):
        text = "Lorem ipsum dolor sit amet, consectetur adipiscing elit. " * 30
        for chunk in chunk_text(text, limit=37).chunks:
            assert len(chunk) <= 37

    def test_oversized_token_is_own_chunk(self):
        long_word = "x" * 25
        cr = chunk_text(f"aa bb {long_word} cc dd", limit=10)

        assert cr.chunks == ["aa bb", long_word, "cc dd"]

    def test_oversized_token_never_cut(self):
        url = "https://example.com/" + "a" * 80
        cr = chunk_text(f"see {url} now", limit=20)
        assert url in cr.chunks

    def test_newlines_end_a_chunk(self):
        text = "first line\nsecond line is here"
        cr = chunk_text(text, limit=20)

        assert cr.chunks == ["first line", "second line is here"]

    def test_whitespace_only_text(self):
        assert chunk_text(" " * 30, limit=10).chunks == [""]


class TestWrapWords:

    def test_blank_lines_dropped(self):
        assert wrap_words("a b\n\n\nc d", limit=3) == ["a b", "c d"]

    def test_empty(self):
        assert wrap_words("", limit=5) == []


class TestLimitValidation:
    """Non-positive or non-integer limits are caller errors."""

    @pytest.mark.parametrize("limit", [0, -1, 2.5, "10", None, True])
    def test_invalid_limit(self, limit):
        with pytest.raises(InvalidArgumentError):
            chunk_text("hello", limit=limit)

    def test_is_above_limit(self):
        assert is_above_limit("abcdef", 5) is True
        assert is_above_limit("abcde", 5) is False

    def test_is_above_limit_validates(self):
        with pytest.raises(InvalidArgumentError):
            is_above_limit("abc", 0)
