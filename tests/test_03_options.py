"""Tests for conversion option validation."""
from __future__ import annotations

import pytest

from tts_bridge.core.errors import InvalidArgumentError
from tts_bridge.tts.options import ConversionOptions, parse_options


class TestParseOptions:

    def test_none_gives_empty_options(self):
        opts = parse_options(None)
        assert opts == ConversionOptions()
        assert opts.voice is None and opts.format is None

    def test_valid_mapping(self):
        opts = parse_options({"voice": "Joanna", "format": "ogg_vorbis", "engine": "neural", "language": "en-GB"})

        assert opts.voice == "Joanna"
        assert opts.format == "ogg_vorbis"
        assert opts.engine == "neural"
        assert opts.language == "en-GB"

    def test_instance_passes_through(self):
        opts = ConversionOptions(voice="Brian")
        assert parse_options(opts) is opts

    def test_options_are_frozen(self):
        opts = parse_options({"voice": "Amy"})
        with pytest.raises(Exception):
            opts.voice = "Brian"


class TestInvalidOptions:
    """Malformed options raise InvalidArgumentError with readable details."""

    def test_unknown_key(self):
        with pytest.raises(InvalidArgumentError) as exc_info:
            parse_options({"speed": 2})
        assert "speed" in exc_info.value.message

    def test_unknown_format(self):
        with pytest.raises(InvalidArgumentError) as exc_info:
            parse_options({"format": "wav"})
        assert exc_info.value.details["errors"]

    @pytest.mark.parametrize("options", [
        {"engine": "turbo"},
        {"text_type": "html"},
        {"voice": ""},
        {"language": "e"},
    ])
    def test_out_of_range(self, options):
        with pytest.raises(InvalidArgumentError):
            parse_options(options)

    def test_non_mapping(self):
        with pytest.raises(InvalidArgumentError):
            parse_options(["voice", "Amy"])

    def test_non_string_key(self):
        with pytest.raises(InvalidArgumentError) as exc_info:
            parse_options({1: "x"})
        assert exc_info.value.details["errors"]

    def test_non_string_key_through_convert(self, settings, fake_client):
        from conftest import MemoryStorage
        from tts_bridge.tts.converters.polly import PollyConverter

        converter = PollyConverter(settings, client=fake_client, storage=MemoryStorage())

        with pytest.raises(InvalidArgumentError):
            converter.convert("Hello", {1: "x"})
        assert fake_client.calls == []
