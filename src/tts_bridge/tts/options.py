"""
Generic Conversion Options.

Callers pass options as a plain mapping; they are validated here once
and then mapped by each converter onto its provider request:

    {
        "voice": "Joanna",        # provider voice id / voice name
        "format": "mp3",          # mp3 | ogg_vorbis | pcm | json
        "engine": "neural",       # Polly engine
        "language": "en-GB",      # language code
        "text_type": "ssml"       # text | ssml
    }

Unset options fall back to the converter's configuration. Unknown keys
and out-of-range values raise InvalidArgumentError.
"""
from __future__ import annotations

from typing import Any, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from tts_bridge.core.errors import InvalidArgumentError


class ConversionOptions(BaseModel):
    """
    Options for a single conversion.

    Attributes:
        voice: Provider voice identifier (Polly VoiceId, Google voice name).
        format: Output format. "json" is only produced by Polly speech marks.
        engine: Polly synthesis engine.
        language: Language code, e.g. "en-US".
        text_type: Content kind of the input, plain text or SSML markup.
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    voice: Optional[str] = Field(default=None, min_length=1, max_length=100)
    format: Optional[Literal["mp3", "ogg_vorbis", "pcm", "json"]] = None
    engine: Optional[Literal["standard", "neural", "long-form", "generative"]] = None
    language: Optional[str] = Field(default=None, min_length=2, max_length=35)
    text_type: Optional[Literal["text", "ssml"]] = None


OptionsInput = Union[ConversionOptions, Mapping[str, Any], None]


def parse_options(options: OptionsInput) -> ConversionOptions:
    """
    Validate ``options`` into a ConversionOptions instance.

    Raises:
        InvalidArgumentError: If options are not a mapping or fail validation.
    """
    if options is None:
        return ConversionOptions()
    if isinstance(options, ConversionOptions):
        return options
    if not isinstance(options, Mapping):
        raise InvalidArgumentError(
            f"Options must be a mapping, got {type(options).__name__}",
        )

    bad_keys = [key for key in options if not isinstance(key, str)]
    if bad_keys:
        raise InvalidArgumentError(
            "Option names must be strings",
            details={"errors": [f"{key!r}: option name is not a string" for key in bad_keys]},
        )

    try:
        return ConversionOptions.model_validate(dict(options))
    except ValidationError as exc:
        problems = [
            f"{'.'.join(str(p) for p in err['loc']) or 'options'}: {err['msg']}"
            for err in exc.errors()
        ]
        raise InvalidArgumentError(
            "Invalid conversion options: " + "; ".join(problems),
            details={"errors": problems},
        ) from exc
