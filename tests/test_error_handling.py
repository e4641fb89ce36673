"""
Tests for the error hierarchy.

Tests cover:
- Error codes per subclass
- to_dict() serialization
- ProviderError keeps the underlying cause
"""
from __future__ import annotations

import pytest

from tts_bridge.core.errors import (
    ConfigurationError,
    ErrorCode,
    InvalidArgumentError,
    ProviderError,
    TTSError,
)


class TestErrorCodes:

    @pytest.mark.parametrize("exc,code", [
        (ConfigurationError("x"), ErrorCode.CONFIGURATION_ERROR),
        (InvalidArgumentError("x"), ErrorCode.INVALID_ARGUMENT),
        (ProviderError("x"), ErrorCode.PROVIDER_ERROR),
        (TTSError("x"), ErrorCode.INTERNAL_ERROR),
    ])
    def test_codes(self, exc, code):
        assert exc.code == code
        assert isinstance(exc, TTSError)

    def test_message_is_str(self):
        assert str(ConfigurationError("Driver [azure] not supported")) == "Driver [azure] not supported"


class TestToDict:

    def test_without_details(self):
        assert InvalidArgumentError("bad limit").to_dict() == {
            "ok": False,
            "error": "INVALID_ARGUMENT",
            "message": "bad limit",
        }

    def test_with_details(self):
        result = ConfigurationError("missing SDK", details={"missing_packages": ["boto3"]}).to_dict()
        assert result["details"] == {"missing_packages": ["boto3"]}


class TestProviderError:

    def test_keeps_cause(self):
        cause = TimeoutError("read timed out")
        err = ProviderError("polly synthesis failed", cause=cause, details={"chunk": 2})

        assert err.cause is cause
        assert err.details["chunk"] == 2
        assert err.details["cause"] == "TimeoutError: read timed out"

    def test_chained_when_raised_from(self):
        with pytest.raises(ProviderError) as exc_info:
            try:
                raise ConnectionError("reset by peer")
            except ConnectionError as exc:
                raise ProviderError("failed", cause=exc) from exc

        assert isinstance(exc_info.value.__cause__, ConnectionError)

    def test_caller_details_not_mutated(self):
        details = {"chunk": 1}
        ProviderError("failed", cause=ValueError("x"), details=details)
        assert details == {"chunk": 1}
