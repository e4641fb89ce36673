"""
Tests for the driver manager.

Tests cover:
- Default driver resolution (env, settings, null)
- Lazy creation and per-name caching
- Unknown drivers raise ConfigurationError
- Custom drivers via extend()
- Missing provider SDK reported at driver creation
- get_manager() singleton
"""
from __future__ import annotations

import threading

import pytest

from conftest import FakeSpeechClient, MemoryStorage
from tts_bridge.core.config import Settings
from tts_bridge.core.errors import ConfigurationError
from tts_bridge.tts.converters.google import GoogleConverter
from tts_bridge.tts.converters.null import NullConverter
from tts_bridge.tts.converters.polly import PollyConverter
from tts_bridge.tts.manager import DriverManager, get_manager, reset_manager


@pytest.fixture(autouse=True)
def _reset():
    reset_manager()
    yield
    reset_manager()


class TestDefaultDriver:

    def test_null_when_unset(self, settings):
        manager = DriverManager(settings)

        assert manager.get_default_driver() == "null"
        assert isinstance(manager.driver(), NullConverter)

    def test_from_settings(self, tmp_path):
        manager = DriverManager(Settings(raw={"tts": {"driver": "polly"}, "storage": {"base_dir": str(tmp_path)}}))
        assert isinstance(manager.driver(), PollyConverter)

    def test_env_override(self, settings, monkeypatch):
        monkeypatch.setenv("TTS_BRIDGE_DRIVER", "Google")
        manager = DriverManager(settings)

        assert manager.get_default_driver() == "google"
        assert isinstance(manager.driver(), GoogleConverter)


class TestDriverLookup:

    def test_unknown_driver(self, settings):
        with pytest.raises(ConfigurationError) as exc_info:
            DriverManager(settings).driver("azure")
        assert "azure" in exc_info.value.message
        assert exc_info.value.details == {"driver": "azure"}

    def test_cached_per_name(self, settings):
        manager = DriverManager(settings)

        assert manager.driver("polly") is manager.driver("polly")
        assert manager.driver("polly") is not manager.driver("google")
        assert manager.created_drivers() == ["google", "polly"]

    def test_name_is_case_insensitive(self, settings):
        manager = DriverManager(settings)
        assert manager.driver(" POLLY ") is manager.driver("polly")

    def test_engine_alias(self, settings):
        manager = DriverManager(settings)
        assert manager.engine("null") is manager.driver("null")

    def test_forget_drivers(self, settings):
        manager = DriverManager(settings)
        first = manager.driver("null")

        manager.forget_drivers()

        assert manager.created_drivers() == []
        assert manager.driver("null") is not first

    def test_available_drivers(self, settings):
        assert DriverManager(settings).available_drivers() == ["google", "null", "polly"]

    def test_concurrent_first_use_creates_one_instance(self, settings):
        manager = DriverManager(settings)
        results = []

        def worker():
            results.append(manager.driver("google"))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len({id(r) for r in results}) == 1


class TestExtend:

    def test_custom_driver(self, settings):
        client = FakeSpeechClient()
        storage = MemoryStorage()
        manager = DriverManager(settings).extend(
            "acme",
            lambda s: GoogleConverter(s, client=client, storage=storage),
        )

        result = manager.driver("acme").convert("Hello")

        assert "acme" in manager.available_drivers()
        assert client.calls[0]["content"] == "Hello"
        assert storage.files[result.path] == b"Hello"

    def test_extend_replaces_cached_instance(self, settings):
        manager = DriverManager(settings)
        original = manager.driver("null")

        replacement = NullConverter(settings)
        manager.extend("null", lambda s: replacement)

        assert manager.driver("null") is replacement
        assert manager.driver("null") is not original

    def test_empty_name_rejected(self, settings):
        with pytest.raises(ConfigurationError):
            DriverManager(settings).extend("  ", lambda s: NullConverter(s))


class TestMissingSdk:

    def test_missing_sdk_raises_with_install_hint(self, settings, monkeypatch):
        monkeypatch.setattr("tts_bridge.core.requirements.is_module_available", lambda name: False)

        with pytest.raises(ConfigurationError) as exc_info:
            DriverManager(settings).driver("polly")
        assert "pip install boto3" in exc_info.value.message

    def test_skip_setup(self, settings, monkeypatch):
        monkeypatch.setattr("tts_bridge.core.requirements.is_module_available", lambda name: False)
        monkeypatch.setenv("TTS_BRIDGE_SKIP_SETUP", "1")

        assert isinstance(DriverManager(settings).driver("google"), GoogleConverter)

    def test_null_needs_no_sdk(self, settings, monkeypatch):
        monkeypatch.setattr("tts_bridge.core.requirements.is_module_available", lambda name: False)
        assert DriverManager(settings).driver("null").convert("Hi").path is None


class TestGetManager:

    def test_singleton(self, settings):
        assert get_manager(settings) is get_manager(settings)

    def test_reset(self, settings):
        first = get_manager(settings)
        reset_manager()
        assert get_manager(settings) is not first


class TestNullDriver:

    def test_no_call_no_write(self, settings, tmp_path):
        converter = NullConverter(settings)

        result = converter.convert("Hello", {"voice": "ignored"})

        assert result.path is None
        assert result.driver == "null"
        assert result.chunks == 0
        assert result.bytes == 0
        assert not (tmp_path / "storage").exists()
