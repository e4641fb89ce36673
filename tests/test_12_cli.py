"""Tests for the tts-bridge command line."""
from __future__ import annotations

import json

import pytest

from tts_bridge import cli
from tts_bridge.tts.storage import make_filename


@pytest.fixture
def settings_file(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text(
        "tts:\n"
        "  services:\n"
        "    google:\n"
        "      chunk_limit: 10\n"
        f"storage:\n  base_dir: {tmp_path / 'storage'}\n",
        encoding="utf-8",
    )
    return str(path)


def _json_line(out: str) -> dict:
    return json.loads(out.strip().splitlines()[0])


class TestDryRun:

    def test_dry_run(self, settings_file, capsys):
        code = cli.main(["--text", "dry run test", "--settings", settings_file, "--dry-run"])

        assert code == 0
        assert "DRY_RUN_OK" in capsys.readouterr().out

    def test_dry_run_json_chunks(self, settings_file, capsys):
        code = cli.main([
            "one two three four five", "--driver", "google",
            "--settings", settings_file, "--dry-run", "--json",
        ])

        payload = _json_line(capsys.readouterr().out)
        assert code == 0
        assert payload["dry_run"] is True
        assert payload["driver"] == "google"
        assert payload["chunks"] == 3
        assert payload["chunk_limit"] == 10
        assert payload["target"] == make_filename("one two three four five", "mp3")

    def test_dry_run_explicit_out(self, settings_file, capsys):
        cli.main(["Hi", "--driver", "google", "--out", "a/b.mp3", "--settings", settings_file, "--dry-run", "--json"])
        assert _json_line(capsys.readouterr().out)["target"] == "a/b.mp3"

    def test_dry_run_path_source(self, settings_file, tmp_path, capsys):
        story = tmp_path / "story.txt"
        story.write_text("a" * 30, encoding="utf-8")

        cli.main([str(story), "--source", "path", "--driver", "google", "--settings", settings_file, "--dry-run", "--json"])

        payload = _json_line(capsys.readouterr().out)
        assert payload["text_len"] == 30
        assert payload["chunk_lengths"] == [30]


class TestConvert:

    def test_null_driver(self, settings_file, capsys):
        code = cli.main(["Hello", "--driver", "null", "--settings", settings_file, "--json"])

        payload = _json_line(capsys.readouterr().out)
        assert code == 0
        assert payload["ok"] is True
        assert payload["driver"] == "null"
        assert payload["path"] is None

    def test_unknown_driver(self, settings_file, capsys):
        code = cli.main(["Hello", "--driver", "azure", "--settings", settings_file, "--json"])

        payload = _json_line(capsys.readouterr().out)
        assert code == 1
        assert payload["error"] == "CONFIGURATION_ERROR"

    def test_speech_marks_need_polly(self, settings_file):
        with pytest.raises(SystemExit):
            cli.main(["Hello", "--driver", "null", "--speech-marks", "word", "--settings", settings_file])

    def test_missing_settings_file(self, tmp_path, capsys):
        code = cli.main(["Hello", "--settings", str(tmp_path / "missing.yaml")])
        assert code == 1

    def test_no_input(self):
        with pytest.raises(SystemExit):
            cli.main([])


class TestDrivers:

    def test_drivers_json(self, capsys):
        code = cli.main(["--drivers", "--json"])

        status = json.loads(capsys.readouterr().out)
        assert code == 0
        assert [s["driver"] for s in status] == ["polly", "google", "null"]

    def test_drivers_text(self, capsys):
        assert cli.main(["--drivers"]) == 0
        assert "null" in capsys.readouterr().out
