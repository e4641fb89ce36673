"""
Command-Line Interface for tts-bridge.

Converts text, files or web pages with the configured driver and stores
the audio under the storage root.

Usage Examples:
    # Convert text with the configured driver
    tts-bridge "Hello world"

    # Same, explicit driver and voice
    tts-bridge --text "Hello world" --driver polly --voice Joanna --engine neural

    # Convert a file of SSML into a named output
    tts-bridge chapter1.xml --source path --ssml --out books/chapter1.mp3

    # Convert a web page
    tts-bridge https://example.com/article --source url --driver google --language de-DE

    # Dry-run: show chunking and target name without calling the provider
    tts-bridge --text "Test" --driver google --dry-run --json

    # Polly speech marks instead of audio
    tts-bridge "Hello world" --driver polly --speech-marks word sentence --json

    # SDK status of every driver
    tts-bridge --drivers

Environment Variables:
    TTS_BRIDGE_SETTINGS: Settings file (default: config/settings.yaml)
    TTS_BRIDGE_DRIVER: Driver override
    TTS_BRIDGE_LANGUAGE: Language override
"""

from __future__ import annotations

import argparse
import json
import os
from typing import Any, Dict, List, Optional

from tts_bridge.core.config import OUTPUT_FORMATS, load_settings
from tts_bridge.core.errors import TTSError
from tts_bridge.core.logging import configure_logging, fail, get_logger, info
from tts_bridge.core.requirements import DRIVER_REGISTRY, driver_status
from tts_bridge.tts.chunker import chunk_text, is_above_limit
from tts_bridge.tts.sources import SourceKind, TextSource
from tts_bridge.tts.storage import extension_for, make_filename


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="tts-bridge", description="tts-bridge CLI (cloud text-to-speech)")

    # Input
    parser.add_argument("text_pos", nargs="?", help="Text, file path or URL to convert (positional)")
    parser.add_argument("--text", help="Text, file path or URL to convert")
    parser.add_argument("--source", choices=SourceKind.ALL, default=SourceKind.TEXT,
                        help="How to read the input (default: text)")

    # Driver and options
    parser.add_argument("--driver", help="Driver to use (polly, google, null)")
    parser.add_argument("--voice", help="Voice override")
    parser.add_argument("--format", choices=OUTPUT_FORMATS, help="Output format override")
    parser.add_argument("--engine", help="Polly engine override (standard, neural, ...)")
    parser.add_argument("--language", help="Language code override")
    parser.add_argument("--ssml", action="store_true", help="Treat the input as SSML")
    parser.add_argument("--speech-marks", nargs="+", metavar="TYPE",
                        help="Polly only: return speech marks of these types instead of audio")

    # Output
    parser.add_argument("--out", help="Output path relative to the storage root")
    parser.add_argument("--settings", help="Settings file (default: $TTS_BRIDGE_SETTINGS or config/settings.yaml)")

    # Execution modes
    parser.add_argument("--dry-run", action="store_true", help="Resolve and chunk without calling the provider")
    parser.add_argument("--json", action="store_true", help="Print JSON summary")
    parser.add_argument("--drivers", action="store_true", help="Show all drivers and their SDK status")

    return parser.parse_args(argv)


def _build_options(args: argparse.Namespace) -> Dict[str, Any]:
    options: Dict[str, Any] = {}
    if args.voice:
        options["voice"] = args.voice
    if args.format:
        options["format"] = args.format
    if args.engine:
        options["engine"] = args.engine
    if args.language:
        options["language"] = args.language
    return options


def _print_drivers(as_json: bool) -> None:
    results = driver_status()
    if as_json:
        print(json.dumps([
            {
                "driver": r.driver,
                "satisfied": r.satisfied,
                "message": r.message,
                "missing_packages": r.missing_packages,
            }
            for r in results
        ], ensure_ascii=False))
        return

    for r in results:
        mark = "OK" if r.satisfied else "MISSING"
        print(f"[{mark}] {r.driver:<8} {r.message}")
        notes = DRIVER_REGISTRY[r.driver].notes
        if notes:
            print(f"           {notes}")


def _dry_run_summary(converter, identifier: str, text: str, options: Dict[str, Any], out: Optional[str]) -> dict:
    """Chunking and target name for ``text`` without calling the provider."""
    limit = converter.chunk_limit
    chunks = chunk_text(text, limit).chunks if is_above_limit(text, limit) else [text]
    output_format = options.get("format") or converter.config.output_format
    target = out or make_filename(identifier, extension_for(output_format), converter.config.storage.prefix)
    return {
        "driver": converter.name,
        "text_len": len(text),
        "chunk_limit": limit,
        "chunks": len(chunks),
        "chunk_lengths": [len(c) for c in chunks],
        "target": target,
    }


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Returns:
        Exit code (0 for success, 1 for conversion errors).
    """
    args = _parse_args(argv)

    if args.drivers:
        _print_drivers(args.json)
        return 0

    identifier = args.text or args.text_pos
    if not identifier:
        raise SystemExit("Provide --text or a positional text.")

    configure_logging()
    log = get_logger("tts-bridge.cli")

    settings_path = args.settings or os.getenv("TTS_BRIDGE_SETTINGS") or "config/settings.yaml"
    options = _build_options(args)

    try:
        settings = load_settings(settings_path, missing_ok=args.settings is None)

        from tts_bridge.tts.manager import DriverManager
        converter = DriverManager(settings).driver(args.driver)
        converter = converter.source(args.source)
        if args.ssml:
            converter = converter.ssml()
        if args.out:
            converter = converter.save_to(args.out)

        if args.dry_run:
            text = TextSource(args.source, timeout_s=converter.config.source_timeout_s).resolve(identifier)
            payload = {"ok": True, "dry_run": True, **_dry_run_summary(converter, identifier, text, options, args.out)}
            if args.json:
                print(json.dumps(payload, ensure_ascii=False))
            else:
                info(log, "dry_run", driver=payload["driver"], chunks=payload["chunks"])
                print(payload)
            print("DRY_RUN_OK")
            return 0

        if args.speech_marks:
            if not hasattr(converter, "speech_marks"):
                raise SystemExit(f"--speech-marks is only supported by the polly driver, not {converter.name}")
            converter = converter.speech_marks(args.speech_marks)

        result = converter.convert(identifier, options)
    except TTSError as exc:
        fail(log, "cli_failed", error=exc.code, message=exc.message)
        if args.json:
            print(json.dumps(exc.to_dict(), ensure_ascii=False))
        else:
            print(f"[{exc.code}] {exc.message}")
        return 1
    except FileNotFoundError as exc:
        print(str(exc))
        return 1

    payload = {"dry_run": False, **result.to_dict()}
    if args.json:
        print(json.dumps(payload, ensure_ascii=False))
    else:
        print(payload)
    print("CLI_OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
