"""
Command-Line Interface for tts-bridge.

Synthesizes speech through the same mapping and backend as the HTTP server,
without starting it. Dry-run mode shows the resolved Microsoft parameters
without touching the network.

Usage Examples:
    # Single text synthesis (voice/format in OpenAI terms)
    tts-bridge --text "Hello world" --voice nova --out hello.mp3

    # Positional text, output name derived from the format (speech.wav)
    tts-bridge "你好，世界" --format wav

    # Dry-run: show voice, rate and output profile
    tts-bridge --text "Test" --speed 1.5 --dry-run --json

    # Use the Azure backend for this run
    tts-bridge --text "Test" --backend azure --format opus

Environment Variables:
    TTS_BRIDGE_BACKEND: Backend to use (edge, azure)
    AZURE_SPEECH_KEY / AZURE_SPEECH_REGION: Azure credentials
    TTS_BRIDGE_SETTINGS: Settings file (default config/settings.yaml)
"""

from __future__ import annotations

import argparse
import asyncio
import json
import os
from pathlib import Path
from typing import List, Optional
from uuid import uuid4

from tts_bridge.core.config import load_settings
from tts_bridge.core.logging import configure_logging, get_logger, info, set_request_id
from tts_bridge.tts.formats import content_type_for_format, extension_for_format


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        argv: Optional list of arguments (defaults to sys.argv).

    Returns:
        Parsed argument namespace with all CLI options.
    """
    parser = argparse.ArgumentParser(description="tts-bridge CLI (serverless synth)")

    parser.add_argument("text_pos", nargs="?", help="Text to synthesize (positional)")
    parser.add_argument("--text", help="Text to synthesize")

    # OpenAI request fields
    parser.add_argument("--voice", help="OpenAI voice (alloy, echo, fable, onyx, nova, shimmer)")
    parser.add_argument("--format", dest="response_format",
                        help="OpenAI response_format (mp3, opus, aac, flac, wav, pcm)")
    parser.add_argument("--speed", type=float, help="Speed multiplier (0.25 - 4.0)")

    parser.add_argument("--out", help="Output path (default: speech.<ext>)")
    parser.add_argument("--backend", help="Backend override (edge, azure)")

    parser.add_argument("--dry-run", action="store_true",
                        help="Resolve parameters without synthesis")
    parser.add_argument("--json", action="store_true",
                        help="Print JSON summary")

    return parser.parse_args(argv)


def _load_text(args: argparse.Namespace) -> str:
    text = args.text or args.text_pos
    if not text:
        raise SystemExit("Provide --text or a positional text.")
    return text


def _print_payload(payload: dict, as_json: bool) -> None:
    if as_json:
        print(json.dumps(payload, ensure_ascii=False))
    else:
        print(payload)


async def _synthesize(service, job, out_path: Path) -> dict:
    from tts_bridge.tts.backend import close_backend

    try:
        result = await service.synthesize(job, request_id="cli")
    finally:
        await close_backend()

    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_bytes(result.audio)
    return {
        "out": str(out_path),
        "bytes": len(result.audio),
        "backend": service.backend.name,
        "output_format": result.output_format,
        "content_type": result.content_type,
        "seconds": round(result.total_seconds, 3),
    }


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Orchestrates the CLI workflow:
        1. Parse arguments and apply the backend override
        2. Load settings, create the backend and map the request
        3. Dry-run: print the mapped parameters and exit
        4. Otherwise synthesize and write the audio file

    Args:
        argv: Optional list of command-line arguments.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    args = _parse_args(argv)

    if args.backend:
        os.environ["TTS_BRIDGE_BACKEND"] = args.backend

    configure_logging()
    log = get_logger("tts-bridge.cli")
    set_request_id(str(uuid4())[:12])

    settings = load_settings()
    text = _load_text(args)

    from tts_bridge.services.speech_service import BridgeError, SpeechJob, SpeechService

    job = SpeechJob(text=text, voice=args.voice, response_format=args.response_format, speed=args.speed)
    try:
        service = SpeechService(settings)
    except BridgeError as e:
        _print_payload({"ok": False, "error": e.code, "message": e.message}, args.json)
        return 1

    # Format as the backend will produce it, not as requested
    params = service.prepare(job)
    out_path = Path(args.out or f"speech.{extension_for_format(params.output_format)}")

    if args.dry_run:
        payload = {
            "ok": True,
            "dry_run": True,
            "backend": service.backend.name,
            "text_len": len(text),
            "content_type": content_type_for_format(params.output_format),
            "out": str(out_path),
            **params.to_dict(),
        }
        if not args.json:
            info(log, "dry_run", voice_name=params.voice_name, rate=params.rate,
                 output_format=params.output_format)
        _print_payload(payload, args.json)
        print("DRY_RUN_OK")
        return 0

    info(log, "synth_start", chars=len(text), out=str(out_path))
    try:
        item = asyncio.run(_synthesize(service, job, out_path))
    except BridgeError as e:
        _print_payload({"ok": False, "error": e.code, "message": e.message}, args.json)
        return 1

    _print_payload({"ok": True, "dry_run": False, **item}, args.json)
    print("CLI_OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
