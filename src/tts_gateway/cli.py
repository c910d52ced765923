"""
Command-Line Interface for tts-gateway.

Synthesizes through the same SynthesisGateway the HTTP service uses, without
running the server. Also shows the exact provider payload a request would
produce (dry run) and launches the HTTP service.

Usage Examples:
    # Single text synthesis (Standard adapter, MP3)
    tts-gateway "Halo, apa kabar?" --out halo.mp3

    # Commercial adapter, WAV output
    tts-gateway --text "Halo" --mode commercial --encoding LINEAR16 --out halo.wav

    # Batch processing from file
    tts-gateway --file inputs.txt --out output_dir/

    # Dry-run mode (no credentials, no network; prints the provider payload)
    tts-gateway --text "Halo" --mode managed-identity --dry-run --json

    # Run the HTTP service
    tts-gateway --serve --host 0.0.0.0 --port 3000

Environment Variables:
    GOOGLE_TTS_API: Standard adapter API key
    OPENAI_API_KEY: Commercial adapter API key
    GOOGLE_APPLICATION_CREDENTIALS_JSON: Managed-identity service account
    TTS_GATEWAY_SETTINGS: Settings file (default config/settings.yaml)

Exit Codes:
    0: Success
    1: Usage error
    2: Gateway error (validation, configuration, provider)
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import List, Optional
from uuid import uuid4

from tts_gateway.core.config import Defaults, load_settings, settings_path
from tts_gateway.core.logging import configure_logging, fail, get_logger, info, set_request_id
from tts_gateway.errors import GatewayError
from tts_gateway.providers.base import SynthesisRequest

EXIT_GATEWAY_ERROR = 2


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="tts-gateway CLI (serverless synth)")

    # Input options
    parser.add_argument("text_pos", nargs="?", help="Text to synthesize (positional)")
    parser.add_argument("--text", help="Text to synthesize")
    parser.add_argument("--file", help="Batch input file (1 line = 1 item)")

    # Output options
    parser.add_argument("--out", help="Output path (file or dir in batch mode)")

    # Request fields
    parser.add_argument("--mode", help="apiMode: standard, managed-identity or commercial")
    parser.add_argument("--language", help="Language code override (e.g. id-ID)")
    parser.add_argument("--voice", help="Provider voice name")
    parser.add_argument("--model", help="Provider voice model (Standard adapter)")
    parser.add_argument("--encoding", help="Audio encoding: MP3 or LINEAR16")
    parser.add_argument("--pitch", type=float, default=Defaults.PITCH, help="Pitch in semitones")
    parser.add_argument("--rate", type=float, default=Defaults.SPEAKING_RATE, help="Speaking rate")

    # Execution modes
    parser.add_argument("--settings", help="Settings file (default: TTS_GATEWAY_SETTINGS or config/settings.yaml)")
    parser.add_argument("--dry-run", action="store_true",
                        help="Print the provider payload without calling it")
    parser.add_argument("--json", action="store_true",
                        help="Print JSON summary")

    # Server
    parser.add_argument("--serve", action="store_true", help="Run the HTTP service")
    parser.add_argument("--host", default="127.0.0.1", help="Bind host for --serve")
    parser.add_argument("--port", type=int, default=3000, help="Bind port for --serve")

    return parser.parse_args(argv)


def _load_texts(args: argparse.Namespace) -> List[str]:
    """
    Load input texts from arguments or file.

    Raises:
        SystemExit: If no input provided or conflicting options used.
    """
    text = args.text or args.text_pos

    if args.file:
        if text:
            raise SystemExit("Use --file without --text or positional text.")
        lines = Path(args.file).read_text(encoding="utf-8").splitlines()
        items = [line.strip() for line in lines if line.strip()]
        if not items:
            raise SystemExit("Input file is empty.")
        return items

    if not text:
        raise SystemExit("Provide --text or a positional text.")
    return [text]


def _extension_for(content_type: str) -> str:
    return ".wav" if content_type == "audio/wav" else ".mp3"


def _resolve_output_path(args: argparse.Namespace, index: int, content_type: str) -> Path:
    """
    Output path for item ``index``.

    Batch mode writes numbered files into a directory; single mode uses
    --out or ``out.<ext>`` with the extension matching the audio.
    """
    if args.file:
        out_dir = Path(args.out or "out")
        out_dir.mkdir(parents=True, exist_ok=True)
        return out_dir / f"item_{index + 1:03d}{_extension_for(content_type)}"

    out_path = Path(args.out or f"out{_extension_for(content_type)}")
    out_path.parent.mkdir(parents=True, exist_ok=True)
    return out_path


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("tts_gateway.main:app", host=args.host, port=args.port)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Returns:
        Exit code (0 for success, 2 for gateway errors).
    """
    args = _parse_args(argv)

    if args.serve:
        return _serve(args)

    configure_logging()
    log = get_logger("tts-gateway.cli")

    from tts_gateway.services.gateway import SynthesisGateway

    settings = load_settings(args.settings or settings_path())
    texts = _load_texts(args)
    gateway = SynthesisGateway(settings)

    def make_request(text: str) -> SynthesisRequest:
        return SynthesisRequest(
            text=text,
            api_mode=args.mode or "",
            language_code=args.language or "",
            model_name=args.model,
            voice_name=args.voice,
            audio_encoding=args.encoding or "",
            pitch=args.pitch,
            speaking_rate=args.rate,
        )

    try:
        if args.dry_run:
            items = []
            for text in texts:
                request = gateway.resolve(make_request(text))
                items.append({
                    "mode": request.api_mode,
                    "chars": len(request.text),
                    "payload": gateway.build_payload(request),
                })
            payload = {"ok": True, "dry_run": True, "items": items}

            if args.json:
                print(json.dumps(payload, ensure_ascii=False))
            else:
                info(log, "dry_run", items=len(items))
                print(payload)
            print("DRY_RUN_OK")
            return 0

        results = []
        for i, text in enumerate(texts):
            rid = str(uuid4())[:12]
            set_request_id(rid)

            result = gateway.synthesize(make_request(text), request_id=rid)
            out_path = _resolve_output_path(args, i, result.content_type)
            out_path.write_bytes(result.audio_bytes)
            info(log, "cli_saved", out=str(out_path), bytes=len(result.audio_bytes))
            results.append({
                "out": str(out_path),
                "bytes": len(result.audio_bytes),
                "content_type": result.content_type,
                "provider": result.provider,
            })

    except GatewayError as e:
        fail(log, "cli_failed", code=e.code, message=e.message)
        if args.json:
            print(json.dumps({"ok": False, **e.to_dict()}, ensure_ascii=False))
        else:
            print(f"error: {e.message}")
        return EXIT_GATEWAY_ERROR

    finally:
        gateway.close()

    payload = {"ok": True, "dry_run": False, "items": results}
    if args.json:
        print(json.dumps(payload, ensure_ascii=False))
    else:
        print(payload)
    print("CLI_OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
