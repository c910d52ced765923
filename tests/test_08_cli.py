import base64
import json

import httpx
import pytest

from tts_gateway import cli


@pytest.fixture
def no_credentials(monkeypatch, tmp_path):
    """CLI arguments pointing at an absent settings file, with no keys in the env."""
    for name in ("GOOGLE_TTS_API", "OPENAI_API_KEY", "GOOGLE_APPLICATION_CREDENTIALS_JSON"):
        monkeypatch.delenv(name, raising=False)
    return ["--settings", str(tmp_path / "absent.yaml")]


@pytest.fixture
def mock_http(monkeypatch):
    """Route every httpx.Client the CLI creates through a recording mock."""
    real_client = httpx.Client
    requests = []

    def install(responder):
        def handler(request):
            requests.append(request)
            return responder(request)

        monkeypatch.setattr(httpx, "Client", lambda **kw: real_client(transport=httpx.MockTransport(handler)))
        return requests

    return install


def _last_json_line(out):
    lines = [line for line in out.splitlines() if line.startswith("{")]
    return json.loads(lines[-1])


def test_cli_dry_run(capsys, no_credentials):
    code = cli.main(["--text", "dry run test", "--dry-run"] + no_credentials)
    assert code == 0
    out = capsys.readouterr().out
    assert "DRY_RUN_OK" in out


def test_cli_dry_run_json_payload(capsys, no_credentials):
    code = cli.main([
        "Halo", "--mode", "openai", "--encoding", "LINEAR16", "--rate", "1.25", "--dry-run", "--json",
    ] + no_credentials)
    assert code == 0

    summary = _last_json_line(capsys.readouterr().out)
    assert summary["ok"] is True
    assert summary["dry_run"] is True
    item = summary["items"][0]
    assert item["mode"] == "commercial"
    assert item["chars"] == 4
    assert item["payload"]["input"] == "Halo"
    assert item["payload"]["response_format"] == "wav"
    assert item["payload"]["speed"] == 1.25


def test_cli_dry_run_batch(capsys, no_credentials, tmp_path):
    inputs = tmp_path / "inputs.txt"
    inputs.write_text("Satu\n\nDua\n", encoding="utf-8")

    code = cli.main(["--file", str(inputs), "--dry-run", "--json"] + no_credentials)
    assert code == 0

    summary = _last_json_line(capsys.readouterr().out)
    assert [item["payload"]["input"]["text"] for item in summary["items"]] == ["Satu", "Dua"]


def test_cli_missing_key_is_gateway_error(capsys, no_credentials, tmp_path):
    code = cli.main(["--text", "Halo", "--out", str(tmp_path / "out.mp3"), "--json"] + no_credentials)

    assert code == cli.EXIT_GATEWAY_ERROR
    assert _last_json_line(capsys.readouterr().out) == {"ok": False, "error": "TTS API key not configured"}
    assert not (tmp_path / "out.mp3").exists()


def test_cli_empty_text_is_rejected(capsys, no_credentials):
    code = cli.main(["   ", "--dry-run"] + no_credentials)
    assert code == cli.EXIT_GATEWAY_ERROR
    assert "Text is required" in capsys.readouterr().out


def test_cli_requires_input(no_credentials):
    with pytest.raises(SystemExit):
        cli.main(no_credentials)


def test_cli_synth_writes_audio(capsys, monkeypatch, no_credentials, mock_http, tmp_path):
    audio = b"ID3\x03cli-audio"
    monkeypatch.setenv("GOOGLE_TTS_API", "cli-key")
    requests = mock_http(lambda r: httpx.Response(
        200, json={"audioContent": base64.b64encode(audio).decode("ascii")},
    ))
    out_path = tmp_path / "halo.mp3"

    code = cli.main(["--text", "Halo", "--out", str(out_path)] + no_credentials)

    assert code == 0
    assert out_path.read_bytes() == audio
    assert "CLI_OK" in capsys.readouterr().out
    assert requests[0].url.params["key"] == "cli-key"


def test_cli_batch_uses_wav_extension(monkeypatch, no_credentials, mock_http, tmp_path):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-cli")
    mock_http(lambda r: httpx.Response(200, content=b"RIFFwav"))
    inputs = tmp_path / "inputs.txt"
    inputs.write_text("Satu\nDua\n", encoding="utf-8")
    out_dir = tmp_path / "out"

    code = cli.main([
        "--file", str(inputs), "--out", str(out_dir), "--mode", "commercial", "--encoding", "LINEAR16",
    ] + no_credentials)

    assert code == 0
    assert sorted(p.name for p in out_dir.iterdir()) == ["item_001.wav", "item_002.wav"]
