from __future__ import annotations

import base64
import importlib.util
import json
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from grok_bridge.models import UploadResult
from grok_bridge.services.grok_upload import GrokUploadError

SCRIPT = Path(__file__).resolve().parent.parent / "scripts" / "upload_image.py"


@pytest.fixture
def script():
    spec = importlib.util.spec_from_file_location("upload_image_script", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_prints_upload_result(script, monkeypatch, capsys):
    mocked = AsyncMock(return_value=UploadResult(file_id="f1", file_uri="u1"))
    monkeypatch.setattr(script, "upload_image", mocked)
    monkeypatch.setattr("sys.argv", ["upload_image.py", "--image", "https://example.com/a.png", "--cookie", "sso=1"])

    assert script.main() == 0

    assert json.loads(capsys.readouterr().out) == {"file_id": "f1", "file_uri": "u1"}
    assert mocked.await_args.args[:2] == ("https://example.com/a.png", "sso=1")


def test_reads_local_file_as_base64(script, monkeypatch, tmp_path):
    image = tmp_path / "cat.jpg"
    image.write_bytes(b"\xff\xd8\xff")
    mocked = AsyncMock(return_value=UploadResult())
    monkeypatch.setattr(script, "upload_image", mocked)
    monkeypatch.setattr("sys.argv", ["upload_image.py", "--image", f"@{image}", "--cookie", "sso=1"])

    script.main()

    assert mocked.await_args.args[0] == base64.b64encode(b"\xff\xd8\xff").decode()


def test_reports_upload_failure(script, monkeypatch, capsys):
    monkeypatch.setattr(script, "upload_image", AsyncMock(side_effect=GrokUploadError(500, "boom")))
    monkeypatch.setattr("sys.argv", ["upload_image.py", "--image", "abcd", "--cookie", "sso=1"])

    assert script.main() == 1
    assert "500 boom" in capsys.readouterr().err
