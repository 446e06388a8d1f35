from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from grok_bridge.handlers import images
from grok_bridge.main import app
from grok_bridge.models import UploadResult
from grok_bridge.services.grok_upload import GrokUploadError
from grok_bridge.services.kv_cache import Environment, InMemoryKVCache
from grok_bridge.services.resolver import ImageNotFoundError


@pytest.fixture
def test_env():
    env = Environment(kv_cache=InMemoryKVCache())
    app.dependency_overrides[images.get_environment] = lambda: env
    yield env
    app.dependency_overrides.clear()


@pytest.fixture
def client(test_env):
    return TestClient(app)


def test_healthz(client):
    assert client.get("/healthz").json() == {"status": "ok"}


def test_upload_then_fetch(client, test_env):
    resp = client.post("/images/upload", content=b"png-bytes", headers={"Content-Type": "image/png"})

    assert resp.status_code == 200
    url = resp.json()["url"]
    assert url.startswith("/images/upload-") and url.endswith(".png")
    assert len(test_env.kv_cache) == 1

    fetched = client.get(url)
    assert fetched.status_code == 200
    assert fetched.content == b"png-bytes"
    assert fetched.headers["content-type"] == "image/png"


@pytest.mark.parametrize(
    "content, content_type, status",
    [
        (b"x", "text/plain", 415),
        (b"x", "image/svg+xml", 415),
        (b"", "image/png", 400),
    ],
)
def test_upload_rejections(client, content, content_type, status):
    resp = client.post("/images/upload", content=content, headers={"Content-Type": content_type})
    assert resp.status_code == status


def test_upload_too_large(client, monkeypatch):
    monkeypatch.setattr(images.settings, "max_upload_bytes", 4)
    resp = client.post("/images/upload", content=b"12345", headers={"Content-Type": "image/jpeg"})
    assert resp.status_code == 413


def test_fetch_missing_image(client):
    assert client.get("/images/upload-abc.png").status_code == 404


def test_grok_upload_route_passes_environment(client, test_env):
    mocked = AsyncMock(return_value=UploadResult(file_id="f1", file_uri="u1"))
    with patch.object(images, "upload_image", mocked):
        resp = client.post("/grok/upload-file", json={"image": "/images/upload-ab.png", "cookie": "sso=1"})

    assert resp.status_code == 200
    assert resp.json() == {"fileId": "f1", "fileUri": "u1"}
    args = mocked.await_args.args
    assert args[0] == "/images/upload-ab.png"
    assert args[1] == "sso=1"
    assert args[3] is test_env


def test_grok_upload_route_requires_cookie(client, monkeypatch):
    monkeypatch.setattr(images.settings, "cookie", None)
    resp = client.post("/grok/upload-file", json={"image": "abcd"})
    assert resp.status_code == 400


@pytest.mark.parametrize(
    "error, status",
    [
        (ImageNotFoundError("/images/upload-ab.png"), 404),
        (GrokUploadError(429, "rate limited"), 502),
    ],
)
def test_grok_upload_route_maps_errors(client, error, status):
    with patch.object(images, "upload_image", AsyncMock(side_effect=error)):
        resp = client.post("/grok/upload-file", json={"image": "abcd", "cookie": "sso=1"})

    assert resp.status_code == status
    assert str(error) in resp.json()["detail"]
