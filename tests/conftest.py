"""Shared fixtures for the grok_bridge test suite."""
from __future__ import annotations

import json
from typing import Callable

import httpx
import pytest

from grok_bridge.config import Settings
from grok_bridge.services.kv_cache import Environment, InMemoryKVCache

UPLOAD_URL = "https://grok.com/rest/app-chat/upload-file"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        upload_url=UPLOAD_URL,
        dynamic_statsig=False,
        x_statsig_id="c3RhdHNpZw==",
        cookie=None,
    )


@pytest.fixture
def kv_cache() -> InMemoryKVCache:
    return InMemoryKVCache()


@pytest.fixture
def env(kv_cache: InMemoryKVCache) -> Environment:
    return Environment(kv_cache=kv_cache)


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)

    def upload_bodies(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests if r.method == "POST"]


@pytest.fixture
def make_client():
    """Build an AsyncClient around a handler; returns (client, transport)."""

    def _make(handler: Callable[[httpx.Request], httpx.Response]):
        transport = RecordingTransport(handler)
        client = httpx.AsyncClient(transport=transport, follow_redirects=True)
        return client, transport

    return _make
