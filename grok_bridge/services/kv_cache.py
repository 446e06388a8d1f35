"""KV cache collaborator for locally uploaded images.

Images posted to ``/images/upload`` are stored under
``image/upload-{uuid}.{ext}`` and handed back to clients as
``/images/upload-{uuid}.{ext}``; :mod:`grok_bridge.services.classifier`
maps the latter back to the former.  Production deployments plug in their
own store by implementing :class:`KVCache`.
"""
from __future__ import annotations

import logging
import uuid
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict

from grok_bridge.models import CacheEntry, CacheMetadata
from grok_bridge.utils.mime import extension_from_mime

logger = logging.getLogger(__name__)


@runtime_checkable
class KVCache(Protocol):
    async def get_with_metadata(self, key: str) -> CacheEntry | None:
        ...


class InMemoryKVCache:
    """Process-local KV cache. Entries live until the process exits."""

    def __init__(self) -> None:
        self._entries: dict[str, CacheEntry] = {}

    def put(self, key: str, value: bytes, *, content_type: str | None = None) -> None:
        self._entries[key] = CacheEntry(value=value, metadata=CacheMetadata(content_type=content_type))
        logger.debug("Cached %d bytes under %s", len(value), key)

    async def get_with_metadata(self, key: str) -> CacheEntry | None:
        return self._entries.get(key)

    def __len__(self) -> int:
        return len(self._entries)


class Environment(BaseModel):
    """Optional runtime bindings handed to :func:`upload_image`."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    kv_cache: KVCache | None = None


def local_upload_path(content_type: str) -> tuple[str, str]:
    """Mint a new local upload reference.

    Returns ``(public_path, cache_key)``, e.g.
    ``("/images/upload-1f0c....png", "image/upload-1f0c....png")``.
    """

    name = f"upload-{uuid.uuid4()}.{extension_from_mime(content_type)}"
    return f"/images/{name}", f"image/{name}"
