"""Turn a classified image reference into a base64 payload, MIME type and filename.

Each :class:`~grok_bridge.models.ImageKind` has one resolution path:

* ``LOCAL_CACHE``  - read bytes from the KV cache
* ``REMOTE_URL``   - download the image (redirects followed)
* ``DATA_URI``     - split ``data:<mime>;base64,<payload>``
* ``RAW_BASE64``   - use the input as-is

Malformed input never raises here; it degrades to raw base64 and the
default ``image/jpeg`` MIME type.  Only a missing cache entry and a failed
download are errors.
"""
from __future__ import annotations

import base64
import logging
import re
from typing import Optional

import httpx

from grok_bridge.config import Settings, get_settings
from grok_bridge.models import ImageKind, ResolvedImage
from grok_bridge.services.classifier import cache_key_for, classify, is_local_upload_path
from grok_bridge.services.kv_cache import KVCache
from grok_bridge.utils.mime import (
    DEFAULT_MIME_TYPE,
    essence,
    filename_for_mime,
    is_type_subtype,
    mime_from_extension,
    normalize_image_mime,
)

logger = logging.getLogger(__name__)

_DATA_URI_HEADER_RE = re.compile(r"^data:([^;]+);base64$", re.IGNORECASE)


class ImageUploadError(Exception):
    """Base class for failures while resolving or uploading an image."""


class ImageNotFoundError(ImageUploadError, LookupError):
    """Raised when a local upload reference has no (or an expired) cache entry."""

    def __init__(self, reference: str):
        super().__init__(f"Local upload image not found or expired: {reference}")
        self.reference = reference


class ImageDownloadError(ImageUploadError):
    """Raised when a remote image URL answers with a non-2xx status."""

    def __init__(self, status: int, url: str):
        super().__init__(f"Failed to download image: {status}")
        self.status = status
        self.url = url


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def parse_data_uri(data_uri: str) -> tuple[str, str]:
    """Split a data URI into ``(base64_payload, mime_type)``.

    Without a comma the whole string is treated as the payload.  A header
    that is not exactly ``data:<type>/<subtype>;base64`` yields the default
    MIME type; the payload is never re-encoded.
    """

    trimmed = data_uri.strip()
    header, sep, payload = trimmed.partition(",")
    if not sep:
        return trimmed, DEFAULT_MIME_TYPE
    match = _DATA_URI_HEADER_RE.match(header)
    mime = match.group(1) if match else DEFAULT_MIME_TYPE
    if not is_type_subtype(mime):
        mime = DEFAULT_MIME_TYPE
    return payload, mime


class ImageResolver:
    """Resolve image references to :class:`ResolvedImage` values.

    The resolver owns an :class:`httpx.AsyncClient` for remote downloads
    unless one is passed in.  Call :meth:`close` when done.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=self._settings.request_timeout,
            proxy=self._settings.proxy_url,
            follow_redirects=True,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def resolve(self, reference: str, *, cache: KVCache | None = None) -> ResolvedImage:
        kind = classify(reference, allow_local_cache=cache is not None)
        if cache is None and is_local_upload_path(reference):
            logger.warning(
                "Local upload reference given without a KV cache; treating it as %s", kind.value
            )

        if kind is ImageKind.LOCAL_CACHE and cache is not None:
            return await self._from_cache(reference, cache)
        if kind is ImageKind.REMOTE_URL:
            return await self._from_url(reference.strip())
        if kind is ImageKind.DATA_URI:
            payload, mime = parse_data_uri(reference)
            return ResolvedImage(content=payload, mime_type=mime, filename=filename_for_mime(mime))
        return ResolvedImage(content=reference.strip(), mime_type=DEFAULT_MIME_TYPE, filename="image.jpg")

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _from_cache(self, reference: str, cache: KVCache) -> ResolvedImage:
        key = cache_key_for(reference)
        logger.debug("KV lookup %s", key)
        entry = await cache.get_with_metadata(key)
        if entry is None or not entry.value:
            raise ImageNotFoundError(reference)

        content_type = entry.metadata.content_type if entry.metadata else None
        if content_type and is_type_subtype(content_type):
            mime = content_type
        else:
            mime = mime_from_extension(reference.strip())
        return ResolvedImage(content=_b64(entry.value), mime_type=mime, filename=filename_for_mime(mime))

    async def _from_url(self, url: str) -> ResolvedImage:
        logger.debug("GET image %s", url)
        resp = await self._client.get(url, follow_redirects=True)
        if not resp.is_success:
            raise ImageDownloadError(resp.status_code, url)

        content_type = resp.headers.get("Content-Type")
        mime = normalize_image_mime(content_type)
        if content_type and mime != essence(content_type):
            logger.warning("Non-image content type %r from %s; using %s", content_type, url, mime)
        return ResolvedImage(content=_b64(resp.content), mime_type=mime, filename=filename_for_mime(mime))
