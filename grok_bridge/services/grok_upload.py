"""Grok ``upload-file`` REST wrapper.

Sends one base64 image to ``/rest/app-chat/upload-file`` and returns the
file handle Grok assigns to it.  :func:`upload_image` is the end-to-end
entry point: classify the reference, resolve it, upload it.
"""
from __future__ import annotations

import json
import logging
from typing import Optional

import httpx

from grok_bridge.config import Settings, get_settings
from grok_bridge.models import ResolvedImage, UploadResult
from grok_bridge.services.headers import get_dynamic_headers
from grok_bridge.services.kv_cache import Environment
from grok_bridge.services.resolver import ImageResolver, ImageUploadError

logger = logging.getLogger(__name__)

UPLOAD_API = "https://grok.com/rest/app-chat/upload-file"
UPLOAD_PATH = "/rest/app-chat/upload-file"
_BODY_EXCERPT_CHARS = 200


def _text_field(data: dict, key: str) -> str:
    value = data.get(key)
    return "" if value is None else str(value)


class GrokUploadError(ImageUploadError):
    """Raised when the upload endpoint returns a non-2xx status."""

    def __init__(self, status: int, body_excerpt: str):
        super().__init__(f"Upload failed: {status} {body_excerpt}")
        self.status = status
        self.body_excerpt = body_excerpt


class GrokUploadClient:  # pylint: disable=too-few-public-methods
    """Minimal async client for the Grok file upload route."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._url = self._settings.upload_url or UPLOAD_API
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=self._settings.request_timeout,
            proxy=self._settings.proxy_url,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def upload(self, image: ResolvedImage, cookie: str) -> UploadResult:
        payload = {
            "fileName": image.filename,
            "fileMimeType": image.mime_type,
            "content": image.content,
        }
        headers = get_dynamic_headers(self._settings, UPLOAD_PATH)
        headers["Cookie"] = cookie

        logger.debug("POST %s -> %s (%s)", self._url, image.filename, image.mime_type)
        resp = await self._client.post(self._url, headers=headers, content=json.dumps(payload))
        if not resp.is_success:
            excerpt = resp.text[:_BODY_EXCERPT_CHARS]
            logger.error("Grok upload rejected with %s: %s", resp.status_code, excerpt)
            raise GrokUploadError(resp.status_code, excerpt)

        data = resp.json()
        if not isinstance(data, dict):
            logger.warning("Unexpected upload response shape: %s", type(data).__name__)
            data = {}
        result = UploadResult(
            file_id=_text_field(data, "fileMetadataId"),
            file_uri=_text_field(data, "fileUri"),
        )
        logger.info("Uploaded %s to Grok as %s", image.filename, result.file_id or "(no id)")
        return result

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()


async def upload_image(
    image_input: str,
    cookie: str,
    settings: Settings | None = None,
    env: Environment | None = None,
    *,
    client: Optional[httpx.AsyncClient] = None,
) -> UploadResult:
    """Upload *image_input* (URL, data URI, base64 or local upload path) to Grok.

    Parameters
    ----------
    image_input : str
        Any of the accepted reference shapes.
    cookie : str
        Value for the ``Cookie`` header carrying the Grok session.
    settings : Settings, optional
        Defaults to :func:`grok_bridge.config.get_settings`.
    env : Environment, optional
        Supplies the KV cache used for local upload references.
    client : httpx.AsyncClient, optional
        Shared HTTP client for the download and the upload. When omitted a
        client is created and closed within the call.
    """

    settings = settings or get_settings()
    cache = env.kv_cache if env is not None else None

    resolver = ImageResolver(settings, client=client)
    uploader = GrokUploadClient(settings, client=client)
    try:
        image = await resolver.resolve(image_input, cache=cache)
        return await uploader.upload(image, cookie)
    finally:
        await resolver.close()
        await uploader.close()
