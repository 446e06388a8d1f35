"""Local image upload endpoints backed by the KV cache.

Clients post raw image bytes and get back a ``/images/upload-<id>.<ext>``
path, which can later be passed to :func:`upload_image` in place of a URL.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from pydantic import BaseModel

from grok_bridge.config import get_settings
from grok_bridge.services.grok_upload import GrokUploadError, upload_image
from grok_bridge.services.kv_cache import Environment, InMemoryKVCache, local_upload_path
from grok_bridge.services.resolver import ImageDownloadError, ImageNotFoundError
from grok_bridge.utils.mime import essence, mime_from_extension

router = APIRouter()
settings = get_settings()
logger = logging.getLogger(__name__)

_ACCEPTED_TYPES = ("image/png", "image/jpeg", "image/webp", "image/gif")

environment = Environment(kv_cache=InMemoryKVCache())


def get_environment() -> Environment:
    return environment


@router.post("/images/upload")
async def upload_local_image(request: Request, env: Environment = Depends(get_environment)):
    content_type = essence(request.headers.get("content-type", "")).lower()
    if content_type not in _ACCEPTED_TYPES:
        raise HTTPException(status_code=415, detail=f"Unsupported content type: {content_type or '(none)'}")

    body = await request.body()
    if not body:
        raise HTTPException(status_code=400, detail="Empty body")
    if len(body) > settings.max_upload_bytes:
        raise HTTPException(status_code=413, detail="Image exceeds upload size limit")

    cache = env.kv_cache
    if not isinstance(cache, InMemoryKVCache):
        raise HTTPException(status_code=503, detail="Upload cache is not writable")

    path, key = local_upload_path(content_type)
    cache.put(key, body, content_type=content_type)
    logger.info("Stored local upload %s (%d bytes)", key, len(body))
    return {"url": path}


@router.get("/images/{name}")
async def get_local_image(name: str, env: Environment = Depends(get_environment)):
    if env.kv_cache is None:
        raise HTTPException(status_code=404, detail="Not found")
    entry = await env.kv_cache.get_with_metadata(f"image/{name}")
    if entry is None:
        raise HTTPException(status_code=404, detail="Not found")

    media_type = entry.metadata.content_type if entry.metadata else None
    return Response(content=entry.value, media_type=media_type or mime_from_extension(name))


class GrokUploadRequest(BaseModel):
    image: str
    cookie: str | None = None


@router.post("/grok/upload-file")
async def upload_to_grok(payload: GrokUploadRequest, env: Environment = Depends(get_environment)):
    """Push an image reference (including a local upload path) to Grok."""
    cookie = payload.cookie or settings.cookie
    if not cookie:
        raise HTTPException(status_code=400, detail="Missing Grok session cookie")

    try:
        result = await upload_image(payload.image, cookie, settings, env)
    except ImageNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except (ImageDownloadError, GrokUploadError) as exc:
        logger.warning("Grok upload failed: %s", exc)
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return result.to_wire()
