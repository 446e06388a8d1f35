"""Classify an image reference into one of the shapes ``upload_image`` accepts.

Rules are checked in order and the first match wins:

1. local upload path, bare (``/images/upload-<id>.<ext>``) or inside a full URL
2. remote ``http``/``https`` URL
3. ``data:image...`` URI
4. anything else is taken as raw base64

Local upload references are looked up in the KV cache under a key that uses
the singular ``image/`` prefix, see :func:`cache_key_for`.
"""
from __future__ import annotations

import logging
import re
from typing import Callable
from urllib.parse import urlsplit

from grok_bridge.models import ImageKind

logger = logging.getLogger(__name__)

_LOCAL_PATH_RE = re.compile(r"^/?images/upload-[0-9a-f-]+\.\w+$", re.IGNORECASE)
_LOCAL_URL_PATH_RE = re.compile(r"^/images/upload-[0-9a-f-]+\.\w+$", re.IGNORECASE)
# Key prefix is normalized to "image/" whatever the case of the incoming path.
_IMAGES_PREFIX_RE = re.compile(r"^images/", re.IGNORECASE)
_DATA_URI_PREFIX = "data:image"


def _url_path(value: str, *, require_host: bool) -> str | None:
    """Return the path of *value* if it parses as a URL with a scheme, otherwise ``None``.

    ``file:///images/...`` has no host but still counts when *require_host* is false.
    """

    try:
        parts = urlsplit(value)
    except ValueError:
        return None
    if not parts.scheme or (require_host and not parts.netloc):
        return None
    return parts.path


def is_local_upload_path(reference: str) -> bool:
    trimmed = reference.strip()
    if _LOCAL_PATH_RE.match(trimmed):
        return True
    path = _url_path(trimmed, require_host=False)
    return path is not None and bool(_LOCAL_URL_PATH_RE.match(path))


def is_http_url(reference: str) -> bool:
    # a host is required; httpx cannot fetch host-less forms like "http:example.com"
    trimmed = reference.strip()
    if _url_path(trimmed, require_host=True) is None:
        return False
    return urlsplit(trimmed).scheme.lower() in ("http", "https")


def is_data_uri(reference: str) -> bool:
    return reference.strip().startswith(_DATA_URI_PREFIX)


def cache_key_for(reference: str) -> str:
    """Map a local upload reference to its KV cache key.

    ``https://host/images/upload-ab.png`` and ``/images/upload-ab.png`` both
    become ``image/upload-ab.png``.
    """

    path = reference.strip()
    url_path = _url_path(path, require_host=False)
    if url_path is not None:
        path = url_path
    if path.startswith("/"):
        path = path[1:]
    return _IMAGES_PREFIX_RE.sub("image/", path, count=1)


_RULES: tuple[tuple[Callable[[str], bool], ImageKind], ...] = (
    (is_local_upload_path, ImageKind.LOCAL_CACHE),
    (is_http_url, ImageKind.REMOTE_URL),
    (is_data_uri, ImageKind.DATA_URI),
)


def classify(reference: str, *, allow_local_cache: bool = True) -> ImageKind:
    """Return the :class:`ImageKind` of *reference*.

    With ``allow_local_cache=False`` the local upload rule is skipped, so the
    reference is classified as if no cache were available.
    """

    for predicate, kind in _RULES:
        if kind is ImageKind.LOCAL_CACHE and not allow_local_cache:
            continue
        if predicate(reference):
            logger.debug("Classified image reference as %s", kind.value)
            return kind
    logger.debug("Classified image reference as %s", ImageKind.RAW_BASE64.value)
    return ImageKind.RAW_BASE64
