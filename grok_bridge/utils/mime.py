"""MIME type <-> file extension helpers for image uploads.

The mapping is intentionally narrow: only the four image formats Grok
accepts are recognised by extension, and everything else collapses to
JPEG.  Going the other way, the MIME subtype is used verbatim as the
extension, so ``image/jpeg`` yields ``jpeg`` (not ``jpg``) and
``image/svg+xml`` yields ``svg+xml``.
"""
from __future__ import annotations

DEFAULT_MIME_TYPE = "image/jpeg"
DEFAULT_EXTENSION = "jpg"

_EXTENSION_TO_MIME: tuple[tuple[tuple[str, ...], str], ...] = (
    ((".png",), "image/png"),
    ((".webp",), "image/webp"),
    ((".gif",), "image/gif"),
    ((".jpg", ".jpeg"), "image/jpeg"),
)


def mime_from_extension(path: str) -> str:
    lower = path.lower()
    for suffixes, mime in _EXTENSION_TO_MIME:
        if lower.endswith(suffixes):
            return mime
    return DEFAULT_MIME_TYPE


def essence(content_type: str) -> str:
    """Strip parameters (``; charset=...``) from a content type."""

    return content_type.split(";", 1)[0].strip()


def extension_from_mime(mime: str) -> str:
    parts = essence(mime).split("/")
    if len(parts) == 2 and parts[1]:
        return parts[1]
    return DEFAULT_EXTENSION


def filename_for_mime(mime: str) -> str:
    return f"image.{extension_from_mime(mime)}"


def is_type_subtype(mime: str) -> bool:
    parts = mime.split("/")
    return len(parts) == 2 and all(parts)


def normalize_image_mime(content_type: str | None) -> str:
    """Return the essence of *content_type* if it names an image, else the default."""

    if not content_type:
        return DEFAULT_MIME_TYPE
    mime = essence(content_type)
    if not mime.startswith("image/") or not is_type_subtype(mime):
        return DEFAULT_MIME_TYPE
    return mime
