from .cache import CacheEntry, CacheMetadata
from .image import ImageKind, ResolvedImage, UploadResult

__all__ = [
    "CacheEntry",
    "CacheMetadata",
    "ImageKind",
    "ResolvedImage",
    "UploadResult",
]
