from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class CacheMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    content_type: str | None = Field(default=None, alias="contentType")


class CacheEntry(BaseModel):
    """A stored upload as returned by the KV cache."""

    value: bytes
    metadata: CacheMetadata | None = None
