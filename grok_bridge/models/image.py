from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class ImageKind(str, Enum):
    """Shape of an incoming image reference."""

    LOCAL_CACHE = "local_cache"
    REMOTE_URL = "remote_url"
    DATA_URI = "data_uri"
    RAW_BASE64 = "raw_base64"


class ResolvedImage(BaseModel):
    """Image ready to be sent to the upload endpoint.

    ``content`` is the base64 payload exactly as it goes on the wire.
    """

    content: str
    mime_type: str = Field(..., pattern=r"^[^/]+/[^/]+$")
    filename: str = Field(..., pattern=r"^image\..+$")


class UploadResult(BaseModel):
    file_id: str = ""
    file_uri: str = ""

    def to_wire(self) -> dict[str, str]:
        return {"fileId": self.file_id, "fileUri": self.file_uri}
