#!/usr/bin/env python
"""Script to upload a single image to Grok and print the resulting file handle."""
from __future__ import annotations

import argparse
import asyncio
import base64
import logging
import sys
from pathlib import Path

from grok_bridge.config import get_settings
from grok_bridge.services.grok_upload import upload_image
from grok_bridge.services.resolver import ImageUploadError


def _read_image_arg(value: str) -> str:
    # @path reads a local file and sends it as raw base64
    if value.startswith("@"):
        return base64.b64encode(Path(value[1:]).read_bytes()).decode("ascii")
    return value


def main() -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Upload an image to Grok")
    parser.add_argument("--image", required=True, help="URL, data URI, base64 string, or @path/to/file")
    parser.add_argument("--cookie", default=settings.cookie, help="Grok session cookie (default: GROK_COOKIE)")
    args = parser.parse_args()

    logging.basicConfig(level=settings.log_level.upper())
    if not args.cookie:
        parser.error("--cookie is required when GROK_COOKIE is not set")

    try:
        result = asyncio.run(upload_image(_read_image_arg(args.image), args.cookie, settings))
    except ImageUploadError as exc:
        print(f"Upload failed: {exc}", file=sys.stderr)
        return 1
    print(result.model_dump_json(indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
