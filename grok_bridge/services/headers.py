"""Browser-like protocol headers for grok.com REST routes."""
from __future__ import annotations

import base64
import logging
import random
import string
import uuid

from grok_bridge.config import Settings

logger = logging.getLogger(__name__)

_BAGGAGE = (
    "sentry-environment=production,sentry-release=d6add6fb0460641fd482d767a335ef72b9b6abb8,"
    "sentry-public_key=b311e0f2690c81f25e2c4cf6d4f7ce1c"
)


def _random_token(length: int, alphabet: str = string.ascii_lowercase + string.digits) -> str:
    return "".join(random.choice(alphabet) for _ in range(length))


def generate_statsig_id() -> str:
    """Produce a plausible ``x-statsig-id``: base64 of a fake client-side error string."""

    if random.random() < 0.5:
        message = f"e:TypeError: Cannot read properties of null (reading 'children['{_random_token(5)}']')"
    else:
        message = f"e:TypeError: Cannot read properties of undefined (reading '{_random_token(10, string.ascii_lowercase)}')"
    return base64.b64encode(message.encode()).decode()


def _statsig_id(settings: Settings) -> str:
    if settings.dynamic_statsig or not settings.x_statsig_id:
        return generate_statsig_id()
    return settings.x_statsig_id


def get_dynamic_headers(settings: Settings, pathname: str) -> dict[str, str]:
    """Return the headers used for every request to *pathname*.

    A new ``x-xai-request-id`` is minted on each call.
    """

    base_url = settings.base_url.rstrip("/")
    headers = {
        "Accept": "*/*",
        "Accept-Language": "en-US,en;q=0.9",
        "Connection": "keep-alive",
        "Origin": base_url,
        "Priority": "u=1, i",
        "Referer": f"{base_url}/",
        "User-Agent": settings.user_agent,
        "Sec-Ch-Ua": '"Not(A:Brand";v="99", "Google Chrome";v="133", "Chromium";v="133"',
        "Sec-Ch-Ua-Mobile": "?0",
        "Sec-Ch-Ua-Platform": '"macOS"',
        "Sec-Fetch-Dest": "empty",
        "Sec-Fetch-Mode": "cors",
        "Sec-Fetch-Site": "same-origin",
        "Baggage": _BAGGAGE,
        "x-statsig-id": _statsig_id(settings),
        "x-xai-request-id": str(uuid.uuid4()),
    }
    if "upload-file" in pathname:
        headers["Content-Type"] = "text/plain;charset=UTF-8"
    else:
        headers["Content-Type"] = "application/json"
    logger.debug("Built %d protocol headers for %s", len(headers), pathname)
    return headers
