from __future__ import annotations

import base64
import binascii
import re
from typing import Any, Tuple

from storybook_api.errors import PayloadDecodeError, ProviderResponseError

DEFAULT_CONTENT_TYPE = "image/png"

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w/+.-]+)?(?:;[\w=-]+)*;base64,(?P<b64>.*)$", re.IGNORECASE | re.DOTALL)


def is_data_url(s: str) -> bool:
    return s.startswith("data:") and ";base64," in s


def extract_image_payload(result: Any) -> Tuple[str, str]:
    """
    Pull (base64 payload, content_type) out of a provider result shaped like
    ``{"images": [{"content": "<b64>", "content_type": "image/png"}, ...]}``.

    A ``data:`` URL in ``url`` is accepted in place of ``content``; a plain
    http(s) URL is not, since the payload has to be embedded.
    """
    if not isinstance(result, dict):
        raise ProviderResponseError(f"Invalid response format from image provider: expected object, got {type(result).__name__}")
    images = result.get("images")
    if not isinstance(images, list) or not images or not isinstance(images[0], dict):
        raise ProviderResponseError(f"Invalid response format from image provider: no images (keys: {sorted(result)})")

    image = images[0]
    content_type = image.get("content_type") or None
    payload = image.get("content")
    if not payload:
        url = image.get("url")
        if isinstance(url, str) and is_data_url(url):
            m = _DATA_URL_RE.match(url.strip())
            if m:
                payload = m.group("b64")
                content_type = content_type or m.group("mime")
    if not payload or not isinstance(payload, str):
        raise ProviderResponseError(f"Invalid response format from image provider: image has no embedded content (keys: {sorted(image)})")

    return payload, content_type or DEFAULT_CONTENT_TYPE


def decode_base64_payload(payload: str) -> bytes:
    """Decode a raw base64 string (or data URL) into bytes."""
    s = payload.strip()
    m = _DATA_URL_RE.match(s)
    if m:
        s = m.group("b64")
    # Normalize whitespace and padding
    s = "".join(s.split())
    missing_padding = (-len(s)) % 4
    if missing_padding:
        s += "=" * missing_padding
    try:
        data = base64.b64decode(s, validate=True)
    except (binascii.Error, ValueError) as e:
        raise PayloadDecodeError(f"Image payload is not valid base64: {e}") from e
    if not data:
        raise PayloadDecodeError("Image payload decoded to zero bytes")
    return data
