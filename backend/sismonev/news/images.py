"""News image reference normalization."""

import json
from typing import Any


def normalize_image_input(raw: Any) -> str | None:
    """Reduce an image reference to a single string.

    Accepts a plain string, a JSON string holding an object with ``url``, or an
    object with ``url``, ``relativePath`` or ``filename`` (first present wins).
    """
    if not raw:
        return None
    value = raw
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except ValueError:
            parsed = None
        if isinstance(parsed, dict) and parsed.get("url"):
            value = parsed["url"]
    elif isinstance(value, dict):
        value = value.get("url") or value.get("relativePath") or value.get("filename")
    else:
        value = str(value)
    if not value:
        return None
    return str(value)


def to_full_image_url(base_url: str, value: str | None) -> str | None:
    """Absolute URL for a stored image value (URL, uploads path or bare filename)."""
    if not value:
        return None
    v = str(value)
    base = base_url.rstrip("/")
    if v.startswith("http"):
        return v
    if v.startswith("/uploads/"):
        return f"{base}{v}"
    if v.startswith("uploads/"):
        return f"{base}/{v}"
    return f"{base}/uploads/news/{v}"
