"""URL normalization and feed id derivation."""

from __future__ import annotations

import re
from urllib.parse import urlparse

_ID_INVALID_CHARS = re.compile(r"[^a-z0-9-]")


def is_http_url(value: str | None) -> bool:
    """Return True when value is a valid http(s) URL."""
    if not value or not isinstance(value, str):
        return False
    try:
        parsed = urlparse(value.strip())
    except ValueError:
        return False
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def _normalize_once(raw: str) -> str:
    try:
        parsed = urlparse(raw)
        if not parsed.scheme or not parsed.netloc:
            return raw.lower()
        href = parsed.geturl()
    except ValueError:
        return raw.lower()
    return href.rstrip("/").lower()


def normalize_feed_url(url: str) -> str:
    """Canonicalize a feed URL for identity comparisons.

    The URL is re-serialized, trailing slashes are dropped and the result is
    lower-cased. Idempotent. Input that cannot be parsed as an
    absolute URL falls back to the lower-cased raw string, so a malformed
    podroll entry never aborts a crawl.
    """
    normalized = _normalize_once(url.strip())
    # Stripping slashes can expose an empty "?", "#" or ";" that re-serializing drops
    while True:
        again = _normalize_once(normalized)
        if again == normalized:
            return normalized
        normalized = again


def derive_feed_id(url: str) -> str:
    """Derive the stable registry id for a feed URL.

    ``https://www.wavlake.com/feed/music/abc`` becomes
    ``www-wavlake-com-feed-music-abc``. Distinct URLs that sanitize to the same
    host and path collide; that is not detected here.
    """
    raw = url.strip()
    try:
        parsed = urlparse(raw)
        hostname = parsed.hostname
    except ValueError:
        hostname = None
    if not hostname:
        return _ID_INVALID_CHARS.sub("-", raw.lower())

    parts = [hostname.replace(".", "-")]
    parts.extend(segment for segment in parsed.path.split("/") if segment)
    return _ID_INVALID_CHARS.sub("-", "-".join(parts).lower())


def hostname_of(url: str) -> str:
    try:
        return urlparse(url.strip()).hostname or url
    except ValueError:
        return url
