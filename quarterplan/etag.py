from __future__ import annotations

import json
from collections.abc import Iterable
from hashlib import sha1


def payload_etag(payload: object) -> str:
    """Weak ETag over the canonical JSON form of ``payload``.

    Format: ``W/"<sha1(json)>"`` with sorted keys so dict ordering never
    changes the tag.
    """
    raw = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str).encode()
    return f'W/"{sha1(raw).hexdigest()}"'


def _normalize_tag(tag: str) -> str:
    t = tag.strip()
    if not t:
        return ""
    if t == "*":
        return t
    # Strip weak prefix
    if t.lower().startswith("w/"):
        t = t[2:].lstrip()
    if t.startswith('"') and t.endswith('"') and len(t) >= 2:
        t = t[1:-1]
    return t


def parse_if_none_match(header_value: str | None) -> set[str]:
    """Parse If-None-Match into normalized tags; empty set when missing."""
    if not header_value:
        return set()
    parts: Iterable[str] = (p for p in header_value.split(","))
    tags: set[str] = set()
    for p in parts:
        n = _normalize_tag(p)
        if n:
            tags.add(n)
    return tags


def is_not_modified(etag: str, header_value: str | None) -> bool:
    tags = parse_if_none_match(header_value)
    return "*" in tags or _normalize_tag(etag) in tags


__all__ = ["payload_etag", "parse_if_none_match", "is_not_modified"]
