"""URL-safe shop slug generation (Latin letters, digits and Hangul are kept)."""

import re
import time


def slugify(text: str) -> str:
    """Generate a slug from a shop name: "Happy Paws 강남" -> "happy-paws-강남"."""
    s = re.sub(r"[^a-z0-9가-힣]+", "-", text.lower()).strip("-")
    return s or "shop"


def unique_shop_slug(name: str, now_ms: int | None = None) -> str:
    """Slug suffixed with a millisecond timestamp so repeated names never collide."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{slugify(name)}-{now_ms}"
