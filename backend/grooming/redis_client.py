# backend/grooming/redis_client.py
"""
Shared Redis client.

None when REDIS_URL is not configured: the slot cache and the event queue
are skipped in that case.
"""

from redis import Redis

from .config import settings


def build_redis_client(url: str | None) -> Redis | None:
    if not url:
        return None
    return Redis.from_url(url, decode_responses=True)


redis_client = build_redis_client(settings.redis_url)
