# backend/grooming/services/slots/redis_store.py
"""
Redis storage for Level 1 day windows.

Key format: slots:window:{shop_id}:{date}
Value: JSON of DayWindow (open/close minutes or closure reason).
Keys expire one minute after the end of their date.
"""

import json
from datetime import date, datetime

from redis import Redis

from .config import BookingConfig, get_booking_config
from .resolver import DayWindow


class SlotsRedisStore:
    """Redis storage wrapper for resolved day windows."""

    KEY_PREFIX = "slots:window"

    def __init__(self, redis: Redis, config: BookingConfig | None = None):
        self.redis = redis
        self.config = config or get_booking_config()

    def _key(self, shop_id: int, dt: date) -> str:
        return f"{self.KEY_PREFIX}:{shop_id}:{dt.isoformat()}"

    # ── Write ────────────────────────────────────────────────────────────

    def store_day_window(self, shop_id: int, dt: date, window: DayWindow) -> None:
        key = self._key(shop_id, dt)
        end_of_day = datetime.combine(dt, datetime.max.time())
        # Key lives until the end of the date + 1 minute, capped by the TTL
        expire_ts = min(
            int(end_of_day.timestamp()) + 60,
            int(datetime.now().timestamp()) + self.config.cache_ttl_seconds,
        )

        pipe = self.redis.pipeline()
        pipe.set(key, json.dumps(window.to_dict()))
        pipe.expireat(key, expire_ts)
        pipe.execute()

    # ── Read ─────────────────────────────────────────────────────────────

    def get_day_window(self, shop_id: int, dt: date) -> DayWindow | None:
        """Cached window, or None on cache miss."""
        raw = self.redis.get(self._key(shop_id, dt))
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode()
        try:
            return DayWindow.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError):
            return None

    # ── Delete ───────────────────────────────────────────────────────────

    def delete_day_windows(
        self,
        shop_id: int,
        dates: list[date] | None = None,
    ) -> int:
        """
        Delete cached windows.

        Args:
            shop_id: Shop ID
            dates: Specific dates, or None to delete all for the shop.

        Returns:
            Number of deleted keys.
        """
        if dates:
            keys = [self._key(shop_id, dt) for dt in dates]
        else:
            keys = list(self.redis.scan_iter(match=f"{self.KEY_PREFIX}:{shop_id}:*"))

        if not keys:
            return 0

        return self.redis.delete(*keys)
