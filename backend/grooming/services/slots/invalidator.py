# backend/grooming/services/slots/invalidator.py
"""
Cache invalidation for shop day windows.

Triggers:
✓ Shop business_days / business_hours changed → invalidate all dates
✓ Calendar override created/deleted → invalidate the override date

Does NOT trigger:
✗ Booking created/cancelled (Level 2 is calculated on every request)
"""

import logging
from datetime import date

from redis import Redis, RedisError

from .redis_store import SlotsRedisStore

logger = logging.getLogger(__name__)


def invalidate_shop_cache(
    redis: Redis | None,
    shop_id: int,
    dates: list[date] | None = None,
) -> int:
    """
    Invalidate cached day windows for a shop.

    Args:
        redis: Redis client, or None when caching is disabled
        shop_id: Shop ID
        dates: Specific dates to invalidate, or None for all cached dates

    Returns:
        Number of deleted cache keys
    """
    if redis is None:
        return 0

    try:
        deleted = SlotsRedisStore(redis).delete_day_windows(shop_id, dates)
    except RedisError as e:
        logger.error(f"Failed to invalidate slot cache for shop={shop_id}: {e}")
        return 0

    logger.info(f"Slot cache invalidated: shop={shop_id}, keys={deleted}")
    return deleted
