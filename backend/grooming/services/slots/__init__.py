# backend/grooming/services/slots/__init__.py
"""
Slots calculation module.

Level 1: Shop day windows (cached in Redis)
Level 2: Slot grid with overrides and bookings (calculated on-the-fly)
"""

from .config import BookingConfig, get_booking_config
from .resolver import (
    BookedInterval,
    DaySchedule,
    DayWindow,
    SlotOverrides,
    SlotResult,
    SlotValidationError,
    resolve_available_slots,
)
from .redis_store import SlotsRedisStore
from .invalidator import invalidate_shop_cache
from .availability import check_booking_slot, get_available_times

__all__ = [
    "BookingConfig",
    "get_booking_config",
    "BookedInterval",
    "DaySchedule",
    "DayWindow",
    "SlotOverrides",
    "SlotResult",
    "SlotValidationError",
    "resolve_available_slots",
    "SlotsRedisStore",
    "invalidate_shop_cache",
    "check_booking_slot",
    "get_available_times",
]
