# backend/grooming/services/slots/config.py
"""
Booking configuration for slots calculation.
"""

import re
from dataclasses import dataclass
from functools import lru_cache

TIME_RE = re.compile(r"^(\d{2}):(\d{2})$")

DAY_KEYS = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")


@dataclass(frozen=True)
class BookingConfig:
    """
    Configuration for booking/slots system.

    Attributes:
        slot_step_minutes: Grid step in minutes (15/30/60)
        default_duration_minutes: Service length when the caller gives none
        default_open: Opening time when a shop has no schedule
        default_close: Closing time when a shop has no schedule
        cache_ttl_seconds: Redis cache TTL for day windows
    """
    slot_step_minutes: int = 30  # 15 / 30 / 60
    default_duration_minutes: int = 60
    default_open: str = "09:00"
    default_close: str = "18:00"
    cache_ttl_seconds: int = 86400  # 24 hours

    def __post_init__(self):
        """Validate configuration."""
        if self.slot_step_minutes not in (15, 30, 60):
            raise ValueError(f"slot_step_minutes must be 15, 30, or 60, got {self.slot_step_minutes}")
        if self.default_duration_minutes <= 0:
            raise ValueError(
                f"default_duration_minutes must be > 0, got {self.default_duration_minutes}"
            )


@lru_cache
def get_booking_config() -> BookingConfig:
    """Get booking configuration (singleton)."""
    return BookingConfig()


def time_str_to_minutes(value: str) -> int:
    """Convert "HH:MM" to minutes since midnight. Raises ValueError when malformed."""
    match = TIME_RE.match(value) if isinstance(value, str) else None
    if not match:
        raise ValueError(f"Time must be in HH:MM format, got {value!r}")
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise ValueError(f"Time out of range: {value!r}")
    return hour * 60 + minute


def minutes_to_time_str(minutes: int) -> str:
    """Convert minutes since midnight to "HH:MM"."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
