# backend/grooming/services/slots/shop_schedule.py
"""
Shop schedule parsing.

Supported business_days formats (JSON text on the shop row):
  {"mon": {"open": "09:00", "close": "18:00", "closed": false}, ...}
  {"mon": {"start": "09:00", "end": "18:00"}, "sun": null, ...}

Fallback order: business_days → legacy business_hours ("09:00-18:00")
→ None (resolver default hours). Unparseable JSON never fails the request.
"""

import json
import logging

from .config import DAY_KEYS, BookingConfig, get_booking_config
from .resolver import DaySchedule, SlotValidationError

logger = logging.getLogger(__name__)


def parse_weekly_schedule(
    business_days: str | dict | None,
    business_hours: str | None = None,
    config: BookingConfig | None = None,
) -> dict[str, DaySchedule] | None:
    """Build a WeeklySchedule from stored shop fields, or None for defaults."""
    config = config or get_booking_config()

    data = _load_json(business_days)
    if data:
        schedule = {}
        for day_key in DAY_KEYS:
            if day_key not in data:
                continue
            day = _day_from_value(data[day_key], config)
            if day is not None:
                schedule[day_key] = day
        if schedule:
            return schedule

    legacy = parse_business_hours(business_hours)
    if legacy is not None:
        return {day_key: legacy for day_key in DAY_KEYS}

    return None


def parse_business_hours(value: str | None) -> DaySchedule | None:
    """Parse the legacy "HH:MM-HH:MM" range. None when absent or malformed."""
    if not value or "-" not in value:
        return None
    parts = value.split("-")
    if len(parts) != 2 or ":" not in parts[0] or ":" not in parts[1]:
        logger.warning(f"Ignoring malformed business_hours: {value!r}")
        return None
    return DaySchedule(parts[0].strip(), parts[1].strip())


def validate_business_hours(value: str) -> str:
    """Check an owner-submitted "HH:MM-HH:MM" range. Raises SlotValidationError."""
    legacy = parse_business_hours(value)
    if legacy is None:
        raise SlotValidationError("business_hours must be HH:MM-HH:MM")
    legacy.bounds()
    return value


def normalize_business_days(data: dict) -> str:
    """
    Validate business_days submitted by a shop owner and return JSON text.

    Raises SlotValidationError for unknown weekdays, malformed times or
    open >= close on an open day.
    """
    normalized = {}
    for day_key, value in data.items():
        if day_key not in DAY_KEYS:
            raise SlotValidationError(f"Unknown weekday key: {day_key!r}")
        day = _day_from_value(value, get_booking_config())
        if day is None:
            raise SlotValidationError(f"Invalid schedule for {day_key}")
        if not day.is_closed:
            day.bounds()
        normalized[day_key] = {
            "open": day.open_time,
            "close": day.close_time,
            "closed": day.is_closed,
        }
    return json.dumps(normalized)


# ── Helpers ──────────────────────────────────────────────────────────────


def _load_json(value: str | dict | None) -> dict:
    if value is None or value == "":
        return {}
    if isinstance(value, dict):
        return value
    try:
        data = json.loads(value)
    except (json.JSONDecodeError, TypeError):
        logger.warning("Stored business_days is not valid JSON, using defaults")
        return {}
    if not isinstance(data, dict):
        logger.warning("Stored business_days is not an object, using defaults")
        return {}
    return data


def _day_from_value(value, config: BookingConfig) -> DaySchedule | None:
    if value is None:
        return DaySchedule(config.default_open, config.default_close, is_closed=True)
    if not isinstance(value, dict):
        return None
    open_time = value.get("open") or value.get("start") or config.default_open
    close_time = value.get("close") or value.get("end") or config.default_close
    return DaySchedule(open_time, close_time, is_closed=bool(value.get("closed", False)))
