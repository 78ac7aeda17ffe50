# backend/grooming/services/slots/resolver.py
"""
Slot resolver: bookable time slots for a date and a service duration.

Level 1: resolve_day_window (shop configuration only, cacheable):
✓ one-off closed dates (highest precedence)
✓ weekly schedule (open/close, weekly day off)
✓ force-open overrides that reopen a weekly day off

Level 2: build_slot_grid (per request):
✓ blocked overrides
✓ force-open overrides
✓ existing bookings (half-open interval overlap)

resolve_slot applies the same verdict to one requested start time.

Pure functions, no I/O. Malformed input raises SlotValidationError.
"""

import re
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Mapping

from .config import (
    DAY_KEYS,
    BookingConfig,
    get_booking_config,
    minutes_to_time_str,
    time_str_to_minutes,
)

REASON_TEMPORARY_CLOSURE = "temporary closure"
REASON_WEEKLY_DAY_OFF = "weekly day off"
REASON_BLOCKED = "manually blocked"
REASON_BOOKED = "already booked"
REASON_OUTSIDE_HOURS = "outside business hours"

CLOSED_SENTINEL_TIME = "00:00"

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class SlotValidationError(ValueError):
    """Input rejected before any slot is computed."""


@dataclass(frozen=True)
class DaySchedule:
    open_time: str = "09:00"
    close_time: str = "18:00"
    is_closed: bool = False

    def bounds(self) -> tuple[int, int]:
        """Return (open, close) in minutes. Raises SlotValidationError."""
        open_min = _parse_time(self.open_time)
        close_min = _parse_time(self.close_time)
        if open_min >= close_min:
            raise SlotValidationError(
                f"Opening time {self.open_time} must be before closing time {self.close_time}"
            )
        return open_min, close_min


WeeklySchedule = Mapping[str, DaySchedule]


@dataclass
class SlotOverrides:
    """Per-date slot overrides: {"YYYY-MM-DD": {"HH:MM", ...}}."""
    blocked: dict[str, set[str]]
    force_open: dict[str, set[str]]

    @classmethod
    def empty(cls) -> "SlotOverrides":
        return cls(blocked={}, force_open={})

    def blocked_on(self, date_str: str) -> set[str]:
        return set(self.blocked.get(date_str, ()))

    def force_open_on(self, date_str: str) -> set[str]:
        return set(self.force_open.get(date_str, ()))


@dataclass(frozen=True)
class BookedInterval:
    time: str
    duration_minutes: int


@dataclass(frozen=True)
class SlotResult:
    time: str
    available: bool
    reason: str | None = None
    closed: bool = False

    def to_dict(self) -> dict:
        data: dict = {"time": self.time, "available": self.available}
        if self.closed:
            data["closed"] = True
        if self.reason is not None:
            data["reason"] = self.reason
        return data


@dataclass(frozen=True)
class DayWindow:
    """Opening window of a shop on one date, independent of bookings."""
    open_minutes: int = 0
    close_minutes: int = 0
    closed_reason: str | None = None
    # Weekly day off reopened by force-open overrides: only those slots are offered
    force_open_only: bool = False

    @property
    def is_closed(self) -> bool:
        return self.closed_reason is not None

    def to_dict(self) -> dict:
        return {
            "open_minutes": self.open_minutes,
            "close_minutes": self.close_minutes,
            "closed_reason": self.closed_reason,
            "force_open_only": self.force_open_only,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DayWindow":
        return cls(
            open_minutes=int(data["open_minutes"]),
            close_minutes=int(data["close_minutes"]),
            closed_reason=data.get("closed_reason"),
            force_open_only=bool(data.get("force_open_only", False)),
        )


# ── Public API ───────────────────────────────────────────────────────────


def resolve_available_slots(
    target_date: date | str,
    duration_minutes: int | None = None,
    weekly_schedule: WeeklySchedule | None = None,
    closed_dates: Iterable[str] | None = None,
    slot_overrides: SlotOverrides | None = None,
    existing_bookings: Iterable[BookedInterval] = (),
    config: BookingConfig | None = None,
) -> list[SlotResult]:
    """
    Compute the full slot grid for a date.

    Returns either the single closed sentinel or every step-aligned start
    from opening time up to (closing time - duration), with a verdict each.
    """
    config = config or get_booking_config()
    day = parse_date(target_date)
    duration = validate_duration(
        config.default_duration_minutes if duration_minutes is None else duration_minutes
    )
    overrides = slot_overrides or SlotOverrides.empty()
    date_str = day.isoformat()

    window = resolve_day_window(
        day,
        weekly_schedule,
        closed_dates,
        overrides.force_open_on(date_str),
        config,
    )
    return build_slot_grid(
        window,
        duration,
        blocked=overrides.blocked_on(date_str),
        force_open=overrides.force_open_on(date_str),
        existing_bookings=existing_bookings,
        config=config,
    )


def resolve_day_window(
    target_date: date,
    weekly_schedule: WeeklySchedule | None,
    closed_dates: Iterable[str] | None,
    force_open_times: Iterable[str] = (),
    config: BookingConfig | None = None,
) -> DayWindow:
    """Level 1: opening window of the date from shop configuration."""
    config = config or get_booking_config()

    # Step 1: one-off closure always wins
    if target_date.isoformat() in set(closed_dates or ()):
        return DayWindow(closed_reason=REASON_TEMPORARY_CLOSURE)

    # Step 2: weekday schedule (missing schedule or weekday -> default hours)
    day_key = DAY_KEYS[target_date.weekday()]
    schedule = (weekly_schedule or {}).get(day_key) or DaySchedule(
        config.default_open, config.default_close
    )

    if schedule.is_closed:
        if not set(force_open_times):
            return DayWindow(closed_reason=REASON_WEEKLY_DAY_OFF)
        try:
            open_min, close_min = schedule.bounds()
        except SlotValidationError:
            # hours of a day off are placeholders
            open_min, close_min = DaySchedule(config.default_open, config.default_close).bounds()
        return DayWindow(open_min, close_min, force_open_only=True)

    open_min, close_min = schedule.bounds()
    return DayWindow(open_min, close_min)


def build_slot_grid(
    window: DayWindow,
    duration_minutes: int,
    blocked: Iterable[str] = (),
    force_open: Iterable[str] = (),
    existing_bookings: Iterable[BookedInterval] = (),
    config: BookingConfig | None = None,
) -> list[SlotResult]:
    """Level 2: per-slot verdicts for an open day window."""
    config = config or get_booking_config()

    if window.is_closed:
        return [SlotResult(CLOSED_SENTINEL_TIME, False, window.closed_reason, closed=True)]

    duration = validate_duration(duration_minutes)
    blocked_set = set(blocked)
    force_open_set = set(force_open)
    intervals = [_booking_bounds(b) for b in existing_bookings]

    slots: list[SlotResult] = []
    t = window.open_minutes
    while t + duration <= window.close_minutes:
        slots.append(
            _slot_verdict(window, t, duration, blocked_set, force_open_set, intervals)
        )
        t += config.slot_step_minutes

    return slots


def resolve_slot(
    window: DayWindow,
    time_str: str,
    duration_minutes: int,
    blocked: Iterable[str] = (),
    force_open: Iterable[str] = (),
    existing_bookings: Iterable[BookedInterval] = (),
) -> SlotResult:
    """
    Verdict for one requested start time, with the same precedence as the grid.

    Start times off the grid step are accepted when the whole interval
    fits inside the opening window.
    """
    if window.is_closed:
        return SlotResult(time_str, False, window.closed_reason, closed=True)

    start = _parse_time(time_str)
    duration = validate_duration(duration_minutes)
    if start < window.open_minutes or start + duration > window.close_minutes:
        return SlotResult(time_str, False, REASON_OUTSIDE_HOURS)

    intervals = [_booking_bounds(b) for b in existing_bookings]
    return _slot_verdict(window, start, duration, set(blocked), set(force_open), intervals)


def find_overlapping_booking(
    time_str: str,
    duration_minutes: int,
    existing_bookings: Iterable[BookedInterval],
) -> BookedInterval | None:
    """Return the first booking whose interval intersects [time, time + duration)."""
    start = _parse_time(time_str)
    duration = validate_duration(duration_minutes)
    for booking in existing_bookings:
        other_start, other_length = _booking_bounds(booking)
        if intervals_overlap(start, duration, other_start, other_length):
            return booking
    return None


def intervals_overlap(start_a: int, length_a: int, start_b: int, length_b: int) -> bool:
    """Half-open overlap: back-to-back intervals do not conflict."""
    return start_a < start_b + length_b and start_b < start_a + length_a


# ── Validation helpers ───────────────────────────────────────────────────


def parse_date(value: date | str) -> date:
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not DATE_RE.match(value):
        raise SlotValidationError(f"Date must be in YYYY-MM-DD format, got {value!r}")
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise SlotValidationError(f"Date must be in YYYY-MM-DD format, got {value!r}") from None


def validate_duration(value) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise SlotValidationError(f"Duration must be a positive number of minutes, got {value!r}")
    return value


def _parse_time(value: str) -> int:
    try:
        return time_str_to_minutes(value)
    except ValueError as e:
        raise SlotValidationError(str(e)) from None


def _slot_verdict(
    window: DayWindow,
    start: int,
    duration: int,
    blocked: set[str],
    force_open: set[str],
    intervals: list[tuple[int, int]],
) -> SlotResult:
    # blocked > force_open > weekly day off > booking overlap
    time_str = minutes_to_time_str(start)
    if time_str in blocked:
        return SlotResult(time_str, False, REASON_BLOCKED)
    if time_str in force_open:
        return SlotResult(time_str, True)
    if window.force_open_only:
        return SlotResult(time_str, False, REASON_WEEKLY_DAY_OFF)
    if any(intervals_overlap(start, duration, s, length) for s, length in intervals):
        return SlotResult(time_str, False, REASON_BOOKED)
    return SlotResult(time_str, True)


def _booking_bounds(booking: BookedInterval) -> tuple[int, int]:
    return _parse_time(booking.time), validate_duration(booking.duration_minutes)
