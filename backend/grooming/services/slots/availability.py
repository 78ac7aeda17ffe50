# backend/grooming/services/slots/availability.py
"""
Shop availability: runs the slot resolver over a database snapshot.

Takes into account:
- Shop weekly schedule (business_days / legacy business_hours)
- Calendar overrides (day_off / block / force_open)
- Active bookings (pending, confirmed) with durations from their service

Level 1 day windows are cached in Redis when a client is given.
"""

import logging
from datetime import date

from redis import Redis, RedisError
from sqlalchemy.orm import Session

from .config import BookingConfig, get_booking_config
from .redis_store import SlotsRedisStore
from .resolver import (
    BookedInterval,
    DayWindow,
    SlotOverrides,
    SlotResult,
    build_slot_grid,
    parse_date,
    resolve_day_window,
    resolve_slot,
    validate_duration,
)
from .shop_schedule import parse_weekly_schedule

logger = logging.getLogger(__name__)

ACTIVE_BOOKING_STATUSES = ("pending", "confirmed")


def get_available_times(
    db: Session,
    shop,
    target_date: date,
    duration_minutes: int | None = None,
    config: BookingConfig | None = None,
    redis: Redis | None = None,
) -> list[SlotResult]:
    """
    Calculate the slot grid of a shop for a date.

    Raises SlotValidationError for a bad duration or an invalid stored schedule.
    """
    config = config or get_booking_config()
    duration = validate_duration(
        config.default_duration_minutes if duration_minutes is None else duration_minutes
    )
    date_str = target_date.isoformat()

    # Step 1: calendar overrides of the date
    closed_dates, overrides = load_calendar_overrides(db, shop.id, target_date)

    # Step 2: opening window (Level 1, cached)
    window = _get_day_window(db, shop, target_date, closed_dates, overrides, config, redis)

    # Step 3: bookings snapshot (Level 2, never cached)
    bookings = get_existing_bookings(db, shop.id, date_str, config=config)

    return build_slot_grid(
        window,
        duration,
        blocked=overrides.blocked_on(date_str),
        force_open=overrides.force_open_on(date_str),
        existing_bookings=bookings,
        config=config,
    )


def check_booking_slot(
    db: Session,
    shop,
    date_str: str,
    time_str: str,
    duration_minutes: int,
    exclude_booking_id: int | None = None,
    config: BookingConfig | None = None,
    redis: Redis | None = None,
) -> SlotResult:
    """
    Verdict for booking [time, time + duration) on the date.

    Same inputs and precedence as get_available_times, so a slot offered
    there can be booked and a slot refused there cannot. The booking being
    rescheduled is left out of the overlap check.
    """
    config = config or get_booking_config()
    target_date = parse_date(date_str)

    closed_dates, overrides = load_calendar_overrides(db, shop.id, target_date)
    window = _get_day_window(db, shop, target_date, closed_dates, overrides, config, redis)
    bookings = get_existing_bookings(db, shop.id, date_str, exclude_booking_id, config)

    return resolve_slot(
        window,
        time_str,
        duration_minutes,
        blocked=overrides.blocked_on(date_str),
        force_open=overrides.force_open_on(date_str),
        existing_bookings=bookings,
    )


# ── Day window (Level 1 with cache) ─────────────────────────────────────


def _get_day_window(
    db: Session,
    shop,
    target_date: date,
    closed_dates: list[str],
    overrides: SlotOverrides,
    config: BookingConfig,
    redis: Redis | None,
) -> DayWindow:
    """Get the day window, using Redis cache when available."""
    store = SlotsRedisStore(redis, config) if redis is not None else None

    if store is not None:
        try:
            cached = store.get_day_window(shop.id, target_date)
        except RedisError as e:
            logger.warning(f"Slot cache read failed for shop={shop.id}: {e}")
            cached = None
        if cached is not None:
            return cached

    weekly = parse_weekly_schedule(shop.business_days, shop.business_hours, config)
    window = resolve_day_window(
        target_date,
        weekly,
        closed_dates,
        overrides.force_open_on(target_date.isoformat()),
        config,
    )

    if store is not None:
        try:
            store.store_day_window(shop.id, target_date, window)
        except RedisError as e:
            logger.warning(f"Slot cache write failed for shop={shop.id}: {e}")

    return window


# ── Database helpers ─────────────────────────────────────────────────────


def load_calendar_overrides(
    db: Session,
    shop_id: int,
    target_date: date,
) -> tuple[list[str], SlotOverrides]:
    """Closed dates and slot overrides of a shop for one date."""
    from ...models.generated import CalendarOverrides

    date_str = target_date.isoformat()
    rows = (
        db.query(CalendarOverrides)
        .filter(
            CalendarOverrides.shop_id == shop_id,
            CalendarOverrides.date == date_str,
        )
        .all()
    )

    closed_dates: list[str] = []
    overrides = SlotOverrides.empty()
    for row in rows:
        if row.override_kind == "day_off":
            closed_dates.append(row.date)
        elif row.override_kind == "block" and row.time:
            overrides.blocked.setdefault(row.date, set()).add(row.time)
        elif row.override_kind == "force_open" and row.time:
            overrides.force_open.setdefault(row.date, set()).add(row.time)

    return closed_dates, overrides


def get_existing_bookings(
    db: Session,
    shop_id: int,
    date_str: str,
    exclude_booking_id: int | None = None,
    config: BookingConfig | None = None,
) -> list[BookedInterval]:
    """Active bookings of the date as intervals; duration comes from the service."""
    from ...models.generated import Bookings, Services

    config = config or get_booking_config()

    query = (
        db.query(Bookings.time, Services.duration)
        .outerjoin(Services, Bookings.service_id == Services.id)
        .filter(
            Bookings.shop_id == shop_id,
            Bookings.date == date_str,
            Bookings.status.in_(ACTIVE_BOOKING_STATUSES),
        )
    )
    if exclude_booking_id is not None:
        query = query.filter(Bookings.id != exclude_booking_id)

    return [
        BookedInterval(time_str, duration or config.default_duration_minutes)
        for time_str, duration in query.all()
    ]
