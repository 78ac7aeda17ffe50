"""
Customer identity resolution and visit accounting.

Customers are never created directly: a booking resolves its customer by
(shop, normalized phone). A stored customer is reused as-is; a different
name on the booking is logged, not merged into the record.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models.generated import (
    Bookings as DBBookings,
    Customers as DBCustomers,
    Services as DBServices,
)
from .segmentation import CustomerSegment, CustomerStats, segment_customers
from .slots.config import get_booking_config

logger = logging.getLogger(__name__)

REVENUE_STATUSES = ("confirmed",)
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

PET_FIELDS = ("pet_name", "pet_breed", "pet_age", "pet_weight", "memo")


def normalize_phone(value: str) -> str:
    """Keep digits and a leading +: "010-1234-5678" -> "01012345678"."""
    value = value.strip()
    if value.startswith("+"):
        return "+" + re.sub(r"\D", "", value[1:])
    return re.sub(r"\D", "", value)


def resolve_customer(
    db: Session,
    shop_id: int,
    phone: str,
    name: str,
    **pet_info,
) -> tuple[DBCustomers, bool]:
    """
    Find or create the customer for a booking.

    Returns:
        (customer, is_first_visit). Calling twice with the same phone
        returns the same row.
    """
    phone = normalize_phone(phone)
    customer = find_customer_by_phone(db, shop_id, phone)

    if customer:
        if name and customer.name != name:
            logger.warning(
                f"Phone {phone} of customer_id={customer.id} booked under a different "
                f"name ({name!r} vs stored {customer.name!r}); keeping stored name"
            )
        # Fill pet details the customer record does not have yet
        for field in PET_FIELDS:
            value = pet_info.get(field)
            if value and not getattr(customer, field):
                setattr(customer, field, value)
        db.flush()
        return customer, customer.visit_count == 0

    customer = DBCustomers(
        shop_id=shop_id,
        name=name,
        phone=phone,
        **{field: pet_info.get(field) for field in PET_FIELDS},
    )
    db.add(customer)
    db.flush()

    logger.info(f"Created customer: customer_id={customer.id}, shop_id={shop_id}")
    return customer, True


def find_customer_by_phone(db: Session, shop_id: int, phone: str) -> Optional[DBCustomers]:
    return (
        db.query(DBCustomers)
        .filter(
            DBCustomers.shop_id == shop_id,
            DBCustomers.phone == normalize_phone(phone),
        )
        .first()
    )


def process_completed_bookings(
    db: Session,
    shop_id: int | None = None,
    now: datetime | None = None,
) -> int:
    """
    Count visits for confirmed bookings whose service time has ended.

    Each booking is counted once (visit_counted flag). Returns the number
    of bookings processed.
    """
    now = now or datetime.now()
    config = get_booking_config()

    query = (
        db.query(DBBookings, DBServices.duration)
        .outerjoin(DBServices, DBBookings.service_id == DBServices.id)
        .filter(
            DBBookings.status == "confirmed",
            DBBookings.visit_counted == 0,
        )
    )
    if shop_id is not None:
        query = query.filter(DBBookings.shop_id == shop_id)

    processed = 0
    for booking, duration in query.all():
        try:
            start = datetime.strptime(f"{booking.date} {booking.time}", "%Y-%m-%d %H:%M")
        except ValueError:
            logger.warning(f"Skipping booking {booking.id} with malformed date/time")
            continue

        if start + timedelta(minutes=duration or config.default_duration_minutes) > now:
            continue

        customer = booking.customer or find_customer_by_phone(
            db, booking.shop_id, booking.customer_phone
        )
        if customer:
            _record_visit(customer, start)
        booking.visit_counted = 1
        processed += 1

    if processed:
        db.commit()
        logger.info(f"Visit completion: {processed} booking(s) counted")

    return processed


def customers_with_segments(
    db: Session,
    shop_id: int,
    now: datetime | None = None,
) -> list[tuple[DBCustomers, float, CustomerSegment]]:
    """All customers of a shop with their total revenue and segments."""
    customers = (
        db.query(DBCustomers)
        .filter(DBCustomers.shop_id == shop_id)
        .order_by(DBCustomers.visit_count.desc(), DBCustomers.id)
        .all()
    )
    revenue = customer_revenue(db, shop_id)

    stats = [
        CustomerStats(
            customer_id=c.id,
            total_revenue=revenue.get(c.id, 0),
            visit_count=c.visit_count or 0,
            last_visit=parse_day(c.last_visit),
            first_visit_date=parse_day(c.first_visit_date),
        )
        for c in customers
    ]
    segments = segment_customers(stats, now)

    return [
        (customer, stat.total_revenue, segment)
        for customer, stat, segment in zip(customers, stats, segments)
    ]


def customer_revenue(db: Session, shop_id: int) -> dict[int, float]:
    """Sum of service prices over confirmed bookings, per customer_id."""
    rows = (
        db.query(DBBookings.customer_id, func.coalesce(func.sum(DBServices.price), 0))
        .join(DBServices, DBBookings.service_id == DBServices.id)
        .filter(
            DBBookings.shop_id == shop_id,
            DBBookings.customer_id.isnot(None),
            DBBookings.status.in_(REVENUE_STATUSES),
        )
        .group_by(DBBookings.customer_id)
        .all()
    )
    return {customer_id: total for customer_id, total in rows}


def parse_day(value) -> Optional[date]:
    """Parse a stored date / timestamp text. None when empty or malformed."""
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.fromisoformat(str(value)).date()
    except ValueError:
        return None


def _record_visit(customer: DBCustomers, visited_at: datetime) -> None:
    customer.visit_count = (customer.visit_count or 0) + 1

    last = _parse_timestamp(customer.last_visit)
    if last is None or visited_at > last:
        customer.last_visit = visited_at.strftime(TIMESTAMP_FORMAT)

    first = parse_day(customer.first_visit_date)
    if first is None or visited_at.date() < first:
        customer.first_visit_date = visited_at.date().isoformat()


def _parse_timestamp(value) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        return None
