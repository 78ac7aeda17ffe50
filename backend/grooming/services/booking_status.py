# backend/grooming/services/booking_status.py
"""
Booking status and deposit transitions.

Status:  pending → confirmed | rejected ; pending | confirmed → cancelled
Deposit: none → requested → paid (runs independently of status)

A requested deposit not paid before deposit_deadline is expired; expiry is
derived on read, never stored.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from ..config import settings
from ..models.generated import Bookings as DBBookings
from .events import emit_event

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

ALLOWED_TRANSITIONS: dict[str, tuple[str, ...]] = {
    "confirmed": ("pending",),
    "rejected": ("pending",),
    "cancelled": ("pending", "confirmed"),
}


class BookingStateError(ValueError):
    """Transition not allowed from the booking's current state."""


def change_status(db: Session, booking: DBBookings, new_status: str) -> DBBookings:
    allowed_from = ALLOWED_TRANSITIONS.get(new_status)
    if allowed_from is None:
        raise BookingStateError(f"Unknown status: {new_status}")
    if booking.status == new_status:
        return booking
    if booking.status not in allowed_from:
        raise BookingStateError(
            f"Cannot change booking from {booking.status} to {new_status}"
        )

    old_status = booking.status
    booking.status = new_status
    db.commit()
    db.refresh(booking)

    logger.info(f"Booking {booking.id} status: {old_status} → {new_status}")
    emit_event("booking_status_changed", {
        "booking_id": booking.id,
        "shop_id": booking.shop_id,
        "old_status": old_status,
        "new_status": new_status,
    })
    return booking


def request_deposit(
    db: Session,
    booking: DBBookings,
    now: Optional[datetime] = None,
) -> DBBookings:
    """Ask the customer for a deposit; the deadline starts now."""
    now = now or datetime.now()
    if booking.status not in ("pending", "confirmed"):
        raise BookingStateError(f"Cannot request a deposit for a {booking.status} booking")
    if booking.deposit_status == "paid":
        raise BookingStateError("Deposit is already paid")

    deadline = now + timedelta(hours=settings.deposit_window_hours)
    booking.deposit_status = "requested"
    booking.deposit_deadline = deadline.strftime(TIMESTAMP_FORMAT)
    db.commit()
    db.refresh(booking)

    logger.info(f"Deposit requested for booking {booking.id}, deadline {booking.deposit_deadline}")
    emit_event("deposit_requested", {
        "booking_id": booking.id,
        "shop_id": booking.shop_id,
        "deadline": booking.deposit_deadline,
    })
    return booking


def confirm_deposit(
    db: Session,
    booking: DBBookings,
    now: Optional[datetime] = None,
) -> DBBookings:
    """Customer-side payment confirmation; rejected once the deadline passed."""
    if booking.deposit_status == "paid":
        return booking
    if booking.deposit_status != "requested":
        raise BookingStateError("No deposit was requested for this booking")
    if is_deposit_expired(booking, now):
        raise BookingStateError("Deposit deadline has passed")

    booking.deposit_status = "paid"
    db.commit()
    db.refresh(booking)
    logger.info(f"Deposit paid for booking {booking.id}")
    return booking


def admin_confirm_deposit(db: Session, booking: DBBookings) -> DBBookings:
    """Owner confirms the transfer manually: deposit paid and booking confirmed."""
    if booking.status in ("cancelled", "rejected"):
        raise BookingStateError(f"Cannot confirm a deposit for a {booking.status} booking")

    booking.deposit_status = "paid"
    db.commit()
    return change_status(db, booking, "confirmed")


def is_deposit_expired(booking: DBBookings, now: Optional[datetime] = None) -> bool:
    if booking.deposit_status != "requested" or not booking.deposit_deadline:
        return False
    try:
        deadline = datetime.fromisoformat(str(booking.deposit_deadline))
    except ValueError:
        return False
    return (now or datetime.now()) > deadline
