# backend/grooming/routers/bookings.py
# API.md: POST = public, PATCH = per action, DELETE = 405 (cancel instead)
"""
Booking endpoints.

Public:
- POST /bookings                          create from the booking page
- PATCH /bookings/{id}/deposit-confirm    customer reports the transfer

Owner (X-Shop-Id):
- list / tomorrow / detail, reschedule, customer edit
- approve / reject / cancel, deposit request / manual confirmation, remind
"""

import logging
from datetime import date, datetime, timedelta

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..deps import ShopContext, get_shop_context
from ..models.generated import (
    Bookings as DBBookings,
    Services as DBServices,
    Shops as DBShops,
)
from ..redis_client import redis_client
from ..schemas.bookings import (
    BookingCreate,
    BookingCustomerUpdate,
    BookingUpdate,
    BookingWithService,
)
from ..services.booking_status import (
    TIMESTAMP_FORMAT,
    BookingStateError,
    admin_confirm_deposit,
    change_status,
    confirm_deposit,
    is_deposit_expired,
    request_deposit,
)
from ..services.customers import process_completed_bookings, resolve_customer
from ..services.events import emit_event
from ..services.slots import SlotValidationError, check_booking_slot
from ..services.slots.availability import ACTIVE_BOOKING_STATUSES

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["bookings"])


def to_booking_read(booking: DBBookings, now: datetime | None = None) -> BookingWithService:
    result = BookingWithService.model_validate(booking)
    result.service_name = booking.service.name if booking.service else None
    result.deposit_expired = is_deposit_expired(booking, now)
    return result


def _get_active_service(db: Session, shop_id: int, service_id: int) -> DBServices:
    service = db.get(DBServices, service_id)
    if not service or service.shop_id != shop_id or not service.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Service not found or inactive",
        )
    return service


def _get_own_booking(db: Session, ctx: ShopContext, id: int) -> DBBookings:
    obj = db.get(DBBookings, id)
    if not obj or obj.shop_id != ctx.shop_id:
        raise HTTPException(status_code=404, detail="Booking not found")
    return obj


def _ensure_slot_bookable(
    db: Session,
    shop: DBShops,
    date_str: str,
    time_str: str,
    duration: int,
    exclude_booking_id: int | None = None,
) -> None:
    try:
        slot = check_booking_slot(
            db, shop, date_str, time_str, duration, exclude_booking_id, redis=redis_client
        )
    except SlotValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if not slot.available:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"{date_str} {time_str} is not available: {slot.reason}",
        )


# ──────────────────────────────────────────────────────────────────────────────
# Public
# ──────────────────────────────────────────────────────────────────────────────

@router.post("/", response_model=BookingWithService, status_code=status.HTTP_201_CREATED)
def create_booking(
    data: BookingCreate,
    db: Session = Depends(get_db),
):
    """
    Create a booking from the booking page.

    Steps:
    1. Validate shop (approved) and service (active, of this shop)
    2. Check the slot is bookable (hours, overrides, active bookings)
    3. Find or create the customer by phone
    4. Create booking (pending, no deposit)
    """
    shop = db.get(DBShops, data.shop_id)
    if not shop or not shop.is_approved:
        raise HTTPException(status_code=404, detail="Shop not found")

    service = _get_active_service(db, shop.id, data.service_id)

    _ensure_slot_bookable(db, shop, data.date, data.time, service.duration)

    customer, is_first_visit = resolve_customer(
        db,
        shop.id,
        data.customer_phone,
        data.customer_name,
        pet_name=data.pet_name,
        pet_breed=data.pet_breed,
        pet_age=data.pet_age,
        pet_weight=data.pet_weight,
        memo=data.memo,
    )

    booking = DBBookings(
        shop_id=shop.id,
        service_id=service.id,
        customer_id=customer.id,
        date=data.date,
        time=data.time,
        customer_name=data.customer_name,
        customer_phone=data.customer_phone,
        pet_name=data.pet_name,
        pet_breed=data.pet_breed,
        memo=data.memo,
        status="pending",
        deposit_status="none",
        is_first_visit=int(is_first_visit),
    )
    db.add(booking)
    db.commit()
    db.refresh(booking)

    logger.info(
        f"Booking created: id={booking.id}, shop_id={shop.id}, "
        f"{booking.date} {booking.time}, service={service.name}"
    )
    emit_event("booking_created", {
        "booking_id": booking.id,
        "shop_id": shop.id,
        "date": booking.date,
        "time": booking.time,
        "customer_name": booking.customer_name,
        "customer_phone": booking.customer_phone,
        "service_name": service.name,
    })

    return to_booking_read(booking)


@router.patch("/{id}/deposit-confirm", response_model=BookingWithService)
def deposit_confirm(id: int, db: Session = Depends(get_db)):
    booking = db.get(DBBookings, id)
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")
    try:
        confirm_deposit(db, booking)
    except BookingStateError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return to_booking_read(booking)


# ──────────────────────────────────────────────────────────────────────────────
# Owner
# ──────────────────────────────────────────────────────────────────────────────

@router.get("/", response_model=list[BookingWithService])
def list_bookings(
    ctx: ShopContext = Depends(get_shop_context),
    db: Session = Depends(get_db),
):
    now = datetime.now()
    process_completed_bookings(db, ctx.shop_id, now)

    bookings = (
        db.query(DBBookings)
        .filter(DBBookings.shop_id == ctx.shop_id)
        .order_by(DBBookings.date.desc(), DBBookings.time.desc())
        .all()
    )
    return [to_booking_read(b, now) for b in bookings]


@router.get("/tomorrow", response_model=list[BookingWithService])
def list_tomorrow_bookings(
    ctx: ShopContext = Depends(get_shop_context),
    db: Session = Depends(get_db),
):
    """Active bookings of tomorrow, for reminder calls."""
    tomorrow = (date.today() + timedelta(days=1)).isoformat()
    bookings = (
        db.query(DBBookings)
        .filter(
            DBBookings.shop_id == ctx.shop_id,
            DBBookings.date == tomorrow,
            DBBookings.status.in_(ACTIVE_BOOKING_STATUSES),
        )
        .order_by(DBBookings.time)
        .all()
    )
    return [to_booking_read(b) for b in bookings]


@router.get("/{id}", response_model=BookingWithService)
def get_booking(
    id: int,
    ctx: ShopContext = Depends(get_shop_context),
    db: Session = Depends(get_db),
):
    return to_booking_read(_get_own_booking(db, ctx, id))


@router.patch("/{id}", response_model=BookingWithService)
def reschedule_booking(
    id: int,
    data: BookingUpdate,
    ctx: ShopContext = Depends(get_shop_context),
    db: Session = Depends(get_db),
):
    booking = _get_own_booking(db, ctx, id)
    if booking.status not in ACTIVE_BOOKING_STATUSES:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Cannot change a {booking.status} booking",
        )

    changes = data.model_dump(exclude_unset=True, exclude_none=True)

    service = booking.service
    if "service_id" in changes:
        service = _get_active_service(db, ctx.shop_id, changes["service_id"])

    if {"date", "time", "service_id"} & changes.keys():
        new_date = changes.get("date", booking.date)
        new_time = changes.get("time", booking.time)
        duration = service.duration if service else 60
        _ensure_slot_bookable(db, ctx.shop, new_date, new_time, duration, exclude_booking_id=booking.id)

    for field, value in changes.items():
        setattr(booking, field, value)

    db.commit()
    db.refresh(booking)

    logger.info(f"Booking {booking.id} updated: {changes}")
    return to_booking_read(booking)


@router.patch("/{id}/customer", response_model=BookingWithService)
def update_booking_customer(
    id: int,
    data: BookingCustomerUpdate,
    ctx: ShopContext = Depends(get_shop_context),
    db: Session = Depends(get_db),
):
    booking = _get_own_booking(db, ctx, id)

    for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(booking, field, value)

    db.commit()
    db.refresh(booking)
    return to_booking_read(booking)


@router.patch("/{id}/approve", response_model=BookingWithService)
def approve_booking(
    id: int,
    ctx: ShopContext = Depends(get_shop_context),
    db: Session = Depends(get_db),
):
    return _change_status(db, _get_own_booking(db, ctx, id), "confirmed")


@router.patch("/{id}/reject", response_model=BookingWithService)
def reject_booking(
    id: int,
    ctx: ShopContext = Depends(get_shop_context),
    db: Session = Depends(get_db),
):
    return _change_status(db, _get_own_booking(db, ctx, id), "rejected")


@router.patch("/{id}/cancel", response_model=BookingWithService)
def cancel_booking(
    id: int,
    ctx: ShopContext = Depends(get_shop_context),
    db: Session = Depends(get_db),
):
    return _change_status(db, _get_own_booking(db, ctx, id), "cancelled")


@router.patch("/{id}/deposit-request", response_model=BookingWithService)
def deposit_request(
    id: int,
    ctx: ShopContext = Depends(get_shop_context),
    db: Session = Depends(get_db),
):
    booking = _get_own_booking(db, ctx, id)
    try:
        request_deposit(db, booking)
    except BookingStateError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return to_booking_read(booking)


@router.patch("/{id}/admin-confirm-deposit", response_model=BookingWithService)
def deposit_admin_confirm(
    id: int,
    ctx: ShopContext = Depends(get_shop_context),
    db: Session = Depends(get_db),
):
    booking = _get_own_booking(db, ctx, id)
    try:
        admin_confirm_deposit(db, booking)
    except BookingStateError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return to_booking_read(booking)


@router.patch("/{id}/remind", response_model=BookingWithService)
def remind_booking(
    id: int,
    ctx: ShopContext = Depends(get_shop_context),
    db: Session = Depends(get_db),
):
    booking = _get_own_booking(db, ctx, id)
    booking.reminded_at = datetime.now().strftime(TIMESTAMP_FORMAT)
    db.commit()
    db.refresh(booking)
    return to_booking_read(booking)


@router.delete("/{id}")
def delete_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )


def _change_status(db: Session, booking: DBBookings, new_status: str) -> BookingWithService:
    try:
        change_status(db, booking, new_status)
    except BookingStateError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return to_booking_read(booking)
