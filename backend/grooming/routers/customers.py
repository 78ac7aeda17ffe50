# backend/grooming/routers/customers.py
# API.md: no POST (customers come from bookings), PATCH = ALLOWED, DELETE = 405

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..database import get_db
from ..deps import ShopContext, get_shop_context
from ..models.generated import Bookings as DBBookings, Customers as DBCustomers
from ..schemas.bookings import BookingWithService
from ..schemas.customers import CustomerRead, CustomerUpdate, CustomerWithSegments
from ..services.customers import customers_with_segments, normalize_phone
from .bookings import to_booking_read

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/customers", tags=["customers"])

SEARCH_LIMIT = 10


@router.get("/", response_model=list[CustomerWithSegments])
def list_customers(
    ctx: ShopContext = Depends(get_shop_context),
    db: Session = Depends(get_db),
):
    result = []
    for customer, revenue, segment in customers_with_segments(db, ctx.shop_id):
        item = CustomerWithSegments.model_validate(customer)
        item.total_revenue = revenue
        item.is_vip = segment.is_vip
        item.is_at_risk = segment.is_at_risk
        item.is_return_soon = segment.is_return_soon
        item.days_since_visit = segment.days_since_visit
        item.avg_cycle_days = segment.avg_cycle_days
        item.next_visit_date = segment.next_visit_date
        result.append(item)
    return result


@router.get("/search", response_model=list[CustomerRead])
def search_customers(
    q: str = "",
    ctx: ShopContext = Depends(get_shop_context),
    db: Session = Depends(get_db),
):
    """Name or phone contains q; empty query returns nothing."""
    q = q.strip()
    if not q:
        return []

    pattern = f"%{q}%"
    return (
        db.query(DBCustomers)
        .filter(
            DBCustomers.shop_id == ctx.shop_id,
            or_(DBCustomers.name.like(pattern), DBCustomers.phone.like(pattern)),
        )
        .order_by(DBCustomers.name)
        .limit(SEARCH_LIMIT)
        .all()
    )


@router.get("/{phone}/history", response_model=list[BookingWithService])
def customer_history(
    phone: str,
    ctx: ShopContext = Depends(get_shop_context),
    db: Session = Depends(get_db),
):
    bookings = (
        db.query(DBBookings)
        .filter(
            DBBookings.shop_id == ctx.shop_id,
            DBBookings.customer_phone == normalize_phone(phone),
        )
        .order_by(DBBookings.date.desc(), DBBookings.time.desc())
        .all()
    )
    return [to_booking_read(b) for b in bookings]


@router.get("/{id}", response_model=CustomerRead)
def get_customer(
    id: int,
    ctx: ShopContext = Depends(get_shop_context),
    db: Session = Depends(get_db),
):
    obj = db.get(DBCustomers, id)
    if not obj or obj.shop_id != ctx.shop_id:
        raise HTTPException(status_code=404, detail="Not found")
    return obj


@router.patch("/{id}", response_model=CustomerRead)
def update_customer(
    id: int,
    data: CustomerUpdate,
    ctx: ShopContext = Depends(get_shop_context),
    db: Session = Depends(get_db),
):
    obj = db.get(DBCustomers, id)
    if not obj or obj.shop_id != ctx.shop_id:
        raise HTTPException(status_code=404, detail="Not found")

    changes = data.model_dump(exclude_unset=True)
    if changes.get("phone"):
        changes["phone"] = normalize_phone(changes["phone"])

    for field, value in changes.items():
        if field in ("name", "phone") and not value:
            continue
        setattr(obj, field, value)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Another customer already uses this phone",
        )
    db.refresh(obj)

    logger.info(f"Customer {obj.id} updated: fields={sorted(changes)}")
    return obj


@router.delete("/{id}")
def delete_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )
