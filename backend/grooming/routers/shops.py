# backend/grooming/routers/shops.py
"""
Public shop endpoints (no identity required).

GET /shops/{slug}/available-times/{date} is the booking page slot grid:
Level 1 day window from cache, Level 2 bookings calculated per request.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.generated import Services as DBServices, Shops as DBShops
from ..redis_client import redis_client
from ..schemas.customers import CustomerCheck, CustomerRead
from ..schemas.services import ServiceRead
from ..schemas.shops import ShopPublicRead, ShopRead, ShopRegister
from ..schemas.slots import AvailableTime
from ..services.customers import find_customer_by_phone
from ..services.slots import SlotValidationError, get_available_times
from ..services.slots.resolver import parse_date
from ..services.slug import unique_shop_slug

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/shops", tags=["shops"])


def get_approved_shop(db: Session, slug: str) -> DBShops:
    shop = (
        db.query(DBShops)
        .filter(DBShops.slug == slug, DBShops.is_approved == 1)
        .first()
    )
    if not shop:
        raise HTTPException(status_code=404, detail="Shop not found")
    return shop


@router.post("/register", response_model=ShopRead, status_code=status.HTTP_201_CREATED)
def register_shop(data: ShopRegister, db: Session = Depends(get_db)):
    obj = DBShops(
        name=data.name,
        slug=unique_shop_slug(data.name),
        phone=data.phone,
        address=data.address,
        business_hours=data.business_hours,
        deposit_amount=data.deposit_amount,
        deposit_required=int(data.deposit_required),
        is_approved=0,
    )
    db.add(obj)
    db.commit()
    db.refresh(obj)

    logger.info(f"Shop registered: shop_id={obj.id}, slug={obj.slug} (awaiting approval)")
    return obj


@router.get("/{slug}", response_model=ShopPublicRead)
def get_shop(slug: str, db: Session = Depends(get_db)):
    return get_approved_shop(db, slug)


@router.get("/{slug}/services", response_model=list[ServiceRead])
def list_shop_services(slug: str, db: Session = Depends(get_db)):
    shop = get_approved_shop(db, slug)
    return (
        db.query(DBServices)
        .filter(DBServices.shop_id == shop.id, DBServices.is_active == 1)
        .order_by(DBServices.id)
        .all()
    )


@router.get("/{slug}/customers/check", response_model=CustomerCheck)
def check_customer(
    slug: str,
    phone: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
):
    """Returning-customer lookup for the booking form."""
    shop = get_approved_shop(db, slug)
    customer = find_customer_by_phone(db, shop.id, phone)
    if not customer:
        return CustomerCheck(exists=False)
    return CustomerCheck(exists=True, customer=CustomerRead.model_validate(customer))


@router.get(
    "/{slug}/available-times/{target_date}",
    response_model=list[AvailableTime],
    response_model_exclude_none=True,
)
def get_shop_available_times(
    slug: str,
    target_date: str,
    duration: int | None = None,
    db: Session = Depends(get_db),
):
    """Slot grid of a day (Level 2). A closed day returns a single sentinel entry."""
    shop = get_approved_shop(db, slug)

    try:
        slots = get_available_times(
            db,
            shop,
            parse_date(target_date),
            duration_minutes=duration,
            redis=redis_client,
        )
    except SlotValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return [slot.to_dict() for slot in slots]
