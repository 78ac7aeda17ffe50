# backend/grooming/routers/shop_settings.py
# API.md: owner settings, PATCH = ALLOWED, no DELETE

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..database import get_db
from ..deps import ShopContext, get_shop_context
from ..redis_client import redis_client
from ..schemas.shops import ShopRead, ShopSettingsUpdate
from ..services.slots import SlotValidationError, invalidate_shop_cache
from ..services.slots.shop_schedule import normalize_business_days, validate_business_hours

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/shop", tags=["shop_settings"])

SCHEDULE_FIELDS = ("business_hours", "business_days")


@router.get("/settings", response_model=ShopRead)
def get_settings(ctx: ShopContext = Depends(get_shop_context)):
    return ctx.shop


@router.patch("/settings", response_model=ShopRead)
def update_settings(
    data: ShopSettingsUpdate,
    ctx: ShopContext = Depends(get_shop_context),
    db: Session = Depends(get_db),
):
    shop = ctx.shop
    changes = data.model_dump(exclude_unset=True)

    try:
        if changes.get("business_days") is not None:
            changes["business_days"] = normalize_business_days(changes["business_days"])
        if changes.get("business_hours") is not None:
            validate_business_hours(changes["business_hours"])
    except SlotValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if changes.get("deposit_required") is not None:
        changes["deposit_required"] = int(changes["deposit_required"])

    for field, value in changes.items():
        if field in ("name", "phone", "address", "business_hours") and value is None:
            continue
        setattr(shop, field, value)

    db.commit()
    db.refresh(shop)

    if any(field in changes for field in SCHEDULE_FIELDS):
        invalidate_shop_cache(redis_client, shop.id)

    logger.info(f"Shop settings updated: shop_id={shop.id}, fields={sorted(changes)}")
    return shop
