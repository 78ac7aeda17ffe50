# backend/grooming/routers/calendar_overrides.py
# API.md: PATCH = 405, DELETE = ALLOWED (hard)

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..deps import ShopContext, get_shop_context
from ..models.generated import CalendarOverrides as DBCalendarOverrides
from ..redis_client import redis_client
from ..schemas.calendar_overrides import (
    CalendarOverrideCreate,
    CalendarOverrideRead,
)
from ..services.slots import invalidate_shop_cache

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/shop/calendar_overrides", tags=["calendar_overrides"])

# A slot cannot be blocked and force-opened at the same time
CONFLICTING_KIND = {"block": "force_open", "force_open": "block"}


@router.get("/", response_model=list[CalendarOverrideRead])
def list_calendar_overrides(
    target_date: date | None = Query(None, alias="date"),
    ctx: ShopContext = Depends(get_shop_context),
    db: Session = Depends(get_db),
):
    query = db.query(DBCalendarOverrides).filter(DBCalendarOverrides.shop_id == ctx.shop_id)
    if target_date is not None:
        query = query.filter(DBCalendarOverrides.date == target_date.isoformat())
    return query.order_by(DBCalendarOverrides.date, DBCalendarOverrides.time).all()


@router.post(
    "/", response_model=CalendarOverrideRead, status_code=status.HTTP_201_CREATED
)
def create_calendar_override(
    data: CalendarOverrideCreate,
    ctx: ShopContext = Depends(get_shop_context),
    db: Session = Depends(get_db),
):
    date_str = data.date.isoformat()
    same_slot = db.query(DBCalendarOverrides).filter(
        DBCalendarOverrides.shop_id == ctx.shop_id,
        DBCalendarOverrides.date == date_str,
        DBCalendarOverrides.time.is_(None) if data.time is None
        else DBCalendarOverrides.time == data.time,
    )

    existing = same_slot.filter(DBCalendarOverrides.override_kind == data.override_kind).first()
    if existing:
        return existing

    conflicting = CONFLICTING_KIND.get(data.override_kind)
    if conflicting and same_slot.filter(DBCalendarOverrides.override_kind == conflicting).first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"{date_str} {data.time} already has a {conflicting} override",
        )

    obj = DBCalendarOverrides(
        shop_id=ctx.shop_id,
        date=date_str,
        time=data.time,
        override_kind=data.override_kind,
        reason=data.reason,
    )
    db.add(obj)
    db.commit()
    db.refresh(obj)

    invalidate_shop_cache(redis_client, ctx.shop_id, [data.date])
    logger.info(
        f"Calendar override added: shop_id={ctx.shop_id}, {data.override_kind} {date_str} {data.time or ''}"
    )
    return obj


@router.patch("/{id}")
def patch_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )


@router.delete("/", status_code=status.HTTP_204_NO_CONTENT)
def clear_slot_overrides(
    target_date: date = Query(..., alias="date"),
    ctx: ShopContext = Depends(get_shop_context),
    db: Session = Depends(get_db),
):
    """Remove every block / force_open of a date (day_off entries stay)."""
    deleted = (
        db.query(DBCalendarOverrides)
        .filter(
            DBCalendarOverrides.shop_id == ctx.shop_id,
            DBCalendarOverrides.date == target_date.isoformat(),
            DBCalendarOverrides.override_kind.in_(("block", "force_open")),
        )
        .delete(synchronize_session=False)
    )
    db.commit()

    invalidate_shop_cache(redis_client, ctx.shop_id, [target_date])
    logger.info(f"Slot overrides cleared: shop_id={ctx.shop_id}, date={target_date}, rows={deleted}")


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_calendar_override(
    id: int,
    ctx: ShopContext = Depends(get_shop_context),
    db: Session = Depends(get_db),
):
    obj = db.get(DBCalendarOverrides, id)
    if not obj or obj.shop_id != ctx.shop_id:
        raise HTTPException(status_code=404, detail="Not found")

    override_date = date.fromisoformat(obj.date)
    db.delete(obj)
    db.commit()

    invalidate_shop_cache(redis_client, ctx.shop_id, [override_date])
