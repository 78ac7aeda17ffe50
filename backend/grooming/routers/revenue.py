# backend/grooming/routers/revenue.py

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..deps import ShopContext, get_shop_context
from ..schemas.revenue import RevenueStats
from ..services.revenue import revenue_stats

router = APIRouter(prefix="/revenue", tags=["revenue"])


@router.get("/stats", response_model=RevenueStats)
def get_revenue_stats(
    start_date: date = Query(...),
    end_date: date = Query(...),
    ctx: ShopContext = Depends(get_shop_context),
    db: Session = Depends(get_db),
):
    """Revenue of confirmed bookings dated within [start_date, end_date]."""
    if start_date > end_date:
        raise HTTPException(status_code=400, detail="start_date must not be after end_date")
    return revenue_stats(db, ctx.shop_id, start_date, end_date)
