# backend/grooming/routers/admin.py
# API.md: platform admin only (X-Role: super_admin); DELETE = un-approve, never hard

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..database import get_db
from ..deps import require_platform_admin
from ..models.generated import Shops as DBShops
from ..schemas.shops import ShopRead

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(require_platform_admin)],
)


@router.get("/shops", response_model=list[ShopRead])
def list_shops(db: Session = Depends(get_db)):
    return db.query(DBShops).order_by(DBShops.created_at.desc(), DBShops.id.desc()).all()


@router.patch("/shops/{id}/approve", response_model=ShopRead)
def approve_shop(id: int, db: Session = Depends(get_db)):
    return _set_approved(db, id, True)


@router.delete("/shops/{id}", response_model=ShopRead)
def unapprove_shop(id: int, db: Session = Depends(get_db)):
    return _set_approved(db, id, False)


def _set_approved(db: Session, id: int, approved: bool) -> DBShops:
    obj = db.get(DBShops, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")

    obj.is_approved = int(approved)
    db.commit()
    db.refresh(obj)

    logger.info(f"Shop {obj.id} ({obj.slug}) {'approved' if approved else 'unapproved'}")
    return obj
