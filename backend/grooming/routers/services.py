# backend/grooming/routers/services.py
# API.md: PATCH = ALLOWED, DELETE = soft-delete (is_active)

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..deps import ShopContext, get_shop_context
from ..models.generated import Services as DBServices
from ..schemas.services import (
    ServiceCreate,
    ServiceUpdate,
    ServiceRead,
)

router = APIRouter(prefix="/shop/services", tags=["services"])


def _get_own_service(db: Session, ctx: ShopContext, id: int) -> DBServices:
    obj = db.get(DBServices, id)
    if not obj or obj.shop_id != ctx.shop_id:
        raise HTTPException(status_code=404, detail="Not found")
    return obj


@router.get("/", response_model=list[ServiceRead])
def list_services(
    ctx: ShopContext = Depends(get_shop_context),
    db: Session = Depends(get_db),
):
    return (
        db.query(DBServices)
        .filter(DBServices.shop_id == ctx.shop_id, DBServices.is_active == 1)
        .order_by(DBServices.id)
        .all()
    )


@router.get("/{id}", response_model=ServiceRead)
def get_service(
    id: int,
    ctx: ShopContext = Depends(get_shop_context),
    db: Session = Depends(get_db),
):
    return _get_own_service(db, ctx, id)


@router.post("/", response_model=ServiceRead, status_code=status.HTTP_201_CREATED)
def create_service(
    data: ServiceCreate,
    ctx: ShopContext = Depends(get_shop_context),
    db: Session = Depends(get_db),
):
    obj = DBServices(shop_id=ctx.shop_id, **data.model_dump())
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


@router.patch("/{id}", response_model=ServiceRead)
def update_service(
    id: int,
    data: ServiceUpdate,
    ctx: ShopContext = Depends(get_shop_context),
    db: Session = Depends(get_db),
):
    obj = _get_own_service(db, ctx, id)

    for field, value in data.model_dump(exclude_unset=True).items():
        if value is None:
            continue
        setattr(obj, field, int(value) if field == "is_active" else value)

    db.commit()
    db.refresh(obj)
    return obj


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_service(
    id: int,
    ctx: ShopContext = Depends(get_shop_context),
    db: Session = Depends(get_db),
):
    obj = _get_own_service(db, ctx, id)

    obj.is_active = 0
    db.commit()
