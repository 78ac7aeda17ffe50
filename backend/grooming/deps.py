# backend/grooming/deps.py
"""
Request identity.

The gateway authenticates the caller and forwards the result as headers:
- X-Shop-Id: shop of the logged-in owner
- X-Role:    "super_admin" for platform administrators

Handlers receive the identity explicitly through these dependencies.
"""

from dataclasses import dataclass

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from .database import get_db
from .models.generated import Shops as DBShops

PLATFORM_ADMIN_ROLE = "super_admin"


@dataclass(frozen=True)
class ShopContext:
    shop: DBShops

    @property
    def shop_id(self) -> int:
        return self.shop.id


def get_shop_context(
    x_shop_id: int | None = Header(None),
    db: Session = Depends(get_db),
) -> ShopContext:
    if x_shop_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")

    shop = db.get(DBShops, x_shop_id)
    if not shop:
        raise HTTPException(status_code=404, detail="Shop not found")
    return ShopContext(shop=shop)


def require_platform_admin(x_role: str | None = Header(None)) -> str:
    if x_role != PLATFORM_ADMIN_ROLE:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return x_role
