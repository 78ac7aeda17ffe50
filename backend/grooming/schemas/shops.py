# backend/grooming/schemas/shops.py

import json
from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, Field, field_validator

from ..services.slots.shop_schedule import validate_business_hours


def _load_business_days(value: Any) -> Optional[dict]:
    if value is None or isinstance(value, dict):
        return value
    try:
        data = json.loads(value)
    except (TypeError, ValueError):
        return None
    return data if isinstance(data, dict) else None


class ShopRegister(BaseModel):
    name: str
    phone: str
    address: str
    business_hours: str = "09:00-18:00"
    deposit_amount: int = Field(10000, ge=0)
    deposit_required: bool = True

    @field_validator("name", "phone", "address", mode="before")
    @classmethod
    def strip(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if len(v) < 2:
            raise ValueError("Shop name must be at least 2 characters")
        return v

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        if len(v) < 9:
            raise ValueError("Phone number is too short")
        return v

    @field_validator("address")
    @classmethod
    def validate_address(cls, v: str) -> str:
        if len(v) < 5:
            raise ValueError("Address is too short")
        return v

    @field_validator("business_hours")
    @classmethod
    def check_business_hours(cls, v: str) -> str:
        return validate_business_hours(v.strip())


class ShopSettingsUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    business_hours: Optional[str] = None
    business_days: Optional[dict[str, Optional[dict[str, Any]]]] = None
    deposit_amount: Optional[int] = Field(None, ge=0)
    deposit_required: Optional[bool] = None
    shop_memo: Optional[str] = None

    model_config = {"from_attributes": True}


class ShopPublicRead(BaseModel):
    id: int
    name: str
    slug: str
    phone: str
    address: str
    business_hours: str
    business_days: Optional[dict] = None
    shop_memo: Optional[str] = None
    deposit_amount: int
    deposit_required: bool

    @field_validator("business_days", mode="before")
    @classmethod
    def parse_business_days(cls, v):
        return _load_business_days(v)

    model_config = {"from_attributes": True}


class ShopRead(ShopPublicRead):
    is_approved: bool
    created_at: datetime

    model_config = {"from_attributes": True}
