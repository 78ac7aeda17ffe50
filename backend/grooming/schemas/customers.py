# backend/grooming/schemas/customers.py

from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, Field


class CustomerUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    phone: Optional[str] = None
    pet_name: Optional[str] = None
    pet_breed: Optional[str] = None
    pet_age: Optional[str] = None
    pet_weight: Optional[str] = None
    memo: Optional[str] = None
    behavior_notes: Optional[str] = None
    special_notes: Optional[str] = None

    model_config = {"from_attributes": True}


class CustomerRead(BaseModel):
    id: int
    shop_id: int
    name: str
    phone: str
    visit_count: int
    last_visit: Optional[str] = None
    first_visit_date: Optional[str] = None
    pet_name: Optional[str] = None
    pet_breed: Optional[str] = None
    pet_age: Optional[str] = None
    pet_weight: Optional[str] = None
    memo: Optional[str] = None
    behavior_notes: Optional[str] = None
    special_notes: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class CustomerWithSegments(CustomerRead):
    total_revenue: int = 0
    is_vip: bool = False
    is_at_risk: bool = False
    is_return_soon: bool = False
    days_since_visit: Optional[int] = None
    avg_cycle_days: Optional[float] = None
    next_visit_date: Optional[date] = None


class CustomerCheck(BaseModel):
    exists: bool
    customer: Optional[CustomerRead] = None
