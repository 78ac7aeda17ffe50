# backend/grooming/schemas/bookings.py

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from ..services.customers import normalize_phone
from ..services.slots.config import time_str_to_minutes


def _check_date(v: str) -> str:
    try:
        datetime.strptime(v, "%Y-%m-%d")
    except ValueError:
        raise ValueError("Date must be in YYYY-MM-DD format")
    return v


def _check_time(v: str) -> str:
    try:
        time_str_to_minutes(v)
    except ValueError:
        raise ValueError("Time must be in HH:MM format")
    return v


def _check_phone(v: str) -> str:
    phone = normalize_phone(v)
    if len(phone.lstrip("+")) < 9:
        raise ValueError("Phone number is too short")
    return phone


class BookingCreate(BaseModel):
    """Request body for creating a booking from the public booking page."""
    shop_id: int
    service_id: int
    date: str = Field(description="Date in YYYY-MM-DD format")
    time: str = Field(description="Time in HH:MM format")
    customer_name: str = Field(min_length=1)
    customer_phone: str
    pet_name: Optional[str] = None
    pet_breed: Optional[str] = None
    pet_age: Optional[str] = None
    pet_weight: Optional[str] = None
    memo: Optional[str] = None

    @field_validator("customer_phone")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        return _check_phone(v)

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: str) -> str:
        return _check_date(v)

    @field_validator("time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        return _check_time(v)

    model_config = {"from_attributes": True}


class BookingUpdate(BaseModel):
    """Reschedule: any of date / time / service."""
    date: Optional[str] = None
    time: Optional[str] = None
    service_id: Optional[int] = None
    memo: Optional[str] = None

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _check_date(v)

    @field_validator("time")
    @classmethod
    def validate_time(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _check_time(v)

    model_config = {"from_attributes": True}


class BookingCustomerUpdate(BaseModel):
    customer_name: Optional[str] = Field(None, min_length=1)
    customer_phone: Optional[str] = None

    @field_validator("customer_phone")
    @classmethod
    def validate_phone(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _check_phone(v)

    model_config = {"from_attributes": True}


class BookingRead(BaseModel):
    id: int

    shop_id: int
    service_id: int
    customer_id: Optional[int] = None

    date: str
    time: str

    customer_name: str
    customer_phone: str
    pet_name: Optional[str] = None
    pet_breed: Optional[str] = None
    memo: Optional[str] = None

    status: str
    deposit_status: str
    deposit_deadline: Optional[str] = None
    is_first_visit: bool
    reminded_at: Optional[str] = None

    created_at: datetime

    model_config = {"from_attributes": True}


class BookingWithService(BookingRead):
    service_name: Optional[str] = None
    deposit_expired: bool = False
