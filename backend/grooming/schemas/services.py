# backend/grooming/schemas/services.py

from typing import Optional
from pydantic import BaseModel, Field


class ServiceCreate(BaseModel):
    name: str = Field(min_length=1)
    duration: int = Field(gt=0)
    price: int = Field(ge=0)

    model_config = {"from_attributes": True}


class ServiceUpdate(BaseModel):
    is_active: Optional[bool] = None
    name: Optional[str] = Field(None, min_length=1)
    duration: Optional[int] = Field(None, gt=0)
    price: Optional[int] = Field(None, ge=0)

    model_config = {"from_attributes": True}


class ServiceRead(BaseModel):
    id: int
    shop_id: int
    name: str
    duration: int
    price: int
    is_active: bool

    model_config = {"from_attributes": True}
