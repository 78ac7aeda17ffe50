# backend/grooming/schemas/calendar_overrides.py

from datetime import date, datetime
from typing import Literal, Optional
from pydantic import BaseModel, field_validator, model_validator

from ..services.slots.config import TIME_RE

OverrideKind = Literal["day_off", "block", "force_open"]


class CalendarOverrideCreate(BaseModel):
    date: date
    override_kind: OverrideKind
    time: Optional[str] = None
    reason: Optional[str] = None

    @field_validator("time")
    @classmethod
    def validate_time(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not TIME_RE.match(v):
            raise ValueError("Invalid time format. Use HH:MM")
        return v

    @model_validator(mode="after")
    def check_time_for_kind(self):
        if self.override_kind == "day_off":
            self.time = None
        elif self.time is None:
            raise ValueError(f"time is required for {self.override_kind}")
        return self

    model_config = {"from_attributes": True}


class CalendarOverrideRead(BaseModel):
    id: int
    shop_id: int

    date: date
    time: Optional[str] = None

    override_kind: str
    reason: Optional[str] = None

    created_at: datetime

    model_config = {"from_attributes": True}
