# backend/grooming/schemas/slots.py
"""
Pydantic schemas for available-times API.
"""

from typing import Optional
from pydantic import BaseModel


class AvailableTime(BaseModel):
    """A single slot of the day grid, or the closed-day sentinel."""
    time: str  # "HH:MM"
    available: bool
    closed: Optional[bool] = None
    reason: Optional[str] = None

    model_config = {"from_attributes": True}
