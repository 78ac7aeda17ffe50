# backend/grooming/schemas/revenue.py

from pydantic import BaseModel


class ServiceRevenue(BaseModel):
    service_name: str
    revenue: int
    count: int


class DateRevenue(BaseModel):
    date: str
    revenue: int
    count: int


class HourRevenue(BaseModel):
    hour: int
    revenue: int
    count: int


class DayOfWeekRevenue(BaseModel):
    day_of_week: int  # 0 = Sunday
    revenue: int
    count: int


class RevenueStats(BaseModel):
    total_revenue: int
    booking_count: int
    by_service: list[ServiceRevenue]
    by_date: list[DateRevenue]
    by_hour: list[HourRevenue]
    by_day_of_week: list[DayOfWeekRevenue]
