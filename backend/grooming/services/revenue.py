"""Revenue statistics over confirmed bookings of a shop."""

from collections import defaultdict
from datetime import date

from sqlalchemy.orm import Session

from ..models.generated import Bookings as DBBookings, Services as DBServices
from .customers import REVENUE_STATUSES


def revenue_stats(db: Session, shop_id: int, start_date: date, end_date: date) -> dict:
    """
    Aggregate revenue for bookings dated within [start_date, end_date].

    by_day_of_week uses 0 = Sunday ... 6 = Saturday.
    """
    rows = (
        db.query(DBBookings.date, DBBookings.time, DBServices.name, DBServices.price)
        .join(DBServices, DBBookings.service_id == DBServices.id)
        .filter(
            DBBookings.shop_id == shop_id,
            DBBookings.status.in_(REVENUE_STATUSES),
            DBBookings.date >= start_date.isoformat(),
            DBBookings.date <= end_date.isoformat(),
        )
        .all()
    )

    by_service: dict[str, list] = defaultdict(lambda: [0, 0])
    by_date: dict[str, list] = defaultdict(lambda: [0, 0])
    by_hour: dict[int, list] = defaultdict(lambda: [0, 0])
    by_dow: dict[int, list] = defaultdict(lambda: [0, 0])
    total = 0

    for date_str, time_str, service_name, price in rows:
        price = price or 0
        total += price

        hour = int(time_str.split(":")[0])
        dow = (date.fromisoformat(date_str).weekday() + 1) % 7

        for bucket, key in (
            (by_service, service_name),
            (by_date, date_str),
            (by_hour, hour),
            (by_dow, dow),
        ):
            bucket[key][0] += price
            bucket[key][1] += 1

    return {
        "total_revenue": total,
        "booking_count": len(rows),
        "by_service": sorted(
            (
                {"service_name": name, "revenue": revenue, "count": count}
                for name, (revenue, count) in by_service.items()
            ),
            key=lambda item: item["revenue"],
            reverse=True,
        ),
        "by_date": [
            {"date": key, "revenue": revenue, "count": count}
            for key, (revenue, count) in sorted(by_date.items())
        ],
        "by_hour": [
            {"hour": key, "revenue": revenue, "count": count}
            for key, (revenue, count) in sorted(by_hour.items())
        ],
        "by_day_of_week": [
            {"day_of_week": key, "revenue": revenue, "count": count}
            for key, (revenue, count) in sorted(by_dow.items())
        ],
    }
