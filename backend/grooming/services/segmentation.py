"""
Customer segmentation for the owner dashboard.

Segments are recomputed on every request, nothing is persisted:
- VIP: revenue at or above the top-20% cutoff of paying customers
- At-risk: no visit for 45+ days
- Return-soon: predicted next visit (last visit + average cycle) within 3 days
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, Optional

VIP_TOP_DIVISOR = 5  # top 20%
AT_RISK_DAYS = 45
RETURN_SOON_DAYS = 3


@dataclass(frozen=True)
class CustomerStats:
    customer_id: int
    total_revenue: float = 0
    visit_count: int = 0
    last_visit: Optional[date] = None
    first_visit_date: Optional[date] = None


@dataclass(frozen=True)
class CustomerSegment:
    customer_id: int
    is_vip: bool
    is_at_risk: bool
    is_return_soon: bool
    days_since_visit: Optional[int] = None
    avg_cycle_days: Optional[float] = None
    next_visit_date: Optional[date] = None


def vip_cutoff(revenues: Iterable[float]) -> Optional[float]:
    """
    Revenue of the ceil(n * 0.2)-th best paying customer (rank 1 = highest).

    Only positive revenues count. None when nobody has paid anything.
    """
    ranked = sorted((r for r in revenues if r > 0), reverse=True)
    if not ranked:
        return None
    # ceil(n / 5) in integer arithmetic; n * 0.2 drifts in floating point
    top_index = -(-len(ranked) // VIP_TOP_DIVISOR)
    return ranked[top_index - 1]


def average_cycle_days(stats: CustomerStats) -> Optional[float]:
    if stats.visit_count < 2 or stats.first_visit_date is None or stats.last_visit is None:
        return None
    span = (_as_date(stats.last_visit) - _as_date(stats.first_visit_date)).days
    return span / (stats.visit_count - 1)


def segment_customer(
    stats: CustomerStats,
    cutoff: Optional[float],
    now: datetime | date,
) -> CustomerSegment:
    today = _as_date(now)

    is_vip = cutoff is not None and cutoff > 0 and stats.total_revenue >= cutoff

    days_since = None
    if stats.last_visit is not None:
        days_since = (today - _as_date(stats.last_visit)).days
    is_at_risk = days_since is not None and days_since >= AT_RISK_DAYS

    avg_cycle = average_cycle_days(stats)
    next_visit = None
    is_return_soon = False
    if avg_cycle is not None and avg_cycle > 0:
        next_visit = (
            datetime.combine(_as_date(stats.last_visit), datetime.min.time())
            + timedelta(days=avg_cycle)
        ).date()
        days_until = (next_visit - today).days
        is_return_soon = 0 <= days_until <= RETURN_SOON_DAYS

    return CustomerSegment(
        customer_id=stats.customer_id,
        is_vip=is_vip,
        is_at_risk=is_at_risk,
        is_return_soon=is_return_soon,
        days_since_visit=days_since,
        avg_cycle_days=avg_cycle,
        next_visit_date=next_visit,
    )


def segment_customers(
    customers: list[CustomerStats],
    now: datetime | date | None = None,
) -> list[CustomerSegment]:
    """Classify every customer; output order follows input order."""
    now = now or datetime.now()
    cutoff = vip_cutoff(c.total_revenue for c in customers)
    return [segment_customer(c, cutoff, now) for c in customers]


def _as_date(value: datetime | date) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value
