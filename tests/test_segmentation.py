"""Tests for customer segmentation."""

from datetime import date, datetime

from grooming.services.segmentation import (
    CustomerStats,
    average_cycle_days,
    segment_customers,
    vip_cutoff,
)

NOW = datetime(2030, 6, 15, 14, 30)


def stats(customer_id, revenue=0, visits=0, last=None, first=None):
    return CustomerStats(
        customer_id=customer_id,
        total_revenue=revenue,
        visit_count=visits,
        last_visit=last,
        first_visit_date=first,
    )


class TestVip:
    def test_top_fifth_of_five_customers(self):
        customers = [stats(i, r) for i, r in enumerate([100, 90, 80, 70, 60])]

        segments = segment_customers(customers, NOW)

        assert [s.is_vip for s in segments] == [True, False, False, False, False]

    def test_cutoff_rounds_up(self):
        # ceil(6 * 0.2) = 2 -> second best revenue
        assert vip_cutoff([10, 20, 30, 40, 50, 60]) == 50

    def test_fifteen_customers_take_three(self):
        revenues = list(range(150, 0, -10))

        assert len(revenues) == 15
        assert vip_cutoff(revenues) == 130

    def test_zero_revenue_customers_are_not_ranked(self):
        customers = [stats(1, 0), stats(2, 0), stats(3, 500)]

        segments = segment_customers(customers, NOW)

        assert [s.is_vip for s in segments] == [False, False, True]

    def test_nobody_paid_means_no_vip(self):
        segments = segment_customers([stats(1), stats(2)], NOW)

        assert vip_cutoff([0, 0]) is None
        assert not any(s.is_vip for s in segments)

    def test_ties_at_cutoff_are_all_vip(self):
        customers = [stats(i, r) for i, r in enumerate([100, 100, 50, 40, 30])]

        segments = segment_customers(customers, NOW)

        assert [s.is_vip for s in segments] == [True, True, False, False, False]


class TestAtRisk:
    def test_forty_five_days_is_at_risk(self):
        segment = segment_customers([stats(1, last=date(2030, 5, 1))], NOW)[0]

        assert segment.days_since_visit == 45
        assert segment.is_at_risk is True

    def test_forty_four_days_is_not(self):
        segment = segment_customers([stats(1, last=date(2030, 5, 2))], NOW)[0]

        assert segment.days_since_visit == 44
        assert segment.is_at_risk is False

    def test_uses_calendar_days(self):
        # 23:59 the day before still counts as one day ago
        segment = segment_customers(
            [stats(1, last=datetime(2030, 6, 14, 23, 59))], datetime(2030, 6, 15, 0, 1)
        )[0]

        assert segment.days_since_visit == 1

    def test_never_visited(self):
        segment = segment_customers([stats(1)], NOW)[0]

        assert segment.days_since_visit is None
        assert segment.is_at_risk is False


class TestReturnSoon:
    def test_single_visit_has_no_cycle(self):
        segment = segment_customers(
            [stats(1, visits=1, last=date(2030, 6, 14), first=date(2030, 6, 14))], NOW
        )[0]

        assert segment.avg_cycle_days is None
        assert segment.next_visit_date is None
        assert segment.is_return_soon is False

    def test_average_cycle(self):
        customer = stats(1, visits=3, first=date(2030, 4, 1), last=date(2030, 5, 31))

        assert average_cycle_days(customer) == 30

    def test_next_visit_within_three_days(self):
        # cycle 30 days, next visit 2030-06-17: two days ahead
        customer = stats(1, visits=2, first=date(2030, 4, 18), last=date(2030, 5, 18))

        segment = segment_customers([customer], NOW)[0]

        assert segment.next_visit_date == date(2030, 6, 17)
        assert segment.is_return_soon is True

    def test_next_visit_today(self):
        customer = stats(1, visits=2, first=date(2030, 4, 16), last=date(2030, 5, 16))

        segment = segment_customers([customer], NOW)[0]

        assert segment.next_visit_date == date(2030, 6, 15)
        assert segment.is_return_soon is True

    def test_next_visit_too_far(self):
        customer = stats(1, visits=2, first=date(2030, 4, 22), last=date(2030, 5, 22))

        assert segment_customers([customer], NOW)[0].is_return_soon is False

    def test_overdue_visit_is_not_return_soon(self):
        customer = stats(1, visits=2, first=date(2030, 4, 1), last=date(2030, 5, 1))

        segment = segment_customers([customer], NOW)[0]

        assert segment.is_return_soon is False
        assert segment.is_at_risk is True

    def test_same_day_visits_have_zero_cycle(self):
        customer = stats(1, visits=2, first=date(2030, 6, 14), last=date(2030, 6, 14))

        segment = segment_customers([customer], NOW)[0]

        assert segment.avg_cycle_days == 0
        assert segment.is_return_soon is False
