"""Tests for the pure slot resolver."""

from datetime import date

import pytest

from grooming.services.slots import (
    BookedInterval,
    BookingConfig,
    DaySchedule,
    DayWindow,
    SlotOverrides,
    SlotResult,
    SlotValidationError,
    resolve_available_slots,
)
from grooming.services.slots.config import minutes_to_time_str, time_str_to_minutes
from grooming.services.slots.resolver import (
    build_slot_grid,
    find_overlapping_booking,
    intervals_overlap,
    resolve_day_window,
    resolve_slot,
)

MONDAY = "2030-01-07"
TUESDAY = "2030-01-08"
SUNDAY = "2030-01-06"

WEEK = {
    "mon": DaySchedule("09:00", "18:00"),
    "tue": DaySchedule("10:00", "14:00"),
    "sun": DaySchedule("09:00", "18:00", is_closed=True),
}


def grid_times(start: str, end: str) -> list[str]:
    return [
        minutes_to_time_str(m)
        for m in range(time_str_to_minutes(start), time_str_to_minutes(end) + 1, 30)
    ]


def by_time(slots) -> dict:
    return {s.time: s for s in slots}


class TestScenarios:
    def test_open_day_without_bookings_is_fully_available(self):
        slots = resolve_available_slots(MONDAY, 60, WEEK)

        assert [s.time for s in slots] == grid_times("09:00", "17:00")
        assert all(s.available for s in slots)
        assert all(s.reason is None for s in slots)

    def test_booking_blocks_overlapping_slots(self):
        slots = resolve_available_slots(
            MONDAY, 60, WEEK, existing_bookings=[BookedInterval("10:00", 60)]
        )

        unavailable = [s.time for s in slots if not s.available]
        assert unavailable == ["09:30", "10:00", "10:30"]
        for s in slots:
            if not s.available:
                assert s.reason == "already booked"

    def test_closed_date_returns_sentinel(self):
        slots = resolve_available_slots(MONDAY, 60, WEEK, closed_dates=[MONDAY])

        assert [s.to_dict() for s in slots] == [
            {"time": "00:00", "available": False, "closed": True, "reason": "temporary closure"}
        ]

    def test_force_open_wins_over_booking(self):
        overrides = SlotOverrides(blocked={}, force_open={MONDAY: {"10:00"}})
        slots = by_time(resolve_available_slots(
            MONDAY, 60, WEEK,
            slot_overrides=overrides,
            existing_bookings=[BookedInterval("10:00", 60)],
        ))

        assert slots["10:00"].available is True
        assert slots["09:30"].available is False
        assert slots["10:30"].available is False


class TestClosures:
    def test_weekly_day_off_returns_sentinel(self):
        slots = resolve_available_slots(SUNDAY, 60, WEEK)

        assert len(slots) == 1
        assert slots[0].closed is True
        assert slots[0].reason == "weekly day off"
        assert slots[0].time == "00:00"

    def test_closed_date_wins_over_everything(self):
        overrides = SlotOverrides(blocked={}, force_open={MONDAY: {"10:00"}})
        slots = resolve_available_slots(
            MONDAY, 60, WEEK,
            closed_dates=[MONDAY],
            slot_overrides=overrides,
            existing_bookings=[BookedInterval("12:00", 60)],
        )

        assert len(slots) == 1
        assert slots[0].reason == "temporary closure"

    def test_closed_date_of_another_day_is_ignored(self):
        slots = resolve_available_slots(MONDAY, 60, WEEK, closed_dates=[TUESDAY])

        assert len(slots) == 17

    def test_force_open_reopens_weekly_day_off(self):
        overrides = SlotOverrides(blocked={}, force_open={SUNDAY: {"11:00"}})
        slots = by_time(resolve_available_slots(SUNDAY, 60, WEEK, slot_overrides=overrides))

        assert slots["11:00"].available is True
        assert slots["10:00"].available is False
        assert slots["10:00"].reason == "weekly day off"
        assert not any(s.closed for s in slots.values())


class TestGrid:
    def test_missing_schedule_uses_default_hours(self):
        slots = resolve_available_slots(MONDAY)

        assert slots[0].time == "09:00"
        assert slots[-1].time == "17:00"

    def test_missing_weekday_uses_default_hours(self):
        slots = resolve_available_slots("2030-01-09", 60, WEEK)  # Wednesday

        assert [s.time for s in slots] == grid_times("09:00", "17:00")

    def test_long_service_shrinks_grid(self):
        slots = resolve_available_slots(MONDAY, 120, WEEK)

        assert slots[-1].time == "16:00"

    def test_duration_longer_than_day_gives_empty_grid(self):
        assert resolve_available_slots(TUESDAY, 300, WEEK) == []

    def test_short_service_still_uses_half_hour_steps(self):
        slots = resolve_available_slots(TUESDAY, 15, WEEK)

        assert [s.time for s in slots] == grid_times("10:00", "13:30")

    def test_slots_are_aligned_and_fit_before_close(self):
        duration = 90
        slots = resolve_available_slots(TUESDAY, duration, WEEK)
        open_min, close_min = time_str_to_minutes("10:00"), time_str_to_minutes("14:00")

        for s in slots:
            start = time_str_to_minutes(s.time)
            assert (start - open_min) % 30 == 0
            assert start + duration <= close_min

    def test_back_to_back_bookings_do_not_bleed(self):
        slots = by_time(resolve_available_slots(
            MONDAY, 60, WEEK,
            existing_bookings=[BookedInterval("10:00", 60), BookedInterval("13:00", 60)],
        ))

        assert slots["09:00"].available is True
        assert slots["11:00"].available is True
        assert slots["12:00"].available is True
        assert slots["14:00"].available is True
        assert slots["12:30"].available is False

    def test_blocked_slot_is_unavailable(self):
        overrides = SlotOverrides(blocked={MONDAY: {"15:00"}}, force_open={})
        slots = by_time(resolve_available_slots(MONDAY, 60, WEEK, slot_overrides=overrides))

        assert slots["15:00"].available is False
        assert slots["15:00"].reason == "manually blocked"
        assert slots["14:30"].available is True

    def test_blocked_wins_over_force_open(self):
        overrides = SlotOverrides(blocked={MONDAY: {"15:00"}}, force_open={MONDAY: {"15:00"}})
        slots = by_time(resolve_available_slots(MONDAY, 60, WEEK, slot_overrides=overrides))

        assert slots["15:00"].available is False
        assert slots["15:00"].reason == "manually blocked"

    def test_overrides_of_other_dates_are_ignored(self):
        overrides = SlotOverrides(blocked={TUESDAY: {"10:00"}}, force_open={})
        slots = by_time(resolve_available_slots(MONDAY, 60, WEEK, slot_overrides=overrides))

        assert slots["10:00"].available is True

    def test_accepts_date_object(self):
        assert resolve_available_slots(date(2030, 1, 7), 60, WEEK)[0].time == "09:00"

    def test_fifteen_minute_step(self):
        config = BookingConfig(slot_step_minutes=15)
        slots = resolve_available_slots(TUESDAY, 60, WEEK, config=config)

        assert [s.time for s in slots[:3]] == ["10:00", "10:15", "10:30"]
        assert slots[-1].time == "13:00"


class TestValidation:
    @pytest.mark.parametrize("value", ["2030-13-01", "07-01-2030", "2030-1-7", "", "not a date"])
    def test_malformed_date(self, value):
        with pytest.raises(SlotValidationError):
            resolve_available_slots(value, 60, WEEK)

    @pytest.mark.parametrize("value", [0, -30, 1.5, True])
    def test_non_positive_or_non_integer_duration(self, value):
        with pytest.raises(SlotValidationError):
            resolve_available_slots(MONDAY, value, WEEK)

    def test_inverted_schedule(self):
        with pytest.raises(SlotValidationError):
            resolve_available_slots(MONDAY, 60, {"mon": DaySchedule("18:00", "09:00")})

    def test_malformed_schedule_time(self):
        with pytest.raises(SlotValidationError):
            resolve_available_slots(MONDAY, 60, {"mon": DaySchedule("9am", "18:00")})

    def test_malformed_booking_time(self):
        with pytest.raises(SlotValidationError):
            resolve_available_slots(MONDAY, 60, WEEK, existing_bookings=[BookedInterval("25:00", 60)])

    def test_closed_day_is_not_validated_for_hours(self):
        schedule = {"mon": DaySchedule("18:00", "09:00", is_closed=True)}
        slots = resolve_available_slots(MONDAY, 60, schedule)

        assert slots[0].reason == "weekly day off"

    def test_non_string_schedule_time(self):
        with pytest.raises(SlotValidationError):
            resolve_available_slots(MONDAY, 60, {"mon": DaySchedule(900, "18:00")})

    def test_reopened_day_off_with_placeholder_hours_uses_defaults(self):
        schedule = {"sun": DaySchedule("18:00", "09:00", is_closed=True)}
        overrides = SlotOverrides(blocked={}, force_open={SUNDAY: {"10:00"}})

        slots = by_time(resolve_available_slots(SUNDAY, 60, schedule, slot_overrides=overrides))

        assert slots["10:00"].available is True
        assert slots["09:00"].reason == "weekly day off"
        assert "17:00" in slots


class TestLevels:
    def test_day_window_of_open_day(self):
        window = resolve_day_window(date(2030, 1, 8), WEEK, None)

        assert window == DayWindow(600, 840)
        assert not window.is_closed

    def test_day_window_round_trips_through_dict(self):
        window = resolve_day_window(date(2030, 1, 6), WEEK, None, {"11:00"})

        assert DayWindow.from_dict(window.to_dict()) == window
        assert window.force_open_only is True

    def test_grid_of_closed_window_is_sentinel(self):
        slots = build_slot_grid(DayWindow(closed_reason="weekly day off"), 60)

        assert [s.to_dict() for s in slots] == [
            {"time": "00:00", "available": False, "closed": True, "reason": "weekly day off"}
        ]


class TestOverlap:
    def test_half_open_intervals(self):
        assert intervals_overlap(600, 60, 630, 60)
        assert not intervals_overlap(600, 60, 660, 60)
        assert not intervals_overlap(660, 60, 600, 60)

    def test_find_overlapping_booking(self):
        bookings = [BookedInterval("10:00", 60), BookedInterval("13:00", 120)]

        assert find_overlapping_booking("11:00", 60, bookings) is None
        assert find_overlapping_booking("14:30", 30, bookings) == bookings[1]
        assert find_overlapping_booking("09:30", 60, bookings) == bookings[0]


class TestResolveSlot:
    OPEN = DayWindow(540, 1080)

    def test_free_slot(self):
        assert resolve_slot(self.OPEN, "10:00", 60) == SlotResult("10:00", True)

    def test_off_grid_start_inside_hours(self):
        assert resolve_slot(self.OPEN, "10:15", 30).available is True

    @pytest.mark.parametrize("time, duration", [("08:30", 60), ("17:30", 60), ("23:30", 60)])
    def test_outside_business_hours(self, time, duration):
        slot = resolve_slot(self.OPEN, time, duration)

        assert slot.available is False
        assert slot.reason == "outside business hours"

    def test_closed_window(self):
        slot = resolve_slot(DayWindow(closed_reason="temporary closure"), "10:00", 60)

        assert slot.available is False
        assert slot.reason == "temporary closure"

    def test_booked(self):
        slot = resolve_slot(self.OPEN, "10:30", 60, existing_bookings=[BookedInterval("10:00", 60)])

        assert slot.reason == "already booked"

    def test_force_open_wins_over_booking(self):
        slot = resolve_slot(
            self.OPEN, "10:00", 60,
            force_open={"10:00"},
            existing_bookings=[BookedInterval("10:00", 60)],
        )

        assert slot.available is True

    def test_blocked_wins_over_force_open(self):
        slot = resolve_slot(self.OPEN, "10:00", 60, blocked={"10:00"}, force_open={"10:00"})

        assert slot.reason == "manually blocked"

    def test_reopened_day_off_accepts_forced_slot_only(self):
        window = DayWindow(540, 1080, force_open_only=True)

        assert resolve_slot(window, "11:00", 60, force_open={"11:00"}).available is True
        assert resolve_slot(window, "13:00", 60, force_open={"11:00"}).reason == "weekly day off"

    def test_agrees_with_grid(self):
        bookings = [BookedInterval("10:00", 60), BookedInterval("14:00", 120)]
        grid = build_slot_grid(self.OPEN, 60, blocked={"12:00"}, existing_bookings=bookings)

        for slot in grid:
            assert resolve_slot(self.OPEN, slot.time, 60, blocked={"12:00"}, existing_bookings=bookings) == slot
