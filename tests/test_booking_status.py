"""Tests for booking status and deposit transitions."""

from datetime import datetime

import pytest

from grooming.services.booking_status import (
    BookingStateError,
    admin_confirm_deposit,
    change_status,
    confirm_deposit,
    is_deposit_expired,
    request_deposit,
)

from conftest import make_booking

NOW = datetime(2030, 1, 5, 12, 0)


@pytest.fixture
def booking(db, shop, services):
    return make_booking(db, shop, services["partial"])


class TestStatus:
    def test_approve_pending(self, db, booking):
        change_status(db, booking, "confirmed")

        assert booking.status == "confirmed"

    @pytest.mark.parametrize("new_status", ["confirmed", "rejected", "cancelled"])
    def test_allowed_from_pending(self, db, booking, new_status):
        assert change_status(db, booking, new_status).status == new_status

    def test_confirmed_can_be_cancelled(self, db, booking):
        change_status(db, booking, "confirmed")

        assert change_status(db, booking, "cancelled").status == "cancelled"

    def test_confirmed_cannot_be_rejected(self, db, booking):
        change_status(db, booking, "confirmed")

        with pytest.raises(BookingStateError):
            change_status(db, booking, "rejected")

    def test_cancelled_is_final(self, db, booking):
        change_status(db, booking, "cancelled")

        with pytest.raises(BookingStateError):
            change_status(db, booking, "confirmed")

    def test_same_status_is_noop(self, db, booking):
        change_status(db, booking, "confirmed")

        assert change_status(db, booking, "confirmed").status == "confirmed"

    def test_unknown_status(self, db, booking):
        with pytest.raises(BookingStateError):
            change_status(db, booking, "done")


class TestDeposit:
    def test_request_sets_deadline(self, db, booking):
        request_deposit(db, booking, now=NOW)

        assert booking.deposit_status == "requested"
        assert booking.deposit_deadline == "2030-01-05 14:00:00"

    def test_expiry_is_derived_from_deadline(self, db, booking):
        request_deposit(db, booking, now=NOW)

        assert is_deposit_expired(booking, datetime(2030, 1, 5, 13, 59)) is False
        assert is_deposit_expired(booking, datetime(2030, 1, 5, 14, 1)) is True

    def test_confirm_before_deadline(self, db, booking):
        request_deposit(db, booking, now=NOW)

        confirm_deposit(db, booking, now=datetime(2030, 1, 5, 13, 0))

        assert booking.deposit_status == "paid"
        assert is_deposit_expired(booking, datetime(2030, 2, 1)) is False

    def test_confirm_after_deadline_fails(self, db, booking):
        request_deposit(db, booking, now=NOW)

        with pytest.raises(BookingStateError):
            confirm_deposit(db, booking, now=datetime(2030, 1, 5, 15, 0))
        assert booking.deposit_status == "requested"

    def test_confirm_without_request_fails(self, db, booking):
        with pytest.raises(BookingStateError):
            confirm_deposit(db, booking, now=NOW)

    def test_request_after_payment_fails(self, db, booking):
        admin_confirm_deposit(db, booking)

        with pytest.raises(BookingStateError):
            request_deposit(db, booking, now=NOW)

    def test_request_for_cancelled_booking_fails(self, db, booking):
        change_status(db, booking, "cancelled")

        with pytest.raises(BookingStateError):
            request_deposit(db, booking, now=NOW)

    def test_admin_confirm_pays_and_confirms(self, db, booking):
        admin_confirm_deposit(db, booking)

        assert booking.deposit_status == "paid"
        assert booking.status == "confirmed"

    def test_admin_confirm_rejected_booking_fails(self, db, booking):
        change_status(db, booking, "rejected")

        with pytest.raises(BookingStateError):
            admin_confirm_deposit(db, booking)

    def test_no_deposit_is_never_expired(self, booking):
        assert is_deposit_expired(booking, datetime(2099, 1, 1)) is False
