"""Unit tests for booking rules: pure functions, no DB."""

from datetime import UTC, date, datetime, timedelta
from types import SimpleNamespace

import pytest

from carebook.models.booking import BookingStatus, DurationUnit
from carebook.services.booking_rules import (
    STATUS_TRANSITIONS,
    calc_total_cost,
    check_cancellable,
    check_duration,
    check_location,
    is_transition_allowed,
    local_day,
    local_day_window,
    validate_booking_request,
)
from carebook.services.catalog import CatalogService, ServiceCatalog
from carebook.services.errors import NotFound

LOCATION = {
    "division": "Dhaka",
    "district": "Dhaka",
    "city": "Dhaka",
    "area": "Gulshan",
    "address": "Road 11, House 4",
}

ELDERLY = CatalogService(
    service_id="elderly-care",
    name="Elderly Care",
    category="elderly",
    charge_per_hour=250,
    charge_per_day=2000,
)


class TestDuration:
    def test_valid_hours(self):
        assert check_duration(3, "hours") is None

    def test_valid_days(self):
        assert check_duration(1, "days") is None

    def test_zero_rejected(self):
        assert check_duration(0, "hours").rule == "duration_value"

    def test_negative_rejected(self):
        assert check_duration(-2, "days").rule == "duration_value"

    def test_fraction_rejected(self):
        assert check_duration(1.5, "hours").rule == "duration_value"

    def test_bool_rejected(self):
        assert check_duration(True, "hours").rule == "duration_value"

    def test_unknown_unit(self):
        assert check_duration(2, "weeks").rule == "duration_unit"


class TestLocation:
    def test_complete(self):
        assert check_location(LOCATION) is None

    def test_blank_field(self):
        v = check_location({**LOCATION, "area": "   "})
        assert v.rule == "location"
        assert "area" in v.message

    def test_missing_fields_listed(self):
        v = check_location({"division": "Dhaka"})
        for field in ("district", "city", "area", "address"):
            assert field in v.message


def test_validate_collects_all_violations():
    violations = validate_booking_request(0, "hours", {})
    assert [v.rule for v in violations] == ["duration_value", "location"]


class TestTotalCost:
    def test_hours(self):
        assert calc_total_cost(ELDERLY, 2, DurationUnit.HOURS) == 500

    def test_days(self):
        assert calc_total_cost(ELDERLY, 3, DurationUnit.DAYS) == 6000


class TestLocalDay:
    def test_after_local_midnight_is_next_day(self):
        # 19:30 UTC is 01:30 the next day in Dhaka (UTC+6)
        assert local_day(datetime(2025, 3, 1, 19, 30, tzinfo=UTC)) == date(2025, 3, 2)

    def test_window_is_one_local_day(self):
        start, end = local_day_window(datetime(2025, 3, 1, 10, 0, tzinfo=UTC))
        assert start == datetime(2025, 2, 28, 18, 0, tzinfo=UTC)
        assert end - start == timedelta(days=1)


class TestTransitions:
    def test_every_status_reachable(self):
        for current in BookingStatus:
            for requested in BookingStatus:
                assert is_transition_allowed(current, requested)

    def test_table_covers_every_status(self):
        assert set(STATUS_TRANSITIONS) == set(BookingStatus)


class TestCancellable:
    @pytest.mark.parametrize("status", [BookingStatus.PENDING, BookingStatus.CONFIRMED])
    def test_open_bookings_cancellable(self, status):
        assert check_cancellable(SimpleNamespace(status=status)) is None

    @pytest.mark.parametrize("status", [BookingStatus.COMPLETED, BookingStatus.CANCELLED])
    def test_closed_bookings_not_cancellable(self, status):
        assert check_cancellable(SimpleNamespace(status=status)).rule == "not_cancellable"


class TestCatalog:
    @pytest.mark.asyncio
    async def test_get_active(self):
        catalog = ServiceCatalog([ELDERLY])
        assert (await catalog.get("elderly-care")).charge_per_hour == 250

    @pytest.mark.asyncio
    async def test_unknown_service(self):
        with pytest.raises(NotFound):
            await ServiceCatalog([ELDERLY]).get("pet-care")

    @pytest.mark.asyncio
    async def test_inactive_service_hidden(self):
        retired = ELDERLY.model_copy(update={"is_active": False})
        catalog = ServiceCatalog([retired])
        assert catalog.list_active() == []
        with pytest.raises(NotFound):
            await catalog.get("elderly-care")

    def test_bundled_catalog(self, catalog):
        ids = {s.service_id for s in catalog.list_active()}
        assert ids == {"baby-care", "elderly-care", "sick-care"}
