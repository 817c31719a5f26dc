"""
Тесты для общего ядра.
"""

import logging
from datetime import date

import pytest
from pydantic import ValidationError

from hotel_inventory.shared_kernel import (
    BusinessRuleValidationException,
    CapacityExceededException,
    ClosedDateRange,
    DateRange,
    DomainException,
    DuplicatePricingRuleException,
    InMemoryRoomRepository,
    InvalidInputException,
    RoomNotFoundException,
    StandardLogger,
    ensure_stay,
    ensure_window,
    generate_id,
)


class TestDateRange:
    """Тесты для полуоткрытого диапазона проживания."""

    def test_nights_exclude_check_out(self):
        period = DateRange(check_in=date(2025, 6, 7), check_out=date(2025, 6, 9))

        assert period.nights == 2
        assert list(period.dates()) == [date(2025, 6, 7), date(2025, 6, 8)]
        assert period.contains(date(2025, 6, 8))
        assert not period.contains(date(2025, 6, 9))

    @pytest.mark.parametrize("check_out", [date(2025, 6, 7), date(2025, 6, 6)])
    def test_empty_or_inverted_range_is_rejected(self, check_out):
        with pytest.raises(ValidationError):
            DateRange(check_in=date(2025, 6, 7), check_out=check_out)

    def test_overlaps(self):
        first = DateRange(check_in=date(2025, 6, 1), check_out=date(2025, 6, 5))
        adjacent = DateRange(check_in=date(2025, 6, 5), check_out=date(2025, 6, 7))
        crossing = DateRange(check_in=date(2025, 6, 4), check_out=date(2025, 6, 6))

        assert not first.overlaps(adjacent)
        assert first.overlaps(crossing)

    def test_ensure_stay_raises_domain_error(self):
        with pytest.raises(InvalidInputException):
            ensure_stay(date(2025, 6, 9), date(2025, 6, 7))

        with pytest.raises(InvalidInputException):
            ensure_stay(None, date(2025, 6, 7))


class TestClosedDateRange:
    """Тесты для закрытого диапазона дат."""

    def test_both_bounds_included(self):
        window = ClosedDateRange(start=date(2025, 6, 1), end=date(2025, 6, 3))

        assert window.days == 3
        assert list(window.dates())[-1] == date(2025, 6, 3)
        assert window.covers(date(2025, 6, 1))

    def test_single_day_window(self):
        window = ensure_window(date(2025, 6, 1), date(2025, 6, 1))
        assert window.days == 1

    def test_inverted_window_is_rejected(self):
        with pytest.raises(InvalidInputException):
            ensure_window(date(2025, 6, 3), date(2025, 6, 1))


class TestExceptions:
    def test_hierarchy(self):
        assert issubclass(InvalidInputException, BusinessRuleValidationException)
        assert issubclass(DuplicatePricingRuleException, InvalidInputException)
        assert issubclass(CapacityExceededException, DomainException)
        assert issubclass(RoomNotFoundException, DomainException)


class TestInfrastructure:
    def test_unknown_room_raises_not_found(self):
        repo = InMemoryRoomRepository()

        with pytest.raises(RoomNotFoundException):
            repo.get_by_id(generate_id())

    def test_logger_appends_context(self, caplog):
        logger = StandardLogger("hotel_inventory.test")

        with caplog.at_level(logging.INFO, logger="hotel_inventory.test"):
            logger.info("Сообщение", room_id=1, delta=-2)

        assert "Сообщение [room_id=1 delta=-2]" in caplog.text
