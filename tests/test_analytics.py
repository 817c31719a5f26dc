"""
Тесты для аналитики отеля.
"""

from datetime import date
from decimal import Decimal

import pytest

from hotel_inventory.analytics import domain
from hotel_inventory.booking.application import CreateBookingRequest
from hotel_inventory.shared_kernel import (
    Hotel,
    HotelNotFoundException,
    generate_id,
)

AS_OF = date(2025, 6, 15)


@pytest.fixture
def analytics(app):
    return app["analytics_service"]


@pytest.fixture
def populated(app, room):
    """Три подтвержденные брони и одна отмененная."""
    service = app["booking_service"]
    user_id = generate_id()

    def book(check_in, check_out, rooms_booked=1):
        return service.create_booking(
            user_id,
            CreateBookingRequest(
                room_id=room.id,
                check_in=check_in,
                check_out=check_out,
                guests=1,
                rooms_booked=rooms_booked,
            ),
        )

    book(date(2025, 6, 10), date(2025, 6, 13), rooms_booked=2)  # 600
    book(date(2025, 6, 14), date(2025, 6, 17))  # 300, две ночи в окне
    book(date(2025, 4, 1), date(2025, 4, 3))  # 200
    cancelled = book(date(2025, 5, 5), date(2025, 5, 6))
    service.cancel_booking(cancelled.id)


class TestHotelAnalyticsService:
    """Тесты для сервиса аналитики."""

    def test_overview(self, analytics, populated, hotel):
        result = analytics.get_hotel_analytics(hotel.id, as_of=AS_OF)

        assert result.overview.total_bookings == 4
        assert result.overview.total_revenue == Decimal("1100")
        # 2 × 3 + 1 × 2 номеро-ночи из 5 номеров × 30 ночей
        assert result.overview.occupancy_rate == pytest.approx(8 / 150)

    def test_status_distribution(self, analytics, populated, hotel):
        result = analytics.get_hotel_analytics(hotel.id, as_of=AS_OF)

        assert result.booking_status.confirmed == 3
        assert result.booking_status.pending == 0
        assert result.booking_status.cancelled == 1

    def test_monthly_revenue_by_check_in_month(self, analytics, populated, hotel):
        result = analytics.get_hotel_analytics(hotel.id, as_of=AS_OF)

        assert [item.month for item in result.monthly_revenue] == [
            "2025-01",
            "2025-02",
            "2025-03",
            "2025-04",
            "2025-05",
            "2025-06",
        ]
        assert [item.revenue for item in result.monthly_revenue][-3:] == [
            Decimal("200"),
            Decimal("0"),
            Decimal("900"),
        ]

    def test_recent_bookings_by_creation_day(self, analytics, populated, hotel):
        created_on = date.today()

        result = analytics.get_hotel_analytics(hotel.id, as_of=created_on)

        assert len(result.recent_bookings) == 7
        assert result.recent_bookings[-1].date == created_on
        assert result.recent_bookings[-1].bookings == 4
        assert result.recent_bookings[-1].revenue == Decimal("1100")
        assert all(item.bookings == 0 for item in result.recent_bookings[:-1])

    def test_room_performance(self, analytics, populated, hotel, room):
        [performance] = analytics.get_hotel_analytics(hotel.id, as_of=AS_OF).room_performance

        assert performance.room_id == room.id
        assert performance.bookings == 4
        assert performance.revenue == Decimal("1100")

    def test_defaults_to_clock_date(self, analytics, hotel, today):
        assert analytics.get_hotel_analytics(hotel.id).as_of == today

    def test_hotel_without_rooms(self, app, analytics):
        empty = Hotel(name="Пустой")
        app["hotel_repo"].add(empty)

        result = analytics.get_hotel_analytics(empty.id, as_of=AS_OF)

        assert result.overview.occupancy_rate == 0.0
        assert result.overview.total_revenue == Decimal("0")

    def test_unknown_hotel(self, analytics):
        with pytest.raises(HotelNotFoundException):
            analytics.get_hotel_analytics(generate_id())


class TestAnalyticsDomain:
    @pytest.mark.parametrize(
        "day, months_back, expected",
        [
            (date(2025, 6, 15), 0, date(2025, 6, 1)),
            (date(2025, 6, 15), 5, date(2025, 1, 1)),
            (date(2025, 2, 28), 2, date(2024, 12, 1)),
        ],
    )
    def test_month_start(self, day, months_back, expected):
        assert domain.month_start(day, months_back) == expected

    def test_trailing_window_includes_as_of(self):
        window = domain.trailing_window(AS_OF, 30)

        assert window.end == AS_OF
        assert window.days == 30
