"""
Прикладной слой аналитики отеля.
"""

import datetime as dt
from datetime import date
from decimal import Decimal
from typing import Callable, List, Optional

from pydantic import BaseModel

from ..booking.interfaces import IBookingRepository
from ..config import Settings
from ..config import settings as default_settings
from ..shared_kernel import (
    BookingStatus,
    EntityId,
    IHotelRepository,
    ILogger,
    IRoomRepository,
    StandardLogger,
    today,
)
from . import domain

# DTO для исходящих данных


class OverviewDTO(BaseModel):
    total_bookings: int
    total_revenue: Decimal
    occupancy_rate: float


class BookingStatusDistributionDTO(BaseModel):
    confirmed: int
    pending: int
    cancelled: int


class MonthlyRevenueDTO(BaseModel):
    month: str  # YYYY-MM
    revenue: Decimal


class RecentBookingDTO(BaseModel):
    date: dt.date
    bookings: int
    revenue: Decimal


class RoomPerformanceDTO(BaseModel):
    room_id: EntityId
    bookings: int
    revenue: Decimal
    occupancy_rate: float


class HotelAnalyticsDTO(BaseModel):
    """Сводная аналитика отеля."""

    hotel_id: EntityId
    as_of: date
    overview: OverviewDTO
    booking_status: BookingStatusDistributionDTO
    monthly_revenue: List[MonthlyRevenueDTO]
    recent_bookings: List[RecentBookingDTO]
    room_performance: List[RoomPerformanceDTO]


# Сервисы приложения


class HotelAnalyticsService:
    """Сервис приложения для аналитики отеля."""

    def __init__(
        self,
        booking_repository: IBookingRepository,
        room_repository: IRoomRepository,
        hotel_repository: IHotelRepository,
        settings: Optional[Settings] = None,
        clock: Callable[[], date] = today,
        logger: Optional[ILogger] = None,
    ):
        self._bookings = booking_repository
        self._rooms = room_repository
        self._hotels = hotel_repository
        self._settings = settings or default_settings
        self._clock = clock
        self._logger = logger or StandardLogger(__name__)

    def get_hotel_analytics(
        self, hotel_id: EntityId, as_of: Optional[date] = None
    ) -> HotelAnalyticsDTO:
        """Считает показатели отеля на дату as_of (по умолчанию сегодня)."""
        self._hotels.get_by_id(hotel_id)
        as_of = as_of or self._clock()

        bookings = self._bookings.find_by_hotel(hotel_id)
        rooms = self._rooms.find_by_hotel(hotel_id)
        window = domain.trailing_window(
            as_of, self._settings.analytics_occupancy_window_days
        )
        statuses = domain.status_counts(bookings)

        analytics = HotelAnalyticsDTO(
            hotel_id=hotel_id,
            as_of=as_of,
            overview=OverviewDTO(
                total_bookings=len(bookings),
                total_revenue=domain.revenue(bookings),
                occupancy_rate=domain.occupancy_rate(bookings, rooms, window),
            ),
            booking_status=BookingStatusDistributionDTO(
                confirmed=statuses[BookingStatus.CONFIRMED],
                pending=statuses[BookingStatus.PENDING],
                cancelled=statuses[BookingStatus.CANCELLED],
            ),
            monthly_revenue=[
                MonthlyRevenueDTO(month=month.strftime("%Y-%m"), revenue=amount)
                for month, amount in domain.monthly_revenue(
                    bookings, as_of, self._settings.analytics_revenue_months
                )
            ],
            recent_bookings=[
                RecentBookingDTO(date=day, bookings=count, revenue=amount)
                for day, count, amount in domain.daily_bookings(
                    bookings, as_of, self._settings.analytics_recent_days
                )
            ],
            room_performance=[
                self._room_performance(room, bookings, window) for room in rooms
            ],
        )

        self._logger.debug(
            "Аналитика отеля рассчитана",
            hotel_id=hotel_id,
            bookings=len(bookings),
            occupancy_rate=analytics.overview.occupancy_rate,
        )
        return analytics

    @staticmethod
    def _room_performance(room, bookings, window) -> RoomPerformanceDTO:
        room_bookings = [booking for booking in bookings if booking.room_id == room.id]
        return RoomPerformanceDTO(
            room_id=room.id,
            bookings=len(room_bookings),
            revenue=domain.revenue(room_bookings),
            occupancy_rate=domain.occupancy_rate(room_bookings, [room], window),
        )
