"""
Доменная модель аналитики отеля.

Модель только для чтения: считает показатели по снимку броней
и номеров отеля, ничего не изменяя.
"""

from collections import Counter
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, List, Tuple

from ..booking.domain import Booking
from ..shared_kernel import BookingStatus, ClosedDateRange, Room


def confirmed(bookings: Iterable[Booking]) -> List[Booking]:
    return [booking for booking in bookings if booking.status == BookingStatus.CONFIRMED]


def revenue(bookings: Iterable[Booking]) -> Decimal:
    """Выручка подтвержденных броней."""
    return sum((booking.final_price for booking in confirmed(bookings)), Decimal(0))


def trailing_window(as_of: date, days: int) -> ClosedDateRange:
    """Окно из days дней, заканчивающееся as_of включительно."""
    return ClosedDateRange(start=as_of - timedelta(days=days - 1), end=as_of)


def booked_room_nights(bookings: Iterable[Booking], window: ClosedDateRange) -> int:
    """Номеро-ночи подтвержденных броней, попавшие в окно."""
    total = 0
    for booking in confirmed(bookings):
        nights = sum(1 for day in booking.period.dates() if window.covers(day))
        total += nights * booking.rooms_booked
    return total


def occupancy_rate(
    bookings: Iterable[Booking], rooms: Iterable[Room], window: ClosedDateRange
) -> float:
    """Занятые номеро-ночи / (всего номеров × ночей окна); 0 для отеля без номеров."""
    total_rooms = sum(room.total_rooms for room in rooms)
    if total_rooms == 0:
        return 0.0
    return booked_room_nights(bookings, window) / (total_rooms * window.days)


def status_counts(bookings: Iterable[Booking]) -> Counter:
    return Counter(booking.status for booking in bookings)


def month_start(day: date, months_back: int = 0) -> date:
    """Первое число месяца, отстоящего от day на months_back назад."""
    index = day.year * 12 + (day.month - 1) - months_back
    return date(index // 12, index % 12 + 1, 1)


def monthly_revenue(
    bookings: Iterable[Booking], as_of: date, months: int
) -> List[Tuple[date, Decimal]]:
    """Выручка подтвержденных броней по месяцу заезда, от старого месяца к текущему."""
    bookings = confirmed(bookings)
    series = []
    for months_back in range(months - 1, -1, -1):
        month = month_start(as_of, months_back)
        series.append(
            (
                month,
                sum(
                    (
                        booking.final_price
                        for booking in bookings
                        if month_start(booking.period.check_in) == month
                    ),
                    Decimal(0),
                ),
            )
        )
    return series


def daily_bookings(
    bookings: Iterable[Booking], as_of: date, days: int
) -> List[Tuple[date, int, Decimal]]:
    """Число броней (любого статуса) и выручка подтвержденных по дню создания."""
    bookings = list(bookings)
    series = []
    for day in trailing_window(as_of, days).dates():
        created = [booking for booking in bookings if booking.created_at.date() == day]
        series.append((day, len(created), revenue(created)))
    return series
