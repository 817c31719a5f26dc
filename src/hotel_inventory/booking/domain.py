"""
Доменная модель контекста бронирования.

Содержит агрегат бронирования с его конечным автоматом статусов,
доменные события и правила проверки заявки на проживание.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, PrivateAttr

from ..availability.domain import AvailabilityLedger, InventoryBatch
from ..shared_kernel import (
    BookingStatus,
    DateRange,
    DomainEvent,
    EntityId,
    InvalidInputException,
    InvalidStateTransitionException,
    Room,
    generate_id,
    now,
)


class BookingCreated(DomainEvent):
    """Событие создания бронирования."""

    event_type: str = "booking_created"
    booking_id: EntityId
    room_id: EntityId
    user_id: EntityId
    period: DateRange
    rooms_booked: int


class BookingConfirmed(DomainEvent):
    """Событие подтверждения бронирования."""

    event_type: str = "booking_confirmed"
    booking_id: EntityId
    confirmed_at: datetime


class BookingUpdated(DomainEvent):
    """Событие изменения дат или состава бронирования."""

    event_type: str = "booking_updated"
    booking_id: EntityId
    previous_period: DateRange
    period: DateRange
    rooms_booked: int


class BookingCancelled(DomainEvent):
    """Событие отмены бронирования."""

    event_type: str = "booking_cancelled"
    booking_id: EntityId
    released_rooms: int  # Сколько номеров возвращено на каждую ночь


class Booking(BaseModel):
    """Бронирование номера в отеле."""

    id: EntityId = Field(default_factory=generate_id)
    room_id: EntityId
    hotel_id: EntityId  # Денормализованное поле для выборок по отелю
    user_id: EntityId
    period: DateRange
    guests: int = Field(..., gt=0)
    rooms_booked: int = Field(..., gt=0)
    final_price: Decimal
    status: BookingStatus = BookingStatus.PENDING
    created_at: datetime = Field(default_factory=now)
    updated_at: datetime = Field(default_factory=now)
    version: int = 0  # Для оптимистической блокировки
    _domain_events: List[DomainEvent] = PrivateAttr(default_factory=list)

    @property
    def domain_events(self) -> List[DomainEvent]:
        """Возвращает список доменных событий."""
        return self._domain_events

    def clear_events(self) -> None:
        """Очищает список доменных событий."""
        self._domain_events = []

    @property
    def holds_inventory(self) -> bool:
        """Номера в учете доступности занимает только подтвержденная бронь."""
        return self.status == BookingStatus.CONFIRMED

    def covers(self, day: date) -> bool:
        return self.period.contains(day)

    def confirm(self) -> None:
        """Подтверждает бронирование."""
        if self.status != BookingStatus.PENDING:
            raise InvalidStateTransitionException(
                f"Подтвердить можно только бронирование в статусе pending, "
                f"текущий статус {self.status.value}"
            )

        self.status = BookingStatus.CONFIRMED
        self.updated_at = now()
        self._domain_events.append(
            BookingConfirmed(booking_id=self.id, confirmed_at=self.updated_at)
        )

    def cancel(self) -> None:
        """Отменяет бронирование. Из статуса cancelled переходов нет."""
        if self.status not in (BookingStatus.PENDING, BookingStatus.CONFIRMED):
            raise InvalidStateTransitionException(
                f"Невозможно отменить бронирование в статусе {self.status.value}"
            )

        released = self.rooms_booked if self.holds_inventory else 0
        self.status = BookingStatus.CANCELLED
        self.updated_at = now()
        self._domain_events.append(
            BookingCancelled(booking_id=self.id, released_rooms=released)
        )

    def reschedule(
        self,
        period: DateRange,
        guests: int,
        rooms_booked: int,
        final_price: Decimal,
    ) -> None:
        """Меняет даты и состав бронирования."""
        if self.status == BookingStatus.CANCELLED:
            raise InvalidStateTransitionException(
                "Невозможно изменить отмененное бронирование"
            )

        previous_period = self.period
        self.period = period
        self.guests = guests
        self.rooms_booked = rooms_booked
        self.final_price = final_price
        self.updated_at = now()
        self._domain_events.append(
            BookingUpdated(
                booking_id=self.id,
                previous_period=previous_period,
                period=period,
                rooms_booked=rooms_booked,
            )
        )

    @classmethod
    def create(
        cls,
        room: Room,
        user_id: EntityId,
        period: DateRange,
        guests: int,
        rooms_booked: int,
    ) -> "Booking":
        """Создает новое бронирование в статусе pending."""
        BookingPolicy.validate_request(room, guests, rooms_booked)

        booking = cls(
            room_id=room.id,
            hotel_id=room.hotel_id,
            user_id=user_id,
            period=period,
            guests=guests,
            rooms_booked=rooms_booked,
            final_price=BookingPolicy.flat_price(room, period, rooms_booked),
        )

        booking._domain_events.append(
            BookingCreated(
                booking_id=booking.id,
                room_id=room.id,
                user_id=user_id,
                period=period,
                rooms_booked=rooms_booked,
            )
        )

        return booking


class BookingPolicy:
    """Политики и бизнес-правила для бронирований."""

    @staticmethod
    def validate_request(room: Room, guests: int, rooms_booked: int) -> None:
        """Проверяет количества в заявке до любых изменений инвентаря."""
        if rooms_booked < 1:
            raise InvalidInputException("Нужно забронировать хотя бы один номер")

        if guests < 1:
            raise InvalidInputException("В бронировании должен быть хотя бы один гость")

        if rooms_booked > room.total_rooms:
            raise InvalidInputException(
                f"В категории всего {room.total_rooms} номеров, запрошено {rooms_booked}"
            )

        if guests > room.capacity * rooms_booked:
            raise InvalidInputException(
                f"Превышена вместимость: {rooms_booked} номер(ов) "
                f"по {room.capacity} гостя"
            )

    @staticmethod
    def flat_price(room: Room, period: DateRange, rooms_booked: int) -> Decimal:
        """Цена брони: база × ночи × номера, без правил ценообразования."""
        return room.base_price * period.nights * rooms_booked


class BookingService:
    """Доменный сервис для проверки доступности и удержания инвентаря броней."""

    def __init__(self, ledger: AvailabilityLedger):
        self.ledger = ledger

    @staticmethod
    def hold(booking: Booking, batch: Optional[InventoryBatch] = None) -> InventoryBatch:
        """Добавляет в пакет занятие номеров брони на каждую ночь."""
        if batch is None:
            batch = InventoryBatch()
        return batch.add_stay(booking.room_id, booking.period, booking.rooms_booked)

    @staticmethod
    def release(
        booking: Booking, batch: Optional[InventoryBatch] = None
    ) -> InventoryBatch:
        """Добавляет в пакет возврат номеров брони, если бронь их держит."""
        if batch is None:
            batch = InventoryBatch()
        if booking.holds_inventory:
            batch.add_stay(booking.room_id, booking.period, -booking.rooms_booked)
        return batch

    def is_room_available(
        self,
        room_id: EntityId,
        period: DateRange,
        exclude_booking: Optional[Booking] = None,
    ) -> bool:
        """Проверяет доступность по Ledger'у.

        Номера исключенной брони считаются уже освобожденными.
        """
        batch = InventoryBatch()
        if exclude_booking is not None and exclude_booking.room_id == room_id:
            batch = self.release(exclude_booking)
        return self.ledger.is_available_for_range(room_id, period, pending=batch)
