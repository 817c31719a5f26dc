"""
Прикладной слой контекста бронирования.

Содержит сервис приложения, который проводит бронь по жизненному циклу
и в одной единице работы меняет и бронь, и учет доступности.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel

from ..config import Settings
from ..config import settings as default_settings
from ..shared_kernel import (
    BookingStatus,
    CapacityExceededException,
    EntityId,
    ILogger,
    InvalidStateTransitionException,
    StandardLogger,
    UnavailableException,
    ensure_stay,
)
from . import interfaces as ports
from .domain import Booking, BookingPolicy, BookingService

# DTO для входящих данных


class CreateBookingRequest(BaseModel):
    """Запрос на создание бронирования.

    Количества и даты проверяет домен, чтобы ошибки были доменными.
    """

    room_id: EntityId
    check_in: date
    check_out: date
    guests: int
    rooms_booked: int = 1


class UpdateBookingRequest(BaseModel):
    """Запрос на изменение бронирования."""

    check_in: date
    check_out: date
    guests: Optional[int] = None
    rooms_booked: Optional[int] = None


# DTO для исходящих данных


class BookingDTO(BaseModel):
    """DTO для представления бронирования."""

    id: EntityId
    user_id: EntityId
    room_id: EntityId
    hotel_id: EntityId
    check_in: date
    check_out: date
    guests: int
    rooms_booked: int
    final_price: Decimal
    status: BookingStatus
    created_at: datetime

    @classmethod
    def from_domain(cls, booking: Booking) -> "BookingDTO":
        """Создает DTO из доменной модели."""
        return cls(
            id=booking.id,
            user_id=booking.user_id,
            room_id=booking.room_id,
            hotel_id=booking.hotel_id,
            check_in=booking.period.check_in,
            check_out=booking.period.check_out,
            guests=booking.guests,
            rooms_booked=booking.rooms_booked,
            final_price=booking.final_price,
            status=booking.status,
            created_at=booking.created_at,
        )


# Сервисы приложения


class BookingApplicationService:
    """Сервис приложения для работы с бронированиями."""

    def __init__(
        self,
        uow: ports.IBookingUnitOfWork,
        settings: Optional[Settings] = None,
        logger: Optional[ILogger] = None,
    ):
        """Инициализирует сервис."""
        self._uow = uow
        self._settings = settings or default_settings
        self._logger = logger or StandardLogger(__name__)
        self._booking_service = BookingService(self._uow.ledger)

    def create_booking(
        self, user_id: EntityId, request: CreateBookingRequest
    ) -> BookingDTO:
        """Создает бронирование и, если включено, сразу подтверждает его."""
        try:
            with self._uow:
                room = self._uow.rooms.get_by_id(request.room_id)
                period = ensure_stay(request.check_in, request.check_out)

                booking = Booking.create(
                    room=room,
                    user_id=user_id,
                    period=period,
                    guests=request.guests,
                    rooms_booked=request.rooms_booked,
                )

                if not self._booking_service.is_room_available(room.id, period):
                    raise UnavailableException(
                        f"Номер {room.id} недоступен на {period.check_in} - {period.check_out}"
                    )

                if self._settings.auto_confirm_bookings:
                    booking.confirm()
                    BookingService.hold(booking, self._uow.inventory)

                self._uow.bookings.add(booking)
        except CapacityExceededException as e:
            # Последние номера успела занять параллельная бронь
            raise UnavailableException(str(e)) from e

        self._logger.info(
            "Бронирование создано",
            booking_id=booking.id,
            room_id=booking.room_id,
            status=booking.status.value,
            final_price=booking.final_price,
        )
        return BookingDTO.from_domain(booking)

    def confirm_booking(self, booking_id: EntityId) -> BookingDTO:
        """Подтверждает бронь и списывает номера на каждую ночь."""
        try:
            with self._uow:
                booking = self._uow.bookings.get_by_id(booking_id)
                booking.confirm()

                if not self._booking_service.is_room_available(
                    booking.room_id, booking.period
                ):
                    raise UnavailableException(
                        f"Номер {booking.room_id} недоступен на даты брони {booking.id}"
                    )

                BookingService.hold(booking, self._uow.inventory)
                self._uow.bookings.update(booking)
        except CapacityExceededException as e:
            raise UnavailableException(str(e)) from e

        self._logger.info("Бронирование подтверждено", booking_id=booking.id)
        return BookingDTO.from_domain(booking)

    def update_booking(
        self, booking_id: EntityId, request: UpdateBookingRequest
    ) -> BookingDTO:
        """Меняет даты и состав брони, перенося занятые номера на новый период."""
        try:
            with self._uow:
                booking = self._uow.bookings.get_by_id(booking_id)
                if booking.status == BookingStatus.CANCELLED:
                    raise InvalidStateTransitionException(
                        "Невозможно изменить отмененное бронирование"
                    )

                room = self._uow.rooms.get_by_id(booking.room_id)
                period = ensure_stay(request.check_in, request.check_out)
                guests = request.guests if request.guests is not None else booking.guests
                rooms_booked = (
                    request.rooms_booked
                    if request.rooms_booked is not None
                    else booking.rooms_booked
                )
                BookingPolicy.validate_request(room, guests, rooms_booked)

                if not self._booking_service.is_room_available(
                    room.id, period, exclude_booking=booking
                ):
                    raise UnavailableException(
                        f"Номер {room.id} недоступен на {period.check_in} - {period.check_out}"
                    )

                # Старый период освобождается и новый занимается одним пакетом
                BookingService.release(booking, self._uow.inventory)
                booking.reschedule(
                    period=period,
                    guests=guests,
                    rooms_booked=rooms_booked,
                    final_price=BookingPolicy.flat_price(room, period, rooms_booked),
                )
                if booking.holds_inventory:
                    BookingService.hold(booking, self._uow.inventory)

                self._uow.bookings.update(booking)
        except CapacityExceededException as e:
            raise UnavailableException(str(e)) from e

        self._logger.info(
            "Бронирование изменено",
            booking_id=booking.id,
            check_in=booking.period.check_in,
            check_out=booking.period.check_out,
        )
        return BookingDTO.from_domain(booking)

    def cancel_booking(self, booking_id: EntityId) -> BookingDTO:
        """Отменяет бронь; номера возвращаются, только если она была подтверждена."""
        with self._uow:
            booking = self._uow.bookings.get_by_id(booking_id)
            BookingService.release(booking, self._uow.inventory)
            booking.cancel()
            self._uow.bookings.update(booking)

        self._logger.info("Бронирование отменено", booking_id=booking.id)
        return BookingDTO.from_domain(booking)

    def get_booking(self, booking_id: EntityId) -> BookingDTO:
        """Возвращает информацию о бронировании."""
        booking = self._uow.bookings.get_by_id(booking_id)
        return BookingDTO.from_domain(booking)

    def list_bookings_for_hotel(self, hotel_id: EntityId) -> List[BookingDTO]:
        return [
            BookingDTO.from_domain(booking)
            for booking in self._uow.bookings.find_by_hotel(hotel_id)
        ]

    def list_all_bookings(
        self, status: Optional[BookingStatus] = None
    ) -> List[BookingDTO]:
        """Возвращает все бронирования, при необходимости с фильтром по статусу."""
        if status is not None:
            bookings = self._uow.bookings.find_by_status(status)
        else:
            bookings = self._uow.bookings.list_all()
        return [BookingDTO.from_domain(booking) for booking in bookings]

    def list_bookings_for_user(self, user_id: EntityId) -> List[BookingDTO]:
        return [
            BookingDTO.from_domain(booking)
            for booking in self._uow.bookings.find_by_user(user_id)
        ]

    def is_room_available(
        self,
        room_id: EntityId,
        check_in: date,
        check_out: date,
        exclude_booking_id: Optional[EntityId] = None,
    ) -> bool:
        """Проверяет доступность; номера исключенной брони считаются свободными."""
        room = self._uow.rooms.get_by_id(room_id)
        period = ensure_stay(check_in, check_out)

        exclude_booking = None
        if exclude_booking_id is not None:
            exclude_booking = self._uow.bookings.get_by_id(exclude_booking_id)

        return self._booking_service.is_room_available(
            room.id, period, exclude_booking=exclude_booking
        )
