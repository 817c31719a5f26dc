"""
Инфраструктурный слой контекста бронирования.

Содержит реализации репозиториев, шину событий и Unit of Work,
который атомарно фиксирует брони вместе с изменениями инвентаря.
"""

import threading
from datetime import date
from typing import Callable, Dict, List, Optional, Type

from ..availability.domain import AvailabilityLedger, InventoryBatch
from ..shared_kernel import (
    BookingNotFoundException,
    BookingStatus,
    ConcurrencyException,
    DomainEvent,
    EntityId,
    ILogger,
    IRoomRepository,
    StandardLogger,
)
from . import interfaces as ports
from .domain import Booking


class InMemoryBookingRepository(ports.IBookingRepository):
    """Реализация репозитория бронирований в памяти.

    Хранит и отдает копии, чтобы откат Unit of Work не оставлял следов.
    """

    def __init__(self) -> None:
        self._bookings: Dict[EntityId, Booking] = {}
        self._lock = threading.RLock()

    def get_by_id(self, booking_id: EntityId) -> Booking:
        with self._lock:
            if booking_id not in self._bookings:
                raise BookingNotFoundException(f"Бронирование {booking_id} не найдено")
            return self._bookings[booking_id].model_copy(deep=True)

    def add(self, booking: Booking) -> None:
        with self._lock:
            if booking.id in self._bookings:
                raise ValueError(f"Booking with id {booking.id} already exists")
            self._bookings[booking.id] = booking.model_copy(deep=True)

    def update(self, booking: Booking) -> None:
        with self._lock:
            if booking.id not in self._bookings:
                raise BookingNotFoundException(f"Бронирование {booking.id} не найдено")
            self.save_all([booking])

    def save_all(self, bookings: List[Booking]) -> None:
        """Сохраняет брони разом: конфликт версии любой из них отменяет все.

        Новые брони добавляются, у существующих версия должна совпадать
        с сохраненной и после записи увеличивается.
        """
        with self._lock:
            for booking in bookings:
                stored = self._bookings.get(booking.id)
                if stored is not None and stored.version != booking.version:
                    raise ConcurrencyException(
                        f"Бронирование {booking.id} было изменено параллельно "
                        f"(версия {booking.version}, сохранена {stored.version})"
                    )

            for booking in bookings:
                if booking.id in self._bookings:
                    booking.version += 1
                self._bookings[booking.id] = booking.model_copy(deep=True)

    def contains(self, booking_id: EntityId) -> bool:
        with self._lock:
            return booking_id in self._bookings

    def list_all(self) -> List[Booking]:
        with self._lock:
            bookings = [booking.model_copy(deep=True) for booking in self._bookings.values()]
        return sorted(bookings, key=lambda booking: booking.created_at)

    def find_by_user(self, user_id: EntityId) -> List[Booking]:
        return [booking for booking in self.list_all() if booking.user_id == user_id]

    def find_by_hotel(self, hotel_id: EntityId) -> List[Booking]:
        return [booking for booking in self.list_all() if booking.hotel_id == hotel_id]

    def find_by_status(self, status: BookingStatus) -> List[Booking]:
        return [booking for booking in self.list_all() if booking.status == status]

    def find_by_room(self, room_id: EntityId) -> List[Booking]:
        return [booking for booking in self.list_all() if booking.room_id == room_id]

    def rooms_booked_on(self, room_id: EntityId, day: date) -> int:
        """Сумма номеров подтвержденных броней, покрывающих дату."""
        with self._lock:
            return sum(
                booking.rooms_booked
                for booking in self._bookings.values()
                if booking.room_id == room_id
                and booking.holds_inventory
                and booking.covers(day)
            )


class StagedBookingRepository(ports.IBookingRepository):
    """Репозиторий в рамках Unit of Work: запись откладывается до commit."""

    def __init__(self, repository: InMemoryBookingRepository):
        self._repository = repository
        self._staged: Dict[EntityId, Booking] = {}

    @property
    def staged(self) -> List[Booking]:
        return list(self._staged.values())

    def discard(self) -> None:
        self._staged.clear()

    def flush(self) -> None:
        self._repository.save_all(self.staged)

    def add(self, booking: Booking) -> None:
        if booking.id in self._staged or self._repository.contains(booking.id):
            raise ValueError(f"Booking with id {booking.id} already exists")
        self._staged[booking.id] = booking

    def update(self, booking: Booking) -> None:
        if booking.id not in self._staged and not self._repository.contains(booking.id):
            raise BookingNotFoundException(f"Бронирование {booking.id} не найдено")
        self._staged[booking.id] = booking

    def get_by_id(self, booking_id: EntityId) -> Booking:
        if booking_id in self._staged:
            return self._staged[booking_id]
        return self._repository.get_by_id(booking_id)

    def list_all(self) -> List[Booking]:
        return self._repository.list_all()

    def find_by_user(self, user_id: EntityId) -> List[Booking]:
        return self._repository.find_by_user(user_id)

    def find_by_hotel(self, hotel_id: EntityId) -> List[Booking]:
        return self._repository.find_by_hotel(hotel_id)

    def find_by_status(self, status: BookingStatus) -> List[Booking]:
        return self._repository.find_by_status(status)

    def find_by_room(self, room_id: EntityId) -> List[Booking]:
        return self._repository.find_by_room(room_id)

    def rooms_booked_on(self, room_id: EntityId, day: date) -> int:
        return self._repository.rooms_booked_on(room_id, day)


class InMemoryEventBus(ports.IEventBus):
    """Реализация шины событий в памяти.

    Ошибки обработчиков (уведомления и т.п.) логируются и не прерывают операцию.
    """

    def __init__(self, logger: Optional[ILogger] = None):
        self._subscribers: Dict[Type[DomainEvent], list] = {}
        self._logger = logger or StandardLogger(__name__)

    def publish(self, event: DomainEvent) -> None:
        """Публикует событие."""
        event_type = type(event)
        if event_type not in self._subscribers:
            self._logger.debug(f"No subscribers for event type {event_type.__name__}")
            return

        self._logger.info(f"Publishing event: {event_type.__name__}", event_id=event.event_id)

        for handler in self._subscribers[event_type]:
            try:
                handler(event)
            except Exception as e:
                self._logger.error(
                    f"Error in event handler for {event_type.__name__}",
                    error=str(e),
                    event_id=event.event_id,
                )

    def subscribe(self, event_type: Type[DomainEvent], handler: Callable) -> None:
        """Подписывает обработчик на события указанного типа."""
        self._subscribers.setdefault(event_type, []).append(handler)
        self._logger.debug(f"Subscribed handler to {event_type.__name__} events")


class BookingUnitOfWork(ports.IBookingUnitOfWork):
    """Единица работы для контекста бронирования.

    commit: пакет инвентаря и брони фиксируются под одними блокировками,
    затем публикуются события броней. rollback отбрасывает все.
    Отложенные изменения хранятся отдельно для каждого потока.
    """

    def __init__(
        self,
        ledger: AvailabilityLedger,
        bookings_repo: InMemoryBookingRepository,
        rooms_repo: IRoomRepository,
        event_bus: Optional[ports.IEventBus] = None,
        logger: Optional[ILogger] = None,
    ):
        self._ledger = ledger
        self._repository = bookings_repo
        self._rooms = rooms_repo
        self._logger = logger or StandardLogger(__name__)
        self._event_bus = event_bus or InMemoryEventBus(self._logger)
        self._local = threading.local()

    @property
    def bookings(self) -> StagedBookingRepository:
        if not hasattr(self._local, "bookings"):
            self._local.bookings = StagedBookingRepository(self._repository)
        return self._local.bookings

    @property
    def rooms(self) -> IRoomRepository:
        return self._rooms

    @property
    def ledger(self) -> AvailabilityLedger:
        return self._ledger

    @property
    def inventory(self) -> InventoryBatch:
        """Изменения инвентаря, которые будут применены при commit."""
        if not hasattr(self._local, "inventory"):
            self._local.inventory = InventoryBatch()
        return self._local.inventory

    @property
    def event_bus(self) -> ports.IEventBus:
        return self._event_bus

    def commit(self) -> None:
        """Фиксирует все изменения.

        Брони сохраняются под блокировками дат Ledger'а, поэтому параллельный
        unblock видит либо и бронь, и списание, либо ни то, ни другое.
        Конфликт версии брони откатывает и изменения инвентаря.
        """
        self._ledger.apply(self.inventory, on_validated=self.bookings.flush)

        events: List[DomainEvent] = []
        for booking in self.bookings.staged:
            events.extend(booking.domain_events)
            booking.clear_events()

        self._reset()
        self._logger.info("BookingUnitOfWork committed", events=len(events))

        for event in events:
            self._event_bus.publish(event)

    def rollback(self) -> None:
        """Откатывает все изменения."""
        self._reset()
        self._logger.warning("BookingUnitOfWork rolled back")

    def _reset(self) -> None:
        self.bookings.discard()
        self._local.inventory = InventoryBatch()

    def __enter__(self) -> "BookingUnitOfWork":
        self._reset()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None:
            self.rollback()
            return False  # Пробрасываем исключение дальше

        try:
            self.commit()
        except Exception:
            self.rollback()
            raise
        return False
