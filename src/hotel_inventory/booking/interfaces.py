"""
Интерфейсы (порты) для контекста бронирования.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Protocol, Type, TypeVar

from ..availability.domain import AvailabilityLedger, InventoryBatch
from ..shared_kernel import BookingStatus, DomainEvent, EntityId, IRoomRepository

if TYPE_CHECKING:
    from .domain import Booking

T_Event = TypeVar("T_Event", bound=DomainEvent)


class IEventBus(Protocol):
    """Интерфейс для шины событий."""

    def publish(self, event: DomainEvent) -> None: ...
    def subscribe(
        self, event_type: Type[T_Event], handler: Callable[[T_Event], None]
    ) -> None: ...


class IBookingRepository(Protocol):
    """Интерфейс репозитория для бронирований."""

    def add(self, booking: Booking) -> None: ...
    def get_by_id(self, booking_id: EntityId) -> Booking: ...
    def update(self, booking: Booking) -> None: ...
    def list_all(self) -> List[Booking]: ...
    def find_by_user(self, user_id: EntityId) -> List[Booking]: ...
    def find_by_hotel(self, hotel_id: EntityId) -> List[Booking]: ...
    def find_by_status(self, status: BookingStatus) -> List[Booking]: ...
    def find_by_room(self, room_id: EntityId) -> List[Booking]: ...
    def rooms_booked_on(self, room_id: EntityId, day: date) -> int: ...


class IBookingUnitOfWork(Protocol):
    """Интерфейс Unit of Work для контекста Booking."""

    @property
    def bookings(self) -> IBookingRepository: ...
    @property
    def rooms(self) -> IRoomRepository: ...
    @property
    def ledger(self) -> AvailabilityLedger: ...
    @property
    def inventory(self) -> InventoryBatch: ...
    @property
    def event_bus(self) -> IEventBus: ...

    def __enter__(self) -> IBookingUnitOfWork: ...
    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> Optional[bool]: ...
    def commit(self) -> None: ...
    def rollback(self) -> None: ...
