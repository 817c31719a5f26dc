"""
Интерфейсы (порты) для контекста доступности.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, ContextManager, Iterable, List, Optional, Protocol, Tuple

from ..shared_kernel import EntityId

if TYPE_CHECKING:
    from .domain import AvailabilityRecord


class IAvailabilityRepository(Protocol):
    """Интерфейс хранилища записей доступности.

    Хранилище разреженное: запись есть только у затронутых пар (номер, дата).
    """

    def get(self, room_id: EntityId, day: date) -> Optional[AvailabilityRecord]: ...
    def save_many(self, records: Iterable[AvailabilityRecord]) -> None: ...
    def find_by_room(self, room_id: EntityId) -> List[AvailabilityRecord]: ...
    def delete_for_room(self, room_id: EntityId) -> int: ...
    def locked(self, keys: Iterable[Tuple[EntityId, date]]) -> ContextManager[None]: ...


class IBookedRoomsCounter(Protocol):
    """Сколько номеров занято действующими бронями на дату."""

    def rooms_booked_on(self, room_id: EntityId, day: date) -> int: ...
