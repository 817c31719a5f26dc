"""
Прикладной слой контекста доступности.

Содержит DTO и сервис приложения для запросов доступности,
изменения инвентаря и блокировки дат.
"""

import datetime as dt
from datetime import date
from typing import List, Optional

from pydantic import BaseModel

from ..shared_kernel import (
    EntityId,
    ILogger,
    StandardLogger,
    ensure_stay,
    ensure_window,
)
from .domain import AvailabilityLedger, AvailabilityRecord

# DTO для входящих данных


class UpdateInventoryRequest(BaseModel):
    """Запрос на изменение инвентаря на дату."""

    date: dt.date
    rooms_to_book: int  # Отрицательное значение освобождает номера


class BlockRoomRequest(BaseModel):
    """Запрос на блокировку/разблокировку дат (обе границы включительно)."""

    start_date: date
    end_date: date


# DTO для исходящих данных


class AvailabilityDTO(BaseModel):
    """DTO остатка номеров на дату."""

    room_id: EntityId
    date: dt.date
    available_rooms: int

    @classmethod
    def from_domain(cls, record: AvailabilityRecord) -> "AvailabilityDTO":
        """Создает DTO из доменной модели."""
        return cls(
            room_id=record.room_id,
            date=record.date,
            available_rooms=record.available_rooms,
        )


class AvailabilityApplicationService:
    """Сервис приложения для работы с доступностью номеров."""

    def __init__(self, ledger: AvailabilityLedger, logger: Optional[ILogger] = None):
        """Инициализирует сервис."""
        self._ledger = ledger
        self._logger = logger or StandardLogger(__name__)

    def is_room_available(self, room_id: EntityId, day: date) -> bool:
        """Проверяет доступность номера на дату."""
        return self._ledger.is_available(room_id, day)

    def is_room_available_for_range(
        self, room_id: EntityId, check_in: date, check_out: date
    ) -> bool:
        """Проверяет доступность номера на каждую ночь [check_in, check_out)."""
        period = ensure_stay(check_in, check_out)
        return self._ledger.is_available_for_range(room_id, period)

    def update_inventory(self, room_id: EntityId, request: UpdateInventoryRequest) -> None:
        """Занимает (или освобождает) номера на дату."""
        self._logger.debug(
            "Изменение инвентаря",
            room_id=room_id,
            date=request.date,
            delta=request.rooms_to_book,
        )
        self._ledger.adjust_inventory(room_id, request.date, request.rooms_to_book)

    def block_room_dates(self, room_id: EntityId, request: BlockRoomRequest) -> None:
        """Закрывает продажу номера на период."""
        window = ensure_window(request.start_date, request.end_date)
        self._ledger.block(room_id, window)

    def unblock_room_dates(self, room_id: EntityId, request: BlockRoomRequest) -> None:
        """Открывает продажу номера на период."""
        window = ensure_window(request.start_date, request.end_date)
        self._ledger.unblock(room_id, window)

    def get_hotel_availability_ratio(
        self, hotel_id: EntityId, start: date, end: date
    ) -> float:
        return self._ledger.hotel_availability_ratio(hotel_id, start, end)

    def list_availability(
        self, room_id: EntityId, start: date, end: date
    ) -> List[AvailabilityDTO]:
        """Возвращает остатки номера на каждую дату [start, end]."""
        window = ensure_window(start, end)
        return [
            AvailabilityDTO.from_domain(record)
            for record in self._ledger.list_availability(room_id, window)
        ]

    def forget_room(self, room_id: EntityId) -> int:
        return self._ledger.forget_room(room_id)
