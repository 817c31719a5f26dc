"""
Доменная модель контекста доступности.

Содержит учет свободных номеров по датам (Ledger), пакет отложенных
изменений инвентаря и доменный сервис, который применяет их атомарно.
"""

import datetime as dt
from datetime import date
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from pydantic import BaseModel, Field

from ..shared_kernel import (
    CapacityExceededException,
    ClosedDateRange,
    DateRange,
    EntityId,
    ILogger,
    InvalidInputException,
    IRoomRepository,
    Room,
    StandardLogger,
)
from .interfaces import IAvailabilityRepository, IBookedRoomsCounter

LedgerKey = Tuple[EntityId, date]


class AvailabilityRecord(BaseModel):
    """Количество свободных номеров категории на конкретную дату."""

    room_id: EntityId
    date: dt.date
    available_rooms: int = Field(..., ge=0)

    @property
    def key(self) -> LedgerKey:
        return (self.room_id, self.date)


class InventoryBatch:
    """Пакет отложенных изменений инвентаря.

    Положительная дельта занимает номера, отрицательная освобождает.
    Дельты по одному ключу (номер, дата) складываются.
    """

    def __init__(self) -> None:
        self._deltas: Dict[LedgerKey, int] = {}

    def add(self, room_id: EntityId, day: date, delta: int) -> "InventoryBatch":
        key = (room_id, day)
        self._deltas[key] = self._deltas.get(key, 0) + delta
        return self

    def add_stay(
        self, room_id: EntityId, period: DateRange, delta: int
    ) -> "InventoryBatch":
        """Добавляет дельту на каждую ночь проживания."""
        for day in period.dates():
            self.add(room_id, day, delta)
        return self

    def delta_for(self, room_id: EntityId, day: date) -> int:
        return self._deltas.get((room_id, day), 0)

    def keys(self) -> List[LedgerKey]:
        """Ключи с ненулевой дельтой в порядке захвата блокировок."""
        return sorted(key for key, delta in self._deltas.items() if delta != 0)

    def items(self) -> Iterator[Tuple[LedgerKey, int]]:
        for key in self.keys():
            yield key, self._deltas[key]

    def clear(self) -> None:
        self._deltas.clear()

    def __bool__(self) -> bool:
        return bool(self.keys())

    def __len__(self) -> int:
        return len(self.keys())


class AvailabilityLedger:
    """Доменный сервис учета доступности номеров."""

    def __init__(
        self,
        availability_repository: IAvailabilityRepository,
        room_repository: IRoomRepository,
        booked_rooms_counter: Optional[IBookedRoomsCounter] = None,
        logger: Optional[ILogger] = None,
    ):
        self.availability_repository = availability_repository
        self.room_repository = room_repository
        self.booked_rooms_counter = booked_rooms_counter
        self._logger = logger or StandardLogger(__name__)

    def available_rooms(self, room_id: EntityId, day: date) -> int:
        """Свободные номера на дату; отсутствие записи означает total_rooms."""
        room = self.room_repository.get_by_id(room_id)
        return self._available_on(room, day)

    def is_available(
        self,
        room_id: EntityId,
        day: date,
        pending: Optional[InventoryBatch] = None,
    ) -> bool:
        """Проверяет, есть ли на дату хотя бы один свободный номер.

        pending: еще не примененный пакет, который нужно учесть
        (например, освобождение собственной брони при ее изменении).
        """
        room = self.room_repository.get_by_id(room_id)
        pending_delta = pending.delta_for(room_id, day) if pending is not None else 0
        record = self.availability_repository.get(room_id, day)

        if record is None and pending_delta == 0:
            return True

        current = record.available_rooms if record is not None else room.total_rooms
        return current - pending_delta > 0

    def is_available_for_range(
        self,
        room_id: EntityId,
        period: DateRange,
        pending: Optional[InventoryBatch] = None,
    ) -> bool:
        """Номер доступен, если свободен на каждую ночь [check_in, check_out)."""
        return all(
            self.is_available(room_id, day, pending=pending) for day in period.dates()
        )

    def adjust_inventory(self, room_id: EntityId, day: date, delta: int) -> None:
        """Уменьшает число свободных номеров на delta (отрицательная освобождает)."""
        self.apply(InventoryBatch().add(room_id, day, delta))

    def apply(
        self,
        batch: InventoryBatch,
        on_validated: Optional[Callable[[], None]] = None,
    ) -> None:
        """Применяет пакет изменений целиком или не применяет ничего.

        Все затронутые ключи блокируются в отсортированном порядке, новые
        значения проверяются до записи первого из них.

        on_validated вызывается под теми же блокировками после проверки и до
        записи; если он падает, Ledger не меняется.
        """
        keys = batch.keys()
        if not keys:
            if on_validated is not None:
                on_validated()
            return

        rooms: Dict[EntityId, Room] = {}
        for room_id, _ in keys:
            if room_id not in rooms:
                rooms[room_id] = self.room_repository.get_by_id(room_id)

        with self.availability_repository.locked(keys):
            updated: List[AvailabilityRecord] = []
            for (room_id, day), delta in batch.items():
                room = rooms[room_id]
                new_value = self._available_on(room, day) - delta
                if new_value < 0:
                    raise CapacityExceededException(
                        f"Недостаточно свободных номеров на {day}: "
                        f"требуется {delta}, доступно {new_value + delta}"
                    )
                if new_value > room.total_rooms:
                    raise CapacityExceededException(
                        f"Свободных номеров на {day} стало бы больше, "
                        f"чем всего в категории ({room.total_rooms})"
                    )
                updated.append(
                    AvailabilityRecord(
                        room_id=room_id, date=day, available_rooms=new_value
                    )
                )
            if on_validated is not None:
                on_validated()
            self.availability_repository.save_many(updated)

        self._logger.info(
            "Изменения инвентаря применены", records=len(updated), rooms=len(rooms)
        )

    def block(self, room_id: EntityId, window: ClosedDateRange) -> None:
        """Закрывает продажу: available := 0 на каждую дату [start, end]."""
        self.room_repository.get_by_id(room_id)
        days = list(window.dates())
        keys = [(room_id, day) for day in days]

        with self.availability_repository.locked(keys):
            self.availability_repository.save_many(
                AvailabilityRecord(room_id=room_id, date=day, available_rooms=0)
                for day in days
            )

        self._logger.info(
            "Даты заблокированы", room_id=room_id, start=window.start, end=window.end
        )

    def unblock(self, room_id: EntityId, window: ClosedDateRange) -> None:
        """Открывает продажу, пересчитывая остаток по действующим броням.

        available := total_rooms - занято бронями, но не меньше нуля.
        Пересчет остается верным, даже если брони появились во время блокировки.
        """
        room = self.room_repository.get_by_id(room_id)
        days = list(window.dates())
        keys = [(room_id, day) for day in days]

        with self.availability_repository.locked(keys):
            self.availability_repository.save_many(
                AvailabilityRecord(
                    room_id=room_id,
                    date=day,
                    available_rooms=max(room.total_rooms - self._booked_on(room_id, day), 0),
                )
                for day in days
            )

        self._logger.info(
            "Даты разблокированы", room_id=room_id, start=window.start, end=window.end
        )

    def hotel_availability_ratio(
        self, hotel_id: EntityId, start: date, end: date
    ) -> float:
        """Средняя по дням доля свободных номеров отеля на [start, end).

        0.0 для отеля без номеров, 1.0 для пустого диапазона.
        """
        if end < start:
            raise InvalidInputException(f"Некорректный период: {start} - {end}")

        rooms = self.room_repository.find_by_hotel(hotel_id)
        total_rooms = sum(room.total_rooms for room in rooms)
        if total_rooms == 0:
            return 0.0

        if start == end:
            return 1.0

        ratios = [
            sum(self._available_on(room, day) for room in rooms) / total_rooms
            for day in DateRange(check_in=start, check_out=end).dates()
        ]
        return sum(ratios) / len(ratios)

    def list_availability(
        self, room_id: EntityId, window: ClosedDateRange
    ) -> List[AvailabilityRecord]:
        """Фактические остатки на каждую дату окна, включая неявные записи."""
        room = self.room_repository.get_by_id(room_id)
        return [
            AvailabilityRecord(
                room_id=room_id, date=day, available_rooms=self._available_on(room, day)
            )
            for day in window.dates()
        ]

    def forget_room(self, room_id: EntityId) -> int:
        """Удаляет записи номера; вызывается только при удалении номера из каталога."""
        removed = self.availability_repository.delete_for_room(room_id)
        self._logger.info("Записи доступности удалены", room_id=room_id, removed=removed)
        return removed

    def _available_on(self, room: Room, day: date) -> int:
        record = self.availability_repository.get(room.id, day)
        return record.available_rooms if record is not None else room.total_rooms

    def _booked_on(self, room_id: EntityId, day: date) -> int:
        if self.booked_rooms_counter is None:
            return 0
        return self.booked_rooms_counter.rooms_booked_on(room_id, day)
