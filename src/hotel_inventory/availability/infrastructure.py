"""
Инфраструктурный слой контекста доступности.

Хранилище записей в памяти с блокировками на уровне пары (номер, дата).
"""

import threading
from contextlib import contextmanager
from datetime import date
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from ..shared_kernel import EntityId
from . import interfaces as ports
from .domain import AvailabilityRecord, LedgerKey


class InMemoryAvailabilityRepository(ports.IAvailabilityRepository):
    """Разреженное хранилище доступности в памяти."""

    def __init__(self) -> None:
        self._records: Dict[LedgerKey, AvailabilityRecord] = {}
        self._locks: Dict[LedgerKey, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def get(self, room_id: EntityId, day: date) -> Optional[AvailabilityRecord]:
        record = self._records.get((room_id, day))
        return record.model_copy() if record is not None else None

    def save_many(self, records: Iterable[AvailabilityRecord]) -> None:
        # Сначала собираем пакет целиком, чтобы ошибка валидации не оставила частичную запись
        staged = {record.key: record.model_copy() for record in records}
        self._records.update(staged)

    def find_by_room(self, room_id: EntityId) -> List[AvailabilityRecord]:
        return sorted(
            (record.model_copy() for key, record in self._records.items() if key[0] == room_id),
            key=lambda record: record.date,
        )

    def delete_for_room(self, room_id: EntityId) -> int:
        """Удаляет записи и блокировки номера, возвращает число записей."""
        keys = [key for key in self._records if key[0] == room_id]
        for key in keys:
            del self._records[key]

        with self._registry_lock:
            for key in [key for key in self._locks if key[0] == room_id]:
                del self._locks[key]
        return len(keys)

    @contextmanager
    def locked(self, keys: Iterable[Tuple[EntityId, date]]) -> Iterator[None]:
        """Захватывает блокировки ключей в отсортированном порядке."""
        ordered = sorted(set(keys))
        with self._registry_lock:
            locks = [self._locks.setdefault(key, threading.Lock()) for key in ordered]

        acquired: List[threading.Lock] = []
        try:
            for lock in locks:
                lock.acquire()
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()

