"""
Инфраструктура общего ядра: логирование и in-memory каталог.
"""

import logging
from typing import Any, Dict, List, Optional

from .domain import (
    EntityId,
    Hotel,
    HotelNotFoundException,
    Room,
    RoomNotFoundException,
)
from .interfaces import IHotelRepository, ILogger, IRoomRepository


def configure_logging(settings) -> None:
    """Настраивает корневой логгер по настройкам приложения."""
    level = getattr(logging, str(settings.log_level).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format=settings.log_format,
        datefmt="%Y-%m-%d %H:%M:%S",
    )


class StandardLogger(ILogger):
    """Реализация ILogger поверх модуля logging.

    Контекст из kwargs дописывается к сообщению парами key=value.
    """

    def __init__(self, name: str = "hotel_inventory"):
        self._logger = logging.getLogger(name)

    @staticmethod
    def _render(message: str, context: Dict[str, Any]) -> str:
        if not context:
            return message
        pairs = " ".join(f"{key}={value}" for key, value in context.items())
        return f"{message} [{pairs}]"

    def info(self, message: str, **kwargs: Any) -> None:
        self._logger.info(self._render(message, kwargs))

    def error(self, message: str, **kwargs: Any) -> None:
        self._logger.error(self._render(message, kwargs))

    def warning(self, message: str, **kwargs: Any) -> None:
        self._logger.warning(self._render(message, kwargs))

    def debug(self, message: str, **kwargs: Any) -> None:
        if self._logger.isEnabledFor(logging.DEBUG):
            self._logger.debug(self._render(message, kwargs))


class InMemoryHotelRepository(IHotelRepository):
    """Реализация репозитория отелей в памяти."""

    def __init__(self, hotels: Optional[List[Hotel]] = None):
        self._hotels: Dict[EntityId, Hotel] = {}
        for hotel in hotels or []:
            self.add(hotel)

    def add(self, hotel: Hotel) -> None:
        self._hotels[hotel.id] = hotel

    def get_by_id(self, hotel_id: EntityId) -> Hotel:
        if hotel_id not in self._hotels:
            raise HotelNotFoundException(f"Отель {hotel_id} не найден")
        return self._hotels[hotel_id]

    def exists(self, hotel_id: EntityId) -> bool:
        return hotel_id in self._hotels


class InMemoryRoomRepository(IRoomRepository):
    """Реализация репозитория номеров в памяти."""

    def __init__(self, rooms: Optional[List[Room]] = None):
        self._rooms: Dict[EntityId, Room] = {}
        for room in rooms or []:
            self.add(room)

    def add(self, room: Room) -> None:
        self._rooms[room.id] = room

    def remove(self, room_id: EntityId) -> None:
        self._rooms.pop(room_id, None)

    def get_by_id(self, room_id: EntityId) -> Room:
        if room_id not in self._rooms:
            raise RoomNotFoundException(f"Номер {room_id} не найден")
        return self._rooms[room_id]

    def find_by_hotel(self, hotel_id: EntityId) -> List[Room]:
        return [room for room in self._rooms.values() if room.hotel_id == hotel_id]
