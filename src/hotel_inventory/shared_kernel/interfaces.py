"""
Интерфейсы (порты) общего ядра.

Каталог отелей и номеров принадлежит внешнему контексту, ядро только
читает из него снимки.
"""

from __future__ import annotations

from typing import Any, List, Protocol

from .domain import EntityId, Hotel, Room


class ILogger(Protocol):
    """Интерфейс для логгера."""

    def info(self, message: str, **kwargs: Any) -> None: ...
    def error(self, message: str, **kwargs: Any) -> None: ...
    def warning(self, message: str, **kwargs: Any) -> None: ...
    def debug(self, message: str, **kwargs: Any) -> None: ...


class IHotelRepository(Protocol):
    """Интерфейс репозитория отелей."""

    def get_by_id(self, hotel_id: EntityId) -> Hotel: ...
    def exists(self, hotel_id: EntityId) -> bool: ...


class IRoomRepository(Protocol):
    """Интерфейс репозитория номеров."""

    def get_by_id(self, room_id: EntityId) -> Room: ...
    def find_by_hotel(self, hotel_id: EntityId) -> List[Room]: ...
