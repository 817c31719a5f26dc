"""
Общее ядро (Shared Kernel) для учета номеров отеля.

Содержит общие типы данных и утилиты, используемые в различных ограниченных контекстах.
"""

from .domain import (
    BookingNotFoundException,
    BookingStatus,
    BusinessRuleValidationException,
    CapacityExceededException,
    ConcurrencyException,
    ClosedDateRange,
    DateRange,
    DomainEvent,
    # Исключения
    DomainException,
    DuplicatePricingRuleException,
    # Базовые типы
    EntityId,
    EntityNotFoundException,
    Hotel,
    HotelNotFoundException,
    InvalidInputException,
    InvalidStateTransitionException,
    PricingRuleNotFoundException,
    Room,
    RoomNotFoundException,
    UnavailableException,
    ensure_stay,
    ensure_window,
    generate_id,
    # Утилиты
    now,
    today,
)
from .infrastructure import (
    InMemoryHotelRepository,
    InMemoryRoomRepository,
    StandardLogger,
    configure_logging,
)
from .interfaces import IHotelRepository, ILogger, IRoomRepository

__all__ = [
    # Базовые типы
    "EntityId",
    "generate_id",
    "DateRange",
    "ClosedDateRange",
    "Hotel",
    "Room",
    "DomainEvent",
    # Перечисления
    "BookingStatus",
    # Исключения
    "DomainException",
    "EntityNotFoundException",
    "HotelNotFoundException",
    "RoomNotFoundException",
    "BookingNotFoundException",
    "PricingRuleNotFoundException",
    "ConcurrencyException",
    "BusinessRuleValidationException",
    "InvalidInputException",
    "DuplicatePricingRuleException",
    "CapacityExceededException",
    "UnavailableException",
    "InvalidStateTransitionException",
    # Порты и адаптеры
    "ILogger",
    "IHotelRepository",
    "IRoomRepository",
    "StandardLogger",
    "InMemoryHotelRepository",
    "InMemoryRoomRepository",
    "configure_logging",
    # Утилиты
    "ensure_stay",
    "ensure_window",
    "now",
    "today",
]
