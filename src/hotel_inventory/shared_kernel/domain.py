"""
Основные доменные типы и утилиты общего ядра.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Iterator, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Общие типы идентификаторов
EntityId = UUID


def generate_id() -> UUID:
    """Генерирует новый UUID."""
    return uuid4()


class DateRange(BaseModel):
    """Полуоткрытый диапазон дат проживания [check_in, check_out)."""

    model_config = ConfigDict(frozen=True)

    check_in: date
    check_out: date

    @model_validator(mode="after")
    def check_out_after_check_in(self) -> "DateRange":
        if self.check_out <= self.check_in:
            raise ValueError("Дата выезда должна быть позже даты заезда")
        return self

    @property
    def nights(self) -> int:
        """Количество ночей в бронировании."""
        return (self.check_out - self.check_in).days

    def dates(self) -> Iterator[date]:
        """Перебирает ночи диапазона: дата выезда не входит."""
        current = self.check_in
        while current < self.check_out:
            yield current
            current += timedelta(days=1)

    def contains(self, day: date) -> bool:
        return self.check_in <= day < self.check_out

    def overlaps(self, other: "DateRange") -> bool:
        return self.check_in < other.check_out and other.check_in < self.check_out


class ClosedDateRange(BaseModel):
    """Закрытый диапазон дат [start, end], например для блокировки номера."""

    model_config = ConfigDict(frozen=True)

    start: date
    end: date

    @model_validator(mode="after")
    def end_not_before_start(self) -> "ClosedDateRange":
        if self.end < self.start:
            raise ValueError("Дата окончания не может быть раньше даты начала")
        return self

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1

    def dates(self) -> Iterator[date]:
        current = self.start
        while current <= self.end:
            yield current
            current += timedelta(days=1)

    def covers(self, day: date) -> bool:
        return self.start <= day <= self.end


class Hotel(BaseModel):
    """Отель (снимок из внешнего каталога)."""

    id: EntityId = Field(default_factory=generate_id)
    name: str = ""


class Room(BaseModel):
    """Категория номеров отеля (снимок из внешнего каталога)."""

    id: EntityId = Field(default_factory=generate_id)
    hotel_id: EntityId
    capacity: int = Field(..., gt=0)  # Гостей на один номер
    base_price: Decimal = Field(..., ge=0)  # Базовая цена за ночь
    total_rooms: int = Field(..., ge=0)  # Сколько физических номеров этой категории


class DomainEvent(BaseModel):
    """Базовый класс для всех доменных событий."""

    event_id: UUID = Field(default_factory=uuid4)
    occurred_on: datetime = Field(default_factory=datetime.now)
    event_type: str


class BookingStatus(str, Enum):
    """Статусы бронирования."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


# Общие исключения
class DomainException(Exception):
    """Базовое исключение для доменных ошибок."""

    pass


class EntityNotFoundException(DomainException):
    """Сущность не найдена."""

    pass


class HotelNotFoundException(EntityNotFoundException):
    pass


class RoomNotFoundException(EntityNotFoundException):
    pass


class BookingNotFoundException(EntityNotFoundException):
    pass


class PricingRuleNotFoundException(EntityNotFoundException):
    pass


class ConcurrencyException(DomainException):
    """Исключение при конфликте версий."""

    pass


class BusinessRuleValidationException(DomainException):
    """Исключение при нарушении бизнес-правил."""

    pass


class InvalidInputException(BusinessRuleValidationException):
    """Некорректные входные данные: количества, перевернутые диапазоны."""

    pass


class DuplicatePricingRuleException(InvalidInputException):
    """Правило такого типа уже действует в отеле на эти даты."""

    pass


class CapacityExceededException(BusinessRuleValidationException):
    """Счетчик доступных номеров вышел бы за пределы [0, total_rooms]."""

    pass


class UnavailableException(BusinessRuleValidationException):
    """На одну из ночей диапазона нет свободных номеров."""

    pass


class InvalidStateTransitionException(BusinessRuleValidationException):
    """Недопустимый переход статуса бронирования."""

    pass


def ensure_stay(check_in: Optional[date], check_out: Optional[date]) -> DateRange:
    """Строит DateRange, превращая перевернутый диапазон в InvalidInputException."""
    if check_in is None or check_out is None or check_out <= check_in:
        raise InvalidInputException(
            f"Некорректные даты заезда/выезда: {check_in} - {check_out}"
        )
    return DateRange(check_in=check_in, check_out=check_out)


def ensure_window(start: Optional[date], end: Optional[date]) -> ClosedDateRange:
    """Строит ClosedDateRange, превращая перевернутый диапазон в InvalidInputException."""
    if start is None or end is None or end < start:
        raise InvalidInputException(f"Некорректный период: {start} - {end}")
    return ClosedDateRange(start=start, end=end)


# Общие утилиты
def now() -> datetime:
    """Возвращает текущую дату и время."""
    return datetime.now()


def today() -> date:
    """Возвращает текущую дату."""
    return date.today()
