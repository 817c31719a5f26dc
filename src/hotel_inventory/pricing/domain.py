"""
Доменная модель контекста ценообразования.

Содержит правила наценок/скидок, политику их согласованности
и движок, рассчитывающий цену проживания по ночам.
"""

import datetime as dt
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Callable, Iterable, List, Optional, Tuple

from pydantic import BaseModel, Field

from ..shared_kernel import (
    DateRange,
    DuplicatePricingRuleException,
    EntityId,
    ILogger,
    InvalidInputException,
    IRoomRepository,
    Room,
    StandardLogger,
    generate_id,
    today,
)
from .interfaces import IAvailabilityRatioProvider, IPricingRuleRepository

CENT = Decimal("0.01")
HUNDRED = Decimal(100)


class RuleType(str, Enum):
    """Типы правил ценообразования."""

    WEEKEND = "WEEKEND"
    PEAK = "PEAK"
    LAST_MINUTE = "LAST_MINUTE"
    SEASONAL = "SEASONAL"
    HOLIDAY = "HOLIDAY"
    DISCOUNT = "DISCOUNT"


# Правила-предикаты: действуют без дат, условие проверяется на каждую ночь
DATE_AGNOSTIC_TYPES = frozenset({RuleType.WEEKEND, RuleType.PEAK, RuleType.LAST_MINUTE})

RULE_ORDER = {rule_type: index for index, rule_type in enumerate(RuleType)}


class PricingRule(BaseModel):
    """Процентная корректировка базовой цены для отеля."""

    id: EntityId = Field(default_factory=generate_id)
    hotel_id: EntityId
    rule_type: RuleType
    rule_value: int  # Проценты; для DISCOUNT хранится отрицательным
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @property
    def is_date_agnostic(self) -> bool:
        return self.rule_type in DATE_AGNOSTIC_TYPES

    def covers(self, day: date) -> bool:
        """Попадает ли дата в [start_date, end_date] правила с датами."""
        if self.start_date is None or self.end_date is None:
            return False
        return self.start_date <= day <= self.end_date

    def overlaps(self, start: date, end: date) -> bool:
        if self.start_date is None or self.end_date is None:
            return False
        return self.start_date <= end and start <= self.end_date

    def sort_key(self) -> Tuple[int, str]:
        return (RULE_ORDER[self.rule_type], str(self.id))


class PriceQuote(BaseModel):
    """Результат расчета цены проживания."""

    room_id: EntityId
    check_in: date
    check_out: date
    base_price: Decimal
    final_price: Decimal
    applied_rule_ids: List[EntityId] = Field(default_factory=list)


class PricePoint(BaseModel):
    """Цена одной ночи при симуляции."""

    date: dt.date
    price: Decimal
    applied_rule_ids: List[EntityId] = Field(default_factory=list)


class PricingRulePolicy:
    """Политики и бизнес-правила для правил ценообразования."""

    @staticmethod
    def normalize_value(rule_type: RuleType, rule_value: int) -> int:
        """Скидка всегда хранится отрицательной."""
        if rule_type == RuleType.DISCOUNT:
            return -abs(rule_value)
        return rule_value

    @staticmethod
    def validate_definition(
        rule_type: RuleType, start_date: Optional[date], end_date: Optional[date]
    ) -> None:
        if rule_type in DATE_AGNOSTIC_TYPES:
            return

        if start_date is None or end_date is None:
            raise InvalidInputException(
                f"Для правила {rule_type.value} нужны даты начала и окончания"
            )
        if end_date < start_date:
            raise InvalidInputException(
                f"Дата окончания правила {rule_type.value} раньше даты начала"
            )

    @staticmethod
    def ensure_no_conflict(
        candidate: PricingRule, existing: Iterable[PricingRule]
    ) -> None:
        """Предикатные правила уникальны в отеле, правила с датами не пересекаются."""
        for rule in existing:
            if rule.id == candidate.id or rule.rule_type != candidate.rule_type:
                continue

            if candidate.is_date_agnostic:
                raise DuplicatePricingRuleException(
                    f"Правило {candidate.rule_type.value} уже есть у этого отеля"
                )

            if rule.overlaps(candidate.start_date, candidate.end_date):
                raise DuplicatePricingRuleException(
                    f"Правило {candidate.rule_type.value} с пересекающимися датами "
                    f"уже есть у этого отеля"
                )


class PricingEngine:
    """Доменный сервис расчета цены по правилам отеля.

    Цена ночи = база + сумма процентов сработавших правил от базы.
    Сумма по ночам округляется до копеек (half-up) один раз в конце.
    """

    def __init__(
        self,
        room_repository: IRoomRepository,
        rule_repository: IPricingRuleRepository,
        ratio_provider: IAvailabilityRatioProvider,
        clock: Callable[[], date] = today,
        peak_threshold: float = 0.20,
        last_minute_window_days: int = 3,
        logger: Optional[ILogger] = None,
    ):
        self.room_repository = room_repository
        self.rule_repository = rule_repository
        self.ratio_provider = ratio_provider
        self._clock = clock
        self._peak_threshold = peak_threshold
        self._last_minute_window_days = last_minute_window_days
        self._logger = logger or StandardLogger(__name__)

    def price_for_range(self, room_id: EntityId, period: DateRange) -> PriceQuote:
        """Рассчитывает цену проживания [check_in, check_out)."""
        room = self.room_repository.get_by_id(room_id)
        rules = self._rules_for(room.hotel_id, period)

        self._logger.debug(
            "Расчет цены",
            hotel_id=room.hotel_id,
            room_id=room.id,
            check_in=period.check_in,
            check_out=period.check_out,
            base_price=room.base_price,
            rules=len(rules),
        )

        total, applied = self._price_nights(room, period, rules)
        final_price = total.quantize(CENT, rounding=ROUND_HALF_UP)

        self._logger.info(
            "Цена рассчитана", room_id=room.id, nights=period.nights, final_price=final_price
        )
        return PriceQuote(
            room_id=room.id,
            check_in=period.check_in,
            check_out=period.check_out,
            base_price=room.base_price,
            final_price=final_price,
            applied_rule_ids=applied,
        )

    def simulate(self, room_id: EntityId, period: DateRange) -> List[PricePoint]:
        """Цена каждой ночи периода как отдельного проживания на одну ночь."""
        room = self.room_repository.get_by_id(room_id)
        rules = self._rules_for(room.hotel_id, period)

        points = []
        for day in period.dates():
            night = DateRange(check_in=day, check_out=day + timedelta(days=1))
            total, applied = self._price_nights(room, night, rules)
            points.append(
                PricePoint(
                    date=day,
                    price=total.quantize(CENT, rounding=ROUND_HALF_UP),
                    applied_rule_ids=applied,
                )
            )
        return points

    def _rules_for(self, hotel_id: EntityId, period: DateRange) -> List[PricingRule]:
        last_night = period.check_out - timedelta(days=1)
        agnostic = [
            rule
            for rule in self.rule_repository.find_by_hotel(hotel_id)
            if rule.is_date_agnostic
        ]
        ranged = [
            rule
            for rule in self.rule_repository.find_by_hotel_and_range(
                hotel_id, period.check_in, last_night
            )
            if not rule.is_date_agnostic
        ]

        unique = {rule.id: rule for rule in agnostic + ranged}
        return sorted(unique.values(), key=PricingRule.sort_key)

    def _price_nights(
        self, room: Room, period: DateRange, rules: List[PricingRule]
    ) -> Tuple[Decimal, List[EntityId]]:
        base = room.base_price
        is_last_minute = self._is_last_minute(period.check_in)
        applied: List[EntityId] = []
        total = Decimal(0)

        for day in period.dates():
            day_price = base
            for rule in rules:
                if rule.rule_value == 0 or not self._rule_applies(
                    rule, room.hotel_id, day, is_last_minute
                ):
                    continue
                day_price += base * Decimal(rule.rule_value) / HUNDRED
                if rule.id not in applied:
                    applied.append(rule.id)
            total += day_price

        return total, applied

    def _rule_applies(
        self, rule: PricingRule, hotel_id: EntityId, day: date, is_last_minute: bool
    ) -> bool:
        if rule.rule_type == RuleType.WEEKEND:
            return day.weekday() >= 5
        if rule.rule_type == RuleType.PEAK:
            ratio = self.ratio_provider.hotel_availability_ratio(
                hotel_id, day, day + timedelta(days=1)
            )
            return ratio < self._peak_threshold
        if rule.rule_type == RuleType.LAST_MINUTE:
            return is_last_minute
        return rule.covers(day)

    def _is_last_minute(self, check_in: date) -> bool:
        days_until = (check_in - self._clock()).days
        return 0 <= days_until <= self._last_minute_window_days
