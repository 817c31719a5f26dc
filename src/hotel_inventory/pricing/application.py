"""
Прикладной слой контекста ценообразования.

Содержит DTO, расчет/симуляцию цены и управление правилами отеля.
"""

import datetime as dt
from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel

from ..shared_kernel import (
    EntityId,
    IHotelRepository,
    ILogger,
    StandardLogger,
    ensure_stay,
)
from .domain import (
    PricePoint,
    PriceQuote,
    PricingEngine,
    PricingRule,
    PricingRulePolicy,
    RuleType,
)
from .interfaces import IPricingRuleRepository

# DTO для входящих данных


class PriceSimulationRequest(BaseModel):
    """Запрос на симуляцию цены по ночам."""

    room_id: EntityId
    check_in: date
    check_out: date


class PricingRuleRequest(BaseModel):
    """Запрос на создание или изменение правила."""

    hotel_id: EntityId
    rule_type: RuleType
    rule_value: int
    start_date: Optional[date] = None
    end_date: Optional[date] = None


# DTO для исходящих данных


class PriceCalculationDTO(BaseModel):
    """DTO расчета цены проживания."""

    room_id: EntityId
    check_in: date
    check_out: date
    base_price: Decimal
    final_price: Decimal
    applied_rule_ids: List[EntityId]

    @classmethod
    def from_domain(cls, quote: PriceQuote) -> "PriceCalculationDTO":
        """Создает DTO из доменной модели."""
        return cls(
            room_id=quote.room_id,
            check_in=quote.check_in,
            check_out=quote.check_out,
            base_price=quote.base_price,
            final_price=quote.final_price,
            applied_rule_ids=list(quote.applied_rule_ids),
        )


class PriceSimulationDTO(BaseModel):
    """DTO цены одной ночи."""

    date: dt.date
    price: Decimal
    applied_rule_ids: List[EntityId]

    @classmethod
    def from_domain(cls, point: PricePoint) -> "PriceSimulationDTO":
        return cls(
            date=point.date,
            price=point.price,
            applied_rule_ids=list(point.applied_rule_ids),
        )


class PricingRuleDTO(BaseModel):
    """DTO правила ценообразования."""

    id: EntityId
    hotel_id: EntityId
    rule_type: RuleType
    rule_value: int
    start_date: Optional[date]
    end_date: Optional[date]

    @classmethod
    def from_domain(cls, rule: PricingRule) -> "PricingRuleDTO":
        return cls(
            id=rule.id,
            hotel_id=rule.hotel_id,
            rule_type=rule.rule_type,
            rule_value=rule.rule_value,
            start_date=rule.start_date,
            end_date=rule.end_date,
        )


# Сервисы приложения


class PricingApplicationService:
    """Сервис приложения для расчета цен."""

    def __init__(self, engine: PricingEngine):
        """Инициализирует сервис."""
        self._engine = engine

    def calculate_price(
        self, room_id: EntityId, check_in: date, check_out: date
    ) -> PriceCalculationDTO:
        """Рассчитывает цену проживания с учетом правил отеля."""
        period = ensure_stay(check_in, check_out)
        return PriceCalculationDTO.from_domain(
            self._engine.price_for_range(room_id, period)
        )

    def simulate_pricing(
        self, request: PriceSimulationRequest
    ) -> List[PriceSimulationDTO]:
        """Возвращает цену каждой ночи [check_in, check_out)."""
        period = ensure_stay(request.check_in, request.check_out)
        return [
            PriceSimulationDTO.from_domain(point)
            for point in self._engine.simulate(request.room_id, period)
        ]


class PricingRuleApplicationService:
    """Сервис приложения для управления правилами ценообразования."""

    def __init__(
        self,
        rule_repository: IPricingRuleRepository,
        hotel_repository: IHotelRepository,
        logger: Optional[ILogger] = None,
    ):
        """Инициализирует сервис."""
        self._rules = rule_repository
        self._hotels = hotel_repository
        self._logger = logger or StandardLogger(__name__)

    def create_rule(self, request: PricingRuleRequest) -> PricingRuleDTO:
        """Создает правило для отеля."""
        hotel = self._hotels.get_by_id(request.hotel_id)
        rule = self._build_rule(request, hotel_id=hotel.id)

        PricingRulePolicy.ensure_no_conflict(rule, self._rules.find_by_hotel(hotel.id))
        self._rules.add(rule)

        self._logger.info(
            "Правило создано",
            rule_id=rule.id,
            hotel_id=rule.hotel_id,
            rule_type=rule.rule_type.value,
            rule_value=rule.rule_value,
        )
        return PricingRuleDTO.from_domain(rule)

    def update_rule(
        self, rule_id: EntityId, request: PricingRuleRequest
    ) -> PricingRuleDTO:
        """Изменяет тип, значение и даты правила; отель правила не меняется."""
        existing = self._rules.get_by_id(rule_id)
        rule = self._build_rule(request, hotel_id=existing.hotel_id, rule_id=existing.id)

        PricingRulePolicy.ensure_no_conflict(
            rule, self._rules.find_by_hotel(existing.hotel_id)
        )
        self._rules.update(rule)

        self._logger.info("Правило изменено", rule_id=rule.id)
        return PricingRuleDTO.from_domain(rule)

    def delete_rule(self, rule_id: EntityId) -> None:
        self._rules.delete(rule_id)
        self._logger.info("Правило удалено", rule_id=rule_id)

    def get_rule(self, rule_id: EntityId) -> PricingRuleDTO:
        return PricingRuleDTO.from_domain(self._rules.get_by_id(rule_id))

    def list_rules(self, hotel_id: Optional[EntityId] = None) -> List[PricingRuleDTO]:
        """Возвращает правила отеля или все правила."""
        rules = (
            self._rules.find_by_hotel(hotel_id)
            if hotel_id is not None
            else self._rules.list_all()
        )
        return [
            PricingRuleDTO.from_domain(rule)
            for rule in sorted(rules, key=PricingRule.sort_key)
        ]

    @staticmethod
    def _build_rule(
        request: PricingRuleRequest,
        hotel_id: EntityId,
        rule_id: Optional[EntityId] = None,
    ) -> PricingRule:
        PricingRulePolicy.validate_definition(
            request.rule_type, request.start_date, request.end_date
        )
        fields = dict(
            hotel_id=hotel_id,
            rule_type=request.rule_type,
            rule_value=PricingRulePolicy.normalize_value(
                request.rule_type, request.rule_value
            ),
            start_date=request.start_date,
            end_date=request.end_date,
        )
        if rule_id is not None:
            fields["id"] = rule_id
        return PricingRule(**fields)
