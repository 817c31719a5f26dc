"""
Инфраструктурный слой контекста ценообразования.
"""

from datetime import date
from typing import Dict, List

from ..shared_kernel import EntityId, PricingRuleNotFoundException
from . import interfaces as ports
from .domain import PricingRule


class InMemoryPricingRuleRepository(ports.IPricingRuleRepository):
    """Реализация репозитория правил в памяти."""

    def __init__(self) -> None:
        self._rules: Dict[EntityId, PricingRule] = {}

    def add(self, rule: PricingRule) -> None:
        if rule.id in self._rules:
            raise ValueError(f"PricingRule with id {rule.id} already exists")
        self._rules[rule.id] = rule.model_copy()

    def update(self, rule: PricingRule) -> None:
        if rule.id not in self._rules:
            raise PricingRuleNotFoundException(f"Правило {rule.id} не найдено")
        self._rules[rule.id] = rule.model_copy()

    def delete(self, rule_id: EntityId) -> None:
        if rule_id not in self._rules:
            raise PricingRuleNotFoundException(f"Правило {rule_id} не найдено")
        del self._rules[rule_id]

    def get_by_id(self, rule_id: EntityId) -> PricingRule:
        if rule_id not in self._rules:
            raise PricingRuleNotFoundException(f"Правило {rule_id} не найдено")
        return self._rules[rule_id].model_copy()

    def list_all(self) -> List[PricingRule]:
        return [rule.model_copy() for rule in self._rules.values()]

    def find_by_hotel(self, hotel_id: EntityId) -> List[PricingRule]:
        return [
            rule.model_copy()
            for rule in self._rules.values()
            if rule.hotel_id == hotel_id
        ]

    def find_by_hotel_and_range(
        self, hotel_id: EntityId, start: date, end: date
    ) -> List[PricingRule]:
        """Правила с датами, пересекающиеся с [start, end]."""
        return [
            rule.model_copy()
            for rule in self._rules.values()
            if rule.hotel_id == hotel_id and rule.overlaps(start, end)
        ]
