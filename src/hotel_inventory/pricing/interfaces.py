"""
Интерфейсы (порты) для контекста ценообразования.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, List, Protocol

from ..shared_kernel import EntityId

if TYPE_CHECKING:
    from .domain import PricingRule


class IPricingRuleRepository(Protocol):
    """Интерфейс репозитория правил ценообразования."""

    def add(self, rule: PricingRule) -> None: ...
    def update(self, rule: PricingRule) -> None: ...
    def delete(self, rule_id: EntityId) -> None: ...
    def get_by_id(self, rule_id: EntityId) -> PricingRule: ...
    def list_all(self) -> List[PricingRule]: ...
    def find_by_hotel(self, hotel_id: EntityId) -> List[PricingRule]: ...
    def find_by_hotel_and_range(
        self, hotel_id: EntityId, start: date, end: date
    ) -> List[PricingRule]: ...


class IAvailabilityRatioProvider(Protocol):
    """Доля свободных номеров отеля; реализуется Ledger'ом доступности."""

    def hotel_availability_ratio(
        self, hotel_id: EntityId, start: date, end: date
    ) -> float: ...
