"""
Тесты для контекста ценообразования.
"""

from datetime import date
from decimal import Decimal

import pytest

from hotel_inventory.pricing.application import (
    PriceSimulationRequest,
    PricingApplicationService,
    PricingRuleApplicationService,
    PricingRuleRequest,
)
from hotel_inventory.pricing.domain import PricingEngine, PricingRule, RuleType
from hotel_inventory.pricing.infrastructure import InMemoryPricingRuleRepository
from hotel_inventory.shared_kernel import (
    DateRange,
    DuplicatePricingRuleException,
    HotelNotFoundException,
    InMemoryHotelRepository,
    InMemoryRoomRepository,
    InvalidInputException,
    PricingRuleNotFoundException,
    Room,
    generate_id,
)

TODAY = date(2025, 6, 1)
SATURDAY = date(2025, 6, 7)
MONDAY = date(2025, 6, 9)


class FixedRatio:
    """Доля свободных номеров, одинаковая на любую дату."""

    def __init__(self, ratio: float = 1.0):
        self.ratio = ratio
        self.calls = 0

    def hotel_availability_ratio(self, hotel_id, start, end):
        self.calls += 1
        return self.ratio


@pytest.fixture
def rules():
    return InMemoryPricingRuleRepository()


@pytest.fixture
def ratio():
    return FixedRatio()


@pytest.fixture
def engine(room, rules, ratio):
    return PricingEngine(
        room_repository=InMemoryRoomRepository([room]),
        rule_repository=rules,
        ratio_provider=ratio,
        clock=lambda: TODAY,
    )


def add_rule(rules, hotel, rule_type, value, start=None, end=None):
    rule = PricingRule(
        hotel_id=hotel.id,
        rule_type=rule_type,
        rule_value=value,
        start_date=start,
        end_date=end,
    )
    rules.add(rule)
    return rule


class TestPricingEngine:
    """Тесты для движка расчета цены."""

    def test_no_rules_gives_base_times_nights(self, engine, room):
        quote = engine.price_for_range(
            room.id, DateRange(check_in=date(2025, 6, 10), check_out=date(2025, 6, 13))
        )

        assert quote.final_price == Decimal("300.00")
        assert quote.base_price == Decimal("100")
        assert quote.applied_rule_ids == []

    def test_weekend_rule_applies_to_saturday_and_sunday(self, engine, rules, hotel, room):
        # Подготовка
        weekend = add_rule(rules, hotel, RuleType.WEEKEND, 10)

        # Действие
        quote = engine.price_for_range(
            room.id, DateRange(check_in=SATURDAY, check_out=MONDAY)
        )

        # Проверка
        assert quote.final_price == Decimal("220.00")
        assert quote.applied_rule_ids == [weekend.id]

    def test_weekend_rule_skips_weekdays(self, engine, rules, hotel, room):
        add_rule(rules, hotel, RuleType.WEEKEND, 10)

        quote = engine.price_for_range(
            room.id, DateRange(check_in=date(2025, 6, 6), check_out=date(2025, 6, 8))
        )

        # Пятница по базе, суббота с наценкой
        assert quote.final_price == Decimal("210.00")

    def test_last_minute_applies_to_every_night(self, room, rules, hotel, ratio):
        last_minute = add_rule(rules, hotel, RuleType.LAST_MINUTE, 5)
        engine = PricingEngine(
            InMemoryRoomRepository([room]), rules, ratio, clock=lambda: date(2025, 6, 9)
        )

        quote = engine.price_for_range(
            room.id, DateRange(check_in=date(2025, 6, 10), check_out=date(2025, 6, 20))
        )

        assert quote.final_price == Decimal("1050.00")
        assert quote.applied_rule_ids == [last_minute.id]

    @pytest.mark.parametrize(
        "check_in, applies",
        [
            (date(2025, 6, 1), True),
            (date(2025, 6, 4), True),
            (date(2025, 6, 5), False),
            (date(2025, 5, 31), False),
        ],
    )
    def test_last_minute_window(self, engine, rules, hotel, room, check_in, applies):
        add_rule(rules, hotel, RuleType.LAST_MINUTE, 5)

        quote = engine.price_for_range(
            room.id, DateRange(check_in=check_in, check_out=date(2025, 6, 6))
        )

        nights = (date(2025, 6, 6) - check_in).days
        expected = Decimal("105") * nights if applies else Decimal("100") * nights
        assert quote.final_price == expected.quantize(Decimal("0.01"))

    def test_peak_rule_uses_availability_ratio(self, room, rules, hotel):
        peak = add_rule(rules, hotel, RuleType.PEAK, 30)
        period = DateRange(check_in=date(2025, 6, 10), check_out=date(2025, 6, 12))

        busy = PricingEngine(InMemoryRoomRepository([room]), rules, FixedRatio(0.1))
        quiet = PricingEngine(InMemoryRoomRepository([room]), rules, FixedRatio(0.2))

        assert busy.price_for_range(room.id, period).final_price == Decimal("260.00")
        assert busy.price_for_range(room.id, period).applied_rule_ids == [peak.id]
        assert quiet.price_for_range(room.id, period).final_price == Decimal("200.00")

    def test_seasonal_and_discount_rules_cover_their_dates(self, engine, rules, hotel, room):
        # Подготовка
        seasonal = add_rule(
            rules, hotel, RuleType.SEASONAL, 50, date(2025, 6, 11), date(2025, 6, 30)
        )
        discount = add_rule(
            rules, hotel, RuleType.DISCOUNT, -20, date(2025, 6, 1), date(2025, 6, 10)
        )

        # Действие
        quote = engine.price_for_range(
            room.id, DateRange(check_in=date(2025, 6, 10), check_out=date(2025, 6, 12))
        )

        # Проверка: 80 за 10-е и 150 за 11-е
        assert quote.final_price == Decimal("230.00")
        assert set(quote.applied_rule_ids) == {seasonal.id, discount.id}

    def test_rule_outside_stay_is_not_applied(self, engine, rules, hotel, room):
        add_rule(rules, hotel, RuleType.HOLIDAY, 40, date(2025, 12, 31), date(2025, 12, 31))

        quote = engine.price_for_range(
            room.id, DateRange(check_in=date(2025, 6, 10), check_out=date(2025, 6, 11))
        )

        assert quote.applied_rule_ids == []

    def test_zero_value_rule_is_ignored(self, engine, rules, hotel, room):
        add_rule(rules, hotel, RuleType.WEEKEND, 0)

        quote = engine.price_for_range(room.id, DateRange(check_in=SATURDAY, check_out=MONDAY))

        assert quote.applied_rule_ids == []

    def test_rules_of_other_hotels_are_ignored(self, engine, rules, room):
        rules.add(PricingRule(hotel_id=generate_id(), rule_type=RuleType.WEEKEND, rule_value=50))

        quote = engine.price_for_range(room.id, DateRange(check_in=SATURDAY, check_out=MONDAY))

        assert quote.final_price == Decimal("200.00")

    def test_total_is_rounded_once_half_up(self, hotel, rules, ratio):
        """Ночь стоит 1.155; 3 × 1.155 = 3.465 → 3.47, а не 3 × 1.16 = 3.48."""
        cheap = Room(hotel_id=hotel.id, capacity=1, base_price=Decimal("1.05"), total_rooms=1)
        add_rule(rules, hotel, RuleType.SEASONAL, 10, date(2025, 6, 1), date(2025, 6, 30))
        engine = PricingEngine(InMemoryRoomRepository([cheap]), rules, ratio, clock=lambda: TODAY)

        quote = engine.price_for_range(
            cheap.id, DateRange(check_in=date(2025, 6, 10), check_out=date(2025, 6, 13))
        )

        assert quote.final_price == Decimal("3.47")

    def test_price_is_deterministic(self, engine, rules, hotel, room):
        add_rule(rules, hotel, RuleType.WEEKEND, 15)
        add_rule(rules, hotel, RuleType.PEAK, 10)
        period = DateRange(check_in=date(2025, 6, 5), check_out=date(2025, 6, 15))

        assert engine.price_for_range(room.id, period) == engine.price_for_range(room.id, period)

    def test_simulate_prices_each_night(self, engine, rules, hotel, room):
        weekend = add_rule(rules, hotel, RuleType.WEEKEND, 10)

        points = engine.simulate(
            room.id, DateRange(check_in=date(2025, 6, 6), check_out=MONDAY)
        )

        assert [point.date for point in points] == [date(2025, 6, 6), SATURDAY, date(2025, 6, 8)]
        assert [point.price for point in points] == [
            Decimal("100.00"),
            Decimal("110.00"),
            Decimal("110.00"),
        ]
        assert points[0].applied_rule_ids == []
        assert points[1].applied_rule_ids == [weekend.id]


class TestPricingApplicationService:
    @pytest.fixture
    def service(self, engine):
        return PricingApplicationService(engine)

    def test_calculate_price(self, service, rules, hotel, room):
        add_rule(rules, hotel, RuleType.WEEKEND, 10)

        result = service.calculate_price(room.id, SATURDAY, MONDAY)

        assert result.room_id == room.id
        assert result.check_in == SATURDAY
        assert result.final_price == Decimal("220.00")

    def test_inverted_range(self, service, room):
        with pytest.raises(InvalidInputException):
            service.calculate_price(room.id, MONDAY, SATURDAY)

    def test_simulate_pricing(self, service, room):
        result = service.simulate_pricing(
            PriceSimulationRequest(room_id=room.id, check_in=SATURDAY, check_out=MONDAY)
        )

        assert len(result) == 2


class TestPricingRuleApplicationService:
    """Тесты для управления правилами отеля."""

    @pytest.fixture
    def service(self, rules, hotel):
        return PricingRuleApplicationService(rules, InMemoryHotelRepository([hotel]))

    def test_discount_is_stored_negative(self, service, hotel):
        rule = service.create_rule(
            PricingRuleRequest(
                hotel_id=hotel.id,
                rule_type=RuleType.DISCOUNT,
                rule_value=15,
                start_date=date(2025, 6, 1),
                end_date=date(2025, 6, 10),
            )
        )

        assert rule.rule_value == -15

    def test_unknown_hotel(self, service):
        with pytest.raises(HotelNotFoundException):
            service.create_rule(
                PricingRuleRequest(hotel_id=generate_id(), rule_type=RuleType.WEEKEND, rule_value=10)
            )

    def test_predicate_rule_is_unique_per_hotel(self, service, hotel):
        request = PricingRuleRequest(hotel_id=hotel.id, rule_type=RuleType.WEEKEND, rule_value=10)
        service.create_rule(request)

        with pytest.raises(DuplicatePricingRuleException):
            service.create_rule(request)

    def test_ranged_rule_requires_dates(self, service, hotel):
        with pytest.raises(InvalidInputException):
            service.create_rule(
                PricingRuleRequest(hotel_id=hotel.id, rule_type=RuleType.SEASONAL, rule_value=10)
            )

    def test_ranged_rule_with_inverted_dates(self, service, hotel):
        with pytest.raises(InvalidInputException):
            service.create_rule(
                PricingRuleRequest(
                    hotel_id=hotel.id,
                    rule_type=RuleType.SEASONAL,
                    rule_value=10,
                    start_date=date(2025, 6, 10),
                    end_date=date(2025, 6, 1),
                )
            )

    def test_overlapping_ranged_rules_of_same_type(self, service, hotel):
        def seasonal(start, end):
            return PricingRuleRequest(
                hotel_id=hotel.id,
                rule_type=RuleType.SEASONAL,
                rule_value=10,
                start_date=start,
                end_date=end,
            )

        service.create_rule(seasonal(date(2025, 6, 1), date(2025, 6, 10)))
        service.create_rule(seasonal(date(2025, 6, 11), date(2025, 6, 20)))

        with pytest.raises(DuplicatePricingRuleException):
            service.create_rule(seasonal(date(2025, 6, 10), date(2025, 6, 11)))

    def test_update_keeps_hotel_and_skips_itself(self, service, hotel):
        created = service.create_rule(
            PricingRuleRequest(
                hotel_id=hotel.id,
                rule_type=RuleType.HOLIDAY,
                rule_value=20,
                start_date=date(2025, 12, 24),
                end_date=date(2025, 12, 26),
            )
        )

        updated = service.update_rule(
            created.id,
            PricingRuleRequest(
                hotel_id=generate_id(),
                rule_type=RuleType.HOLIDAY,
                rule_value=25,
                start_date=date(2025, 12, 24),
                end_date=date(2025, 12, 31),
            ),
        )

        assert updated.id == created.id
        assert updated.hotel_id == hotel.id
        assert updated.rule_value == 25
        assert service.get_rule(created.id).end_date == date(2025, 12, 31)

    def test_delete_rule(self, service, hotel):
        created = service.create_rule(
            PricingRuleRequest(hotel_id=hotel.id, rule_type=RuleType.PEAK, rule_value=20)
        )

        service.delete_rule(created.id)

        assert service.list_rules(hotel.id) == []
        with pytest.raises(PricingRuleNotFoundException):
            service.get_rule(created.id)

    def test_list_rules_in_type_order(self, service, hotel):
        service.create_rule(
            PricingRuleRequest(hotel_id=hotel.id, rule_type=RuleType.LAST_MINUTE, rule_value=5)
        )
        service.create_rule(
            PricingRuleRequest(hotel_id=hotel.id, rule_type=RuleType.WEEKEND, rule_value=10)
        )

        assert [rule.rule_type for rule in service.list_rules()] == [
            RuleType.WEEKEND,
            RuleType.LAST_MINUTE,
        ]
