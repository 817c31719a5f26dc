from datetime import date
from functools import partial
from typing import Any, Callable, Dict, Optional

from .analytics.application import HotelAnalyticsService
from .availability.application import AvailabilityApplicationService
from .availability.domain import AvailabilityLedger
from .availability.infrastructure import InMemoryAvailabilityRepository
from .booking.application import BookingApplicationService
from .booking.domain import BookingCancelled, BookingConfirmed
from .booking.event_handlers import on_booking_cancelled, on_booking_confirmed
from .booking.infrastructure import (
    BookingUnitOfWork,
    InMemoryBookingRepository,
    InMemoryEventBus,
)
from .config import Settings
from .config import settings as default_settings
from .pricing.application import PricingApplicationService, PricingRuleApplicationService
from .pricing.domain import PricingEngine
from .pricing.infrastructure import InMemoryPricingRuleRepository
from .shared_kernel import (
    InMemoryHotelRepository,
    InMemoryRoomRepository,
    StandardLogger,
    configure_logging,
    today,
)


def bootstrap_app(
    settings: Optional[Settings] = None,
    clock: Callable[[], date] = today,
    hotel_repo: Optional[InMemoryHotelRepository] = None,
    room_repo: Optional[InMemoryRoomRepository] = None,
) -> Dict[str, Any]:
    """Создает и настраивает все компоненты приложения."""
    settings = settings or default_settings
    configure_logging(settings)
    logger = StandardLogger("hotel_inventory")

    # 1. Каталог отелей и номеров (внешний источник, здесь в памяти)
    hotel_repo = hotel_repo or InMemoryHotelRepository()
    room_repo = room_repo or InMemoryRoomRepository()

    # 2. Учет доступности; занятые номера для разблокировки считает репозиторий броней
    booking_repo = InMemoryBookingRepository()
    ledger = AvailabilityLedger(
        availability_repository=InMemoryAvailabilityRepository(),
        room_repository=room_repo,
        booked_rooms_counter=booking_repo,
        logger=StandardLogger("hotel_inventory.availability"),
    )

    # 3. Ценообразование
    rule_repo = InMemoryPricingRuleRepository()
    engine = PricingEngine(
        room_repository=room_repo,
        rule_repository=rule_repo,
        ratio_provider=ledger,
        clock=clock,
        peak_threshold=settings.peak_availability_threshold,
        last_minute_window_days=settings.last_minute_window_days,
        logger=StandardLogger("hotel_inventory.pricing"),
    )

    # 4. Бронирования
    event_bus = InMemoryEventBus(StandardLogger("hotel_inventory.events"))
    booking_uow = BookingUnitOfWork(
        ledger=ledger,
        bookings_repo=booking_repo,
        rooms_repo=room_repo,
        event_bus=event_bus,
        logger=StandardLogger("hotel_inventory.booking"),
    )

    # 5. Подписываем обработчики на события
    event_bus.subscribe(BookingConfirmed, partial(on_booking_confirmed, logger=logger))
    event_bus.subscribe(BookingCancelled, partial(on_booking_cancelled, logger=logger))

    # Возвращаем настроенные компоненты
    return {
        "settings": settings,
        "hotel_repo": hotel_repo,
        "room_repo": room_repo,
        "booking_repo": booking_repo,
        "ledger": ledger,
        "booking_uow": booking_uow,
        "event_bus": event_bus,
        "availability_service": AvailabilityApplicationService(ledger),
        "pricing_service": PricingApplicationService(engine),
        "pricing_rule_service": PricingRuleApplicationService(rule_repo, hotel_repo),
        "booking_service": BookingApplicationService(booking_uow, settings=settings),
        "analytics_service": HotelAnalyticsService(
            booking_repository=booking_repo,
            room_repository=room_repo,
            hotel_repository=hotel_repo,
            settings=settings,
            clock=clock,
        ),
    }
