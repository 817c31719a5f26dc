"""
Конфигурация тестов для pytest.
Добавляет директорию src в PYTHONPATH и собирает приложение с фиксированной датой.
"""
import sys
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

# Добавляем директорию src в PYTHONPATH
src_dir = str(Path(__file__).parent.parent / "src")
if src_dir not in sys.path:
    sys.path.insert(0, src_dir)

from hotel_inventory.bootstrap import bootstrap_app  # noqa: E402
from hotel_inventory.config import Settings  # noqa: E402
from hotel_inventory.shared_kernel import (  # noqa: E402
    Hotel,
    InMemoryHotelRepository,
    InMemoryRoomRepository,
    Room,
)

# Воскресенье; 2025-06-07 и 2025-06-08 приходятся на выходные
TODAY = date(2025, 6, 1)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def settings():
    """Настройки по умолчанию без чтения .env."""
    return Settings(_env_file=None)


@pytest.fixture
def hotel():
    return Hotel(name="Гранд Отель")


@pytest.fixture
def room(hotel):
    """Категория на 5 номеров по 2 гостя, 100 за ночь."""
    return Room(hotel_id=hotel.id, capacity=2, base_price=Decimal("100"), total_rooms=5)


@pytest.fixture
def app(settings, hotel, room):
    """Собранное приложение с in-memory хранилищами."""
    return bootstrap_app(
        settings=settings,
        clock=lambda: TODAY,
        hotel_repo=InMemoryHotelRepository([hotel]),
        room_repo=InMemoryRoomRepository([room]),
    )
