"""
Модуль контекста бронирования (Booking Context).

Отвечает за жизненный цикл бронирований, включая:
- Создание, подтверждение, изменение и отмену бронирований
- Удержание номеров в учете доступности
- Публикацию доменных событий
"""

from . import application, domain, event_handlers, infrastructure, interfaces

__all__ = [
    "domain",
    "application",
    "infrastructure",
    "interfaces",
    "event_handlers",
]
