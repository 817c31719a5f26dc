"""
Модуль контекста доступности (Availability Context).

Отвечает за учет свободных номеров по датам, включая:
- Проверку доступности на дату и на период проживания
- Атомарное применение изменений инвентаря
- Блокировку и разблокировку дат
"""

from . import application, domain, infrastructure, interfaces

__all__ = [
    "domain",
    "application",
    "infrastructure",
    "interfaces",
]
