"""
Модуль контекста ценообразования (Pricing Context).

Отвечает за процентные правила отеля и расчет цены проживания по ночам.
"""

from . import application, domain, infrastructure, interfaces

__all__ = [
    "domain",
    "application",
    "infrastructure",
    "interfaces",
]
