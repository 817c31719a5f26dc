"""
Модуль аналитики отеля: брони, выручка и загрузка номеров.
"""

from . import application, domain

__all__ = [
    "domain",
    "application",
]
