"""
Учет номеров отеля: доступность по датам, ценообразование и бронирования.
"""

__version__ = "0.1.0"
