from ..shared_kernel import ILogger
from .domain import BookingCancelled, BookingConfirmed


def on_booking_confirmed(event: BookingConfirmed, logger: ILogger) -> None:
    """Обработчик подтверждения: уведомляет гостя (здесь через лог)."""
    logger.info("Уведомление о подтверждении бронирования", booking_id=event.booking_id)


def on_booking_cancelled(event: BookingCancelled, logger: ILogger) -> None:
    """Обработчик отмены бронирования."""
    logger.info(
        "Уведомление об отмене бронирования",
        booking_id=event.booking_id,
        released_rooms=event.released_rooms,
    )
