from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Logging
    log_level: str = "INFO"
    log_format: str = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"

    # Pricing
    peak_availability_threshold: float = 0.20  # PEAK срабатывает, если доля свободных ниже
    last_minute_window_days: int = 3

    # Booking
    auto_confirm_bookings: bool = True

    # Analytics
    analytics_occupancy_window_days: int = Field(30, gt=0)
    analytics_revenue_months: int = Field(6, gt=0)
    analytics_recent_days: int = Field(7, gt=0)

    model_config = SettingsConfigDict(
        env_prefix="HOTEL_INVENTORY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
