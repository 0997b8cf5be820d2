import os
from functools import lru_cache
from typing import Optional

import pytz
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = Field(
        default="sqlite:///./room_booking.db",
        description="SQLAlchemy database URL",
    )
    timezone: str = Field(
        default="America/Santiago",
        description="Canonical zone used for opening hours, slots and alignment",
    )

    # Booking rules
    min_minutes: int = 30
    max_minutes: int = 120
    slot_minutes: int = 30
    user_active_limit: int = 2

    # Availability grid defaults
    grid_slot_minutes: int = 60
    grid_day_start_hour: int = 9
    grid_day_end_hour: int = 21

    # Room lock
    room_lock_timeout_seconds: float = 5.0
    room_lock_retries: int = 3
    room_lock_backoff_seconds: float = 0.05

    # Calendar sync (best effort)
    calendar_webhook_url: Optional[str] = None
    calendar_timeout_seconds: float = 3.0

    log_level: str = "INFO"
    skip_db_init: bool = False

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        if value not in pytz.all_timezones_set:
            raise ValueError(f"Unknown time zone: {value}")
        return value

    @field_validator("slot_minutes", "grid_slot_minutes", "min_minutes")
    @classmethod
    def _positive_minutes(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("minute values must be positive")
        return value

    @model_validator(mode="after")
    def _check_bounds(self) -> "Settings":
        if self.min_minutes > self.max_minutes:
            raise ValueError("min_minutes cannot exceed max_minutes")
        if not 0 <= self.grid_day_start_hour < self.grid_day_end_hour <= 24:
            raise ValueError("grid hours must satisfy 0 <= start < end <= 24")
        if self.room_lock_retries < 1:
            raise ValueError("room_lock_retries must be at least 1")
        return self


@lru_cache
def get_settings() -> Settings:
    return Settings()
