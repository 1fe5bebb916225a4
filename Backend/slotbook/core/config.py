from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = Field(
        default="sqlite+aiosqlite:///./slotbook.db",
        alias="DATABASE_URL",
    )
    allowed_origins: str = Field(default="http://localhost:3000", alias="ALLOWED_ORIGINS")
    slot_interval_minutes: int = Field(default=30, alias="SLOT_INTERVAL_MINUTES")
    booking_window_days: int = Field(default=14, alias="BOOKING_WINDOW_DAYS")
    closed_days: str = Field(default="0", alias="CLOSED_DAYS")
    business_timezone: str = Field(default="Asia/Yerevan", alias="BUSINESS_TIMEZONE")
    customer_phone_pattern: str = Field(default=r"^\+374\d{8}$", alias="CUSTOMER_PHONE_PATTERN")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    seed_demo_data: bool = Field(default=False, alias="SEED_DEMO_DATA")

    model_config = SettingsConfigDict(env_file=(".env", "Backend/.env"), extra="ignore")

    @property
    def allowed_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    @property
    def closed_days_list(self) -> List[int]:
        # 0=Sunday .. 6=Saturday
        return [int(day) for day in self.closed_days.split(",") if day.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
