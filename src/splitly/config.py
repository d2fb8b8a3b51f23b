from __future__ import annotations

from datetime import datetime, timezone
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


LEGACY_PAYMENT_CUTOVER = datetime(2025, 12, 21, tzinfo=timezone.utc)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False)

    precision: float = Field(0.01, alias="SPLITLY_PRECISION", gt=0)
    legacy_payment_cutover: datetime = Field(LEGACY_PAYMENT_CUTOVER, alias="SPLITLY_LEGACY_PAYMENT_CUTOVER")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    @property
    def cutover_utc(self) -> datetime:
        if self.legacy_payment_cutover.tzinfo is None:
            return self.legacy_payment_cutover.replace(tzinfo=timezone.utc)
        return self.legacy_payment_cutover.astimezone(timezone.utc)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]
