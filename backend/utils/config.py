"""Application configuration utilities."""

from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import AliasChoices, Field, SecretStr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from calendar_service.config import CalendarConfig
from calendar_service.errors import ConfigurationError


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_ignore_empty=True,
        populate_by_name=True,
    )

    app_name: str = Field(
        default="Cal Booking Facade",
    )
    app_version: str = Field(
        default="0.1.0",
    )
    log_level: str = Field(
        default="INFO",
    )
    host: str = Field(
        default="0.0.0.0",
    )
    port: int = Field(
        default=4000,
    )
    cors_origins: List[str] = Field(
        default=["*"],
    )

    cal_api_key: SecretStr = Field(
        default=SecretStr(""),
    )
    cal_base_url: str = Field(
        default="https://api.cal.com/v2",
    )
    cal_booking_page_url: str = Field(
        default="https://cal.com",
    )
    cal_api_version: str = Field(
        default="2024-09-04",
    )
    cal_username: Optional[str] = Field(
        default=None,
    )
    cal_event_slug: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("cal_event_slug", "event_slug"),
    )
    cal_event_type_id: Optional[int] = Field(
        default=None,
    )
    cal_timezone: str = Field(
        default="America/Santiago",
        validation_alias=AliasChoices("cal_timezone", "default_tz"),
    )
    cal_display_timezone: Optional[str] = Field(
        default=None,
    )
    cal_language: str = Field(
        default="es",
    )
    cal_reservation_mode: Literal["redirect", "direct"] = Field(
        default="redirect",
    )
    cal_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
    )
    cal_slots_path: str = Field(
        default="/slots",
    )
    cal_bookings_path: str = Field(
        default="/bookings",
    )
    cal_event_types_path: str = Field(
        default="/event-types",
    )

    def calendar_config(self) -> CalendarConfig:
        """Build the immutable adapter configuration from these settings."""

        try:
            return self._build_calendar_config()
        except ValidationError as exc:
            reasons = "; ".join(error["msg"] for error in exc.errors())
            raise ConfigurationError(f"invalid calendar configuration: {reasons}") from exc

    def _build_calendar_config(self) -> CalendarConfig:
        return CalendarConfig(
            api_key=self.cal_api_key,
            base_url=self.cal_base_url,
            booking_page_url=self.cal_booking_page_url,
            api_version=self.cal_api_version,
            username=self.cal_username,
            event_slug=self.cal_event_slug,
            event_type_id=self.cal_event_type_id,
            timezone=self.cal_timezone,
            display_timezone=self.cal_display_timezone or self.cal_timezone,
            language=self.cal_language,
            reservation_mode=self.cal_reservation_mode,
            timeout_seconds=self.cal_timeout_seconds,
            slots_path=self.cal_slots_path,
            bookings_path=self.cal_bookings_path,
            event_types_path=self.cal_event_types_path,
        )


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()
