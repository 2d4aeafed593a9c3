"""Immutable configuration for the cal.com adapter."""

from __future__ import annotations

from typing import Literal, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

ReservationMode = Literal["redirect", "direct"]


class CalendarConfig(BaseModel):
    """Everything the adapter needs to talk to cal.com, fixed at startup."""

    model_config = ConfigDict(frozen=True)

    api_key: SecretStr = SecretStr("")
    base_url: str = "https://api.cal.com/v2"
    booking_page_url: str = "https://cal.com"
    api_version: str = "2024-09-04"

    username: Optional[str] = None
    event_slug: Optional[str] = None
    event_type_id: Optional[int] = None

    timezone: str = "America/Santiago"
    display_timezone: str = "America/Santiago"
    language: str = "es"

    reservation_mode: ReservationMode = "redirect"
    timeout_seconds: float = Field(default=10.0, gt=0)

    slots_path: str = "/slots"
    bookings_path: str = "/bookings"
    event_types_path: str = "/event-types"

    @field_validator("timezone", "display_timezone")
    @classmethod
    def known_zone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"unknown timezone: {value}") from exc
        return value

    @property
    def event_path(self) -> Optional[str]:
        """Return ``username/slug`` for hosted booking pages, if configured."""

        if self.username and self.event_slug:
            return f"{self.username.strip('/')}/{self.event_slug.strip('/')}"
        return None
