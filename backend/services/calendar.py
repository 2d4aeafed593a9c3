"""Process-wide calendar adapter construction."""

from __future__ import annotations

import logging
from functools import lru_cache

from backend.utils.config import get_settings
from calendar_service.cal_adapter import CalComAdapter

LOGGER = logging.getLogger(__name__)


@lru_cache()
def get_calendar_client() -> CalComAdapter:
    """Return the adapter built from startup settings.

    Raises ``ConfigurationError`` when the settings cannot serve the selected
    reservation mode.
    """

    adapter = CalComAdapter(get_settings().calendar_config())
    LOGGER.info(
        "Configured cal.com adapter: mode=%s event_type_id=%s timezone=%s",
        adapter.reservation_strategy.mode,
        adapter.config.event_type_id,
        adapter.config.timezone,
    )
    return adapter
