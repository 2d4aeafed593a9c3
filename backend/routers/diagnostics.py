"""Operational diagnostics router."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends

from backend.services.calendar import get_calendar_client
from backend.utils.config import Settings, get_settings
from calendar_service.cal_adapter import CalComAdapter

LOGGER = logging.getLogger(__name__)

router = APIRouter()


@router.get("/debug-env")
def debug_env(settings: Settings = Depends(get_settings)) -> Dict[str, Any]:
    """Report which settings are present without revealing secret values."""

    api_key = settings.cal_api_key.get_secret_value()
    return {
        "cal_api_key_present": bool(api_key),
        "cal_api_key_length": len(api_key),
        "cal_event_type_id": settings.cal_event_type_id,
        "cal_username_present": bool(settings.cal_username),
        "cal_event_slug_present": bool(settings.cal_event_slug),
        "cal_reservation_mode": settings.cal_reservation_mode,
        "cal_timezone": settings.cal_timezone,
    }


@router.get("/diag")
def diagnose(
    calendar_client: CalComAdapter = Depends(get_calendar_client),
) -> Dict[str, Any]:
    """Round-trip the cal.com event-type listing."""

    payload = calendar_client.list_event_types()
    event_types = _coerce_event_types(payload)

    event_type_id = calendar_client.config.event_type_id
    event_type_found: Optional[bool] = None
    if event_type_id is not None:
        event_type_found = any(
            str(item.get("id")) == str(event_type_id)
            for item in event_types
            if isinstance(item, dict)
        )

    LOGGER.info(
        "cal.com diag: event_types=%s event_type_found=%s",
        len(event_types),
        event_type_found,
    )
    return {
        "status": "ok",
        "upstreamEventTypes": len(event_types),
        "eventTypeFound": event_type_found,
    }


def _coerce_event_types(payload: Any) -> List[Any]:
    if isinstance(payload, list):
        return payload
    if not isinstance(payload, dict):
        return []

    data = payload.get("data")
    if isinstance(data, list):
        return data
    if isinstance(data, dict) and isinstance(data.get("eventTypes"), list):
        return data["eventTypes"]

    event_types = payload.get("event_types") or payload.get("eventTypes")
    return event_types if isinstance(event_types, list) else []
