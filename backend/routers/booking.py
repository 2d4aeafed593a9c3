"""Availability and reservation router."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from backend.services.calendar import get_calendar_client
from calendar_service.cal_adapter import CalComAdapter

LOGGER = logging.getLogger(__name__)

router = APIRouter()


class SlotOut(BaseModel):
    """A bookable slot as presented to the client."""

    start: str
    end: Optional[str] = None
    label: Optional[str] = None


class AvailabilityResponse(BaseModel):
    """Slots for one day in one timezone."""

    date: str
    timezone: str
    eventTypeId: Optional[int] = None
    slots: List[SlotOut]


class ReservationRequest(BaseModel):
    """Inbound reservation payload.

    Every field is optional here; required fields depend on the reservation
    mode and are checked by the adapter so the client gets a 400 naming them.
    """

    name: Optional[str] = None
    email: Optional[str] = None
    start: Optional[str] = None
    end: Optional[str] = None
    notes: Optional[str] = None


@router.get("/availability", response_model=AvailabilityResponse)
def get_availability(
    date: Optional[str] = Query(default=None),
    tz: Optional[str] = Query(default=None),
    calendar_client: CalComAdapter = Depends(get_calendar_client),
) -> Dict[str, Any]:
    """Return normalized availability for a single date."""

    LOGGER.debug("Availability request: date=%s tz=%s", date, tz)
    return calendar_client.get_availability(date, tz)


@router.post("/reserve")
def create_reservation(
    payload: Optional[ReservationRequest] = None,
    calendar_client: CalComAdapter = Depends(get_calendar_client),
) -> Dict[str, Any]:
    """Request a reservation through the configured strategy."""

    request = payload.model_dump(exclude_none=True) if payload else {}
    LOGGER.debug("Reservation request: fields=%s", sorted(request))
    return calendar_client.create_reservation(request)
