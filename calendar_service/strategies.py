"""Reservation strategies: hosted-page redirect or direct API booking."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Protocol, Tuple
from urllib.parse import quote

from calendar_service.config import CalendarConfig
from calendar_service.errors import ConfigurationError

LOGGER = logging.getLogger(__name__)

# Characters left unescaped by JavaScript's encodeURIComponent.
_URI_COMPONENT_SAFE = "-_.!~*'()"

BookingSender = Callable[[Dict[str, Any]], Any]


def encode_uri_component(value: str) -> str:
    return quote(value, safe=_URI_COMPONENT_SAFE)


class ReservationStrategy(Protocol):
    """How a validated reservation request turns into a result."""

    mode: str
    required_fields: Tuple[str, ...]

    def reserve(self, request: Dict[str, Any]) -> Dict[str, Any]:
        ...


class RedirectReservation:
    """Hand the caller a prefilled link to the cal.com hosted booking page.

    No network call is made and slot availability is not checked; the
    hosted page is responsible for that.
    """

    mode = "redirect"
    required_fields: Tuple[str, ...] = ("name", "email", "start")

    def __init__(self, config: CalendarConfig) -> None:
        if not config.event_path:
            raise ConfigurationError(
                "redirect mode requires CAL_USERNAME and CAL_EVENT_SLUG"
            )
        self._page_url = f"{config.booking_page_url.rstrip('/')}/{config.event_path}"

    def booking_url(self, request: Dict[str, Any]) -> str:
        url = (
            f"{self._page_url}?date={request['start']}"
            f"&name={encode_uri_component(request['name'])}"
            f"&email={encode_uri_component(request['email'])}"
        )
        notes = request.get("notes")
        if notes:
            url += f"&notes={encode_uri_component(notes)}"
        return url

    def reserve(self, request: Dict[str, Any]) -> Dict[str, Any]:
        booking_url = self.booking_url(request)
        LOGGER.info("cal.com redirect reservation: start=%s", request["start"])
        return {"status": "redirect", "bookingUrl": booking_url}


class DirectBookingReservation:
    """Create the booking through the cal.com bookings endpoint."""

    mode = "direct"
    required_fields: Tuple[str, ...] = ("name", "email", "start", "end")

    def __init__(self, config: CalendarConfig, send: BookingSender) -> None:
        if not config.api_key.get_secret_value():
            raise ConfigurationError("direct booking mode requires CAL_API_KEY")
        if config.event_type_id is None:
            raise ConfigurationError(
                "direct booking mode requires a numeric CAL_EVENT_TYPE_ID"
            )
        self._config = config
        self._send = send

    def build_payload(self, request: Dict[str, Any]) -> Dict[str, Any]:
        config = self._config
        notes = request.get("notes")

        responses: Dict[str, Any] = {
            "name": request["name"],
            "email": request["email"],
        }
        if notes:
            responses["notes"] = notes

        payload: Dict[str, Any] = {
            "eventTypeId": int(config.event_type_id),
            "name": request["name"],
            "email": request["email"],
            "start": request["start"],
            "end": request["end"],
            "timeZone": config.timezone,
            "language": config.language,
            "responses": responses,
            "metadata": {},
        }
        if notes:
            payload["notes"] = notes

        return payload

    def reserve(self, request: Dict[str, Any]) -> Dict[str, Any]:
        payload = self.build_payload(request)
        LOGGER.info(
            "cal.com direct booking: event_type_id=%s start=%s",
            payload["eventTypeId"],
            payload["start"],
        )
        booking = self._send(payload)
        return {"status": "ok", "booking": booking}


def build_reservation_strategy(
    config: CalendarConfig,
    send: BookingSender,
) -> ReservationStrategy:
    """Select the reservation strategy named by ``config.reservation_mode``."""

    if config.reservation_mode == "direct":
        return DirectBookingReservation(config, send)
    return RedirectReservation(config)
