"""cal.com Calendar API adapter."""

from __future__ import annotations

import json
import logging
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, Mapping, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import httpx

from calendar_service.config import CalendarConfig
from calendar_service.errors import TransportError, UpstreamError, ValidationError
from calendar_service.slots import extract_slot_records, normalize_slots
from calendar_service.strategies import ReservationStrategy, build_reservation_strategy

LOGGER = logging.getLogger(__name__)

UTC_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


class CalComAdapter:
    """Adapter translating client queries into cal.com API calls.

    Holds no state between calls beyond its immutable configuration and the
    reservation strategy chosen from it.
    """

    def __init__(
        self,
        config: CalendarConfig,
        *,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.config = config
        self._transport = transport
        self.reservation_strategy: ReservationStrategy = build_reservation_strategy(
            config,
            self._submit_booking,
        )

    # ---------------------------------------------------------------------
    # Public API
    # ---------------------------------------------------------------------
    def get_availability(
        self,
        date_str: Optional[str],
        timezone: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Return normalized slots for ``date_str`` in ``timezone``."""

        date_value = (date_str or "").strip()
        if not date_value:
            raise ValidationError("missing date (expected ?date=YYYY-MM-DD)")

        tz_name = (timezone or "").strip() or self.config.timezone
        params = self._build_availability_params(date_value, tz_name)

        LOGGER.info(
            "cal.com availability: date=%s timezone=%s event_type_id=%s",
            date_value,
            tz_name,
            self.config.event_type_id,
        )
        payload = self._request("GET", self.config.slots_path, params=params)

        records = extract_slot_records(payload)
        slots = normalize_slots(records, self.config.display_timezone)
        LOGGER.debug(
            "cal.com availability: %s upstream records, %s slots kept",
            len(records),
            len(slots),
        )

        result: Dict[str, Any] = {"date": date_value, "timezone": tz_name}
        if self.config.event_type_id is not None:
            result["eventTypeId"] = self.config.event_type_id
        result["slots"] = slots
        return result

    def create_reservation(self, request: Mapping[str, Any]) -> Dict[str, Any]:
        """Validate ``request`` and hand it to the configured strategy."""

        strategy = self.reservation_strategy
        cleaned = self._clean_request(request)

        missing = [field for field in strategy.required_fields if not cleaned.get(field)]
        if missing:
            raise ValidationError(f"missing required field(s): {', '.join(missing)}")

        return strategy.reserve(cleaned)

    def list_event_types(self) -> Any:
        """Fetch the account's event types; used as an upstream round-trip check."""

        return self._request("GET", self.config.event_types_path)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _http_client(self) -> httpx.Client:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "cal-api-version": self.config.api_version,
        }
        api_key = self.config.api_key.get_secret_value()
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        return httpx.Client(
            base_url=self.config.base_url.rstrip("/"),
            headers=headers,
            timeout=self.config.timeout_seconds,
            transport=self._transport,
        )

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Any:
        try:
            with self._http_client() as client:
                response = client.request(method, path, params=params, json=payload)
        except httpx.TimeoutException as exc:
            LOGGER.error("cal.com %s %s timed out: %s", method, path, exc)
            raise TransportError("provider timed out") from exc
        except httpx.TransportError as exc:
            LOGGER.error("cal.com %s %s unreachable: %s", method, path, exc)
            raise TransportError(f"provider unreachable: {exc}") from exc

        if response.is_error:
            LOGGER.error(
                "cal.com %s %s failed: status=%s body=%s",
                method,
                path,
                response.status_code,
                response.text,
            )
            raise UpstreamError(
                self._error_message(response),
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as exc:
            LOGGER.error("cal.com %s %s returned invalid JSON: %s", method, path, exc)
            raise UpstreamError(
                "provider returned invalid JSON",
                status_code=response.status_code,
            ) from exc

    def _submit_booking(self, payload: Dict[str, Any]) -> Any:
        LOGGER.debug("cal.com booking request: %s", json.dumps(payload, default=str))
        return self._request("POST", self.config.bookings_path, payload=payload)

    def _build_availability_params(self, date_str: str, tz_name: str) -> Dict[str, Any]:
        try:
            tz = ZoneInfo(tz_name)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValidationError(f"unknown timezone: {tz_name}") from exc

        target_date = self._parse_date(date_str)
        start = datetime.combine(target_date, time.min, tzinfo=tz)
        end = datetime.combine(target_date + timedelta(days=1), time.min, tzinfo=tz)

        params: Dict[str, Any] = {
            "start": start.astimezone(ZoneInfo("UTC")).strftime(UTC_FORMAT),
            "end": end.astimezone(ZoneInfo("UTC")).strftime(UTC_FORMAT),
            "timeZone": tz_name,
        }

        if self.config.event_type_id is not None:
            params["eventTypeId"] = self.config.event_type_id
        else:
            params["username"] = self.config.username
            params["eventTypeSlug"] = self.config.event_slug

        return params

    @staticmethod
    def _parse_date(date_str: str) -> date:
        try:
            return date.fromisoformat(date_str)
        except ValueError:
            pass

        try:
            return datetime.fromisoformat(date_str.replace("Z", "+00:00")).date()
        except ValueError as exc:
            raise ValidationError(
                f"invalid date: {date_str} (expected YYYY-MM-DD)"
            ) from exc

    @staticmethod
    def _clean_request(request: Mapping[str, Any]) -> Dict[str, Any]:
        cleaned: Dict[str, Any] = {}
        for key, value in request.items():
            if isinstance(value, str):
                value = value.strip()
            if value in (None, ""):
                continue
            cleaned[key] = value
        return cleaned

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None

        message: Optional[str] = None
        if isinstance(body, dict):
            error = body.get("error")
            if isinstance(body.get("message"), str):
                message = body["message"]
            elif isinstance(error, str):
                message = error
            elif isinstance(error, dict) and isinstance(error.get("message"), str):
                message = error["message"]

        return message or f"provider error (status {response.status_code})"
