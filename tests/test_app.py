"""Smoke tests for FastAPI application."""

from typing import Iterator

import httpx
import pytest
from fastapi.testclient import TestClient

from backend.main import app
import backend.services.calendar as calendar_service_mod
from backend.services.calendar import get_calendar_client
from backend.utils.config import Settings, get_settings
from calendar_service.cal_adapter import CalComAdapter
from calendar_service.config import CalendarConfig
from calendar_service.errors import ConfigurationError


client = TestClient(app)


def _upstream(request: httpx.Request) -> httpx.Response:
    if request.url.path.endswith("/slots"):
        return httpx.Response(
            200,
            json={
                "slots": [
                    {"start": "2024-01-01T10:00:00Z", "end": "2024-01-01T10:30:00Z"},
                    {"nothing": "here"},
                ]
            },
        )
    if request.url.path.endswith("/event-types"):
        return httpx.Response(200, json={"data": [{"id": 42}, {"id": 7}]})
    if request.url.path.endswith("/bookings"):
        return httpx.Response(201, json={"data": {"uid": "bk_1"}})
    return httpx.Response(404, json={"message": "Not found"})


def _override_adapter(**overrides) -> None:
    options = {
        "api_key": "cal_live_secret",
        "username": "stadio",
        "event_slug": "salon-verdi",
        "event_type_id": 42,
        "timezone": "UTC",
        "display_timezone": "UTC",
    }
    options.update(overrides)
    adapter = CalComAdapter(
        CalendarConfig(**options),
        transport=httpx.MockTransport(_upstream),
    )
    app.dependency_overrides[get_calendar_client] = lambda: adapter


@pytest.fixture(autouse=True)
def clear_overrides() -> Iterator[None]:
    yield
    app.dependency_overrides.clear()


def test_health_endpoint() -> None:
    """Health endpoint should report liveness as plain text."""

    response = client.get("/health")
    assert response.status_code == 200
    assert response.text == "ok"


def test_version_endpoint() -> None:
    """Version endpoint should expose application version."""

    response = client.get("/version")
    assert response.status_code == 200
    assert "version" in response.json()


def test_availability_endpoint() -> None:
    _override_adapter()

    response = client.get("/availability", params={"date": "2024-01-01"})

    assert response.status_code == 200
    assert response.json() == {
        "date": "2024-01-01",
        "timezone": "UTC",
        "eventTypeId": 42,
        "slots": [
            {
                "start": "2024-01-01T10:00:00Z",
                "end": "2024-01-01T10:30:00Z",
                "label": "10:00",
            }
        ],
    }


def test_availability_requires_date() -> None:
    _override_adapter()

    response = client.get("/availability")

    assert response.status_code == 400
    assert "missing date" in response.json()["error"]


def test_availability_upstream_failure_is_500() -> None:
    _override_adapter(slots_path="/missing")

    response = client.get("/availability", params={"date": "2024-01-01", "tz": "UTC"})

    assert response.status_code == 500
    assert response.json() == {"error": "Not found"}


def test_reserve_redirect() -> None:
    _override_adapter()

    response = client.post(
        "/reserve",
        json={"name": "Ana", "email": "a@b.com", "start": "2024-01-01T10:00:00"},
    )

    assert response.status_code == 200
    assert response.json() == {
        "status": "redirect",
        "bookingUrl": (
            "https://cal.com/stadio/salon-verdi"
            "?date=2024-01-01T10:00:00&name=Ana&email=a%40b.com"
        ),
    }


def test_reserve_missing_fields_is_400() -> None:
    _override_adapter()

    response = client.post("/reserve", json={"name": "Ana"})

    assert response.status_code == 400
    assert response.json() == {"error": "missing required field(s): email, start"}


def test_reserve_direct_booking() -> None:
    _override_adapter(reservation_mode="direct")

    response = client.post(
        "/reserve",
        json={
            "name": "Ana",
            "email": "a@b.com",
            "start": "2024-01-01T10:00:00Z",
            "end": "2024-01-01T10:30:00Z",
            "notes": "first visit",
        },
    )

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "booking": {"data": {"uid": "bk_1"}}}


def test_debug_env_never_echoes_secret() -> None:
    settings = Settings(cal_api_key="cal_live_supersecret", cal_event_type_id="42")
    app.dependency_overrides[get_settings] = lambda: settings

    response = client.get("/debug-env")

    assert response.status_code == 200
    body = response.json()
    assert body["cal_api_key_present"] is True
    assert body["cal_api_key_length"] == len("cal_live_supersecret")
    assert body["cal_event_type_id"] == 42
    assert "cal_live_supersecret" not in response.text


def test_diag_round_trip() -> None:
    _override_adapter()

    response = client.get("/diag")

    assert response.status_code == 200
    assert response.json() == {
        "status": "ok",
        "upstreamEventTypes": 2,
        "eventTypeFound": True,
    }


def test_endpoint_paths_read_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CAL_SLOTS_PATH", "/slots/available")
    monkeypatch.setenv("CAL_BOOKINGS_PATH", "/v1/bookings")
    monkeypatch.setenv("CAL_EVENT_TYPES_PATH", "/v1/event-types")
    monkeypatch.setenv("CAL_USERNAME", "stadio")
    monkeypatch.setenv("EVENT_SLUG", "salon-verdi")

    config = Settings().calendar_config()

    assert config.slots_path == "/slots/available"
    assert config.bookings_path == "/v1/bookings"
    assert config.event_types_path == "/v1/event-types"
    assert config.event_path == "stadio/salon-verdi"


@pytest.fixture
def bad_zone_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    settings = Settings(
        cal_timezone="Mars/Olympus",
        cal_username="stadio",
        cal_event_slug="salon-verdi",
    )
    monkeypatch.setattr(calendar_service_mod, "get_settings", lambda: settings)
    get_calendar_client.cache_clear()
    yield
    get_calendar_client.cache_clear()


def test_invalid_settings_raise_configuration_error(bad_zone_settings: None) -> None:
    with pytest.raises(ConfigurationError, match="unknown timezone: Mars/Olympus"):
        get_calendar_client()


def test_invalid_settings_report_json_error(bad_zone_settings: None) -> None:
    response = client.get("/availability", params={"date": "2024-01-01"})

    assert response.status_code == 500
    assert "unknown timezone: Mars/Olympus" in response.json()["error"]


def test_invalid_settings_abort_startup(bad_zone_settings: None) -> None:
    with pytest.raises(ConfigurationError):
        with TestClient(app):
            pass


def test_startup_log_names_reservation_mode(
    monkeypatch: pytest.MonkeyPatch,
    caplog: pytest.LogCaptureFixture,
) -> None:
    settings = Settings(
        cal_api_key="cal_live_secret",
        cal_event_type_id=42,
        cal_reservation_mode="direct",
    )
    monkeypatch.setattr(calendar_service_mod, "get_settings", lambda: settings)
    get_calendar_client.cache_clear()
    caplog.set_level("INFO", logger="backend.services.calendar")

    try:
        adapter = get_calendar_client()
    finally:
        get_calendar_client.cache_clear()

    assert adapter.reservation_strategy.mode == "direct"
    assert "mode=direct" in caplog.text
