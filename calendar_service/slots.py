"""Slot normalization helpers for cal.com availability payloads.

cal.com has shipped several response shapes over time (embed, v1 and v2
APIs). Each logical value is resolved from an ordered list of candidate
field names so the precedence is explicit and testable without a network.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence
from zoneinfo import ZoneInfo

LOGGER = logging.getLogger(__name__)

START_FIELDS: Sequence[str] = ("start", "startTime", "startUtc")
END_FIELDS: Sequence[str] = ("end", "endTime", "endUtc")

LABEL_FORMAT = "%H:%M"


def first_present(
    record: Any,
    candidates: Iterable[str],
    *,
    allow_bare: bool = False,
) -> Optional[str]:
    """Return the first populated candidate field of ``record``.

    When ``allow_bare`` is set and ``record`` is itself a non-empty string it
    is treated as the value once every named candidate has been tried.
    """

    if isinstance(record, dict):
        for name in candidates:
            value = record.get(name)
            if isinstance(value, str):
                value = value.strip()
            if value:
                return str(value)
        return None

    if allow_bare and isinstance(record, str) and record.strip():
        return record

    return None


def parse_timestamp(value: str) -> Optional[datetime]:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        LOGGER.debug("Unable to parse slot timestamp: %s", value)
        return None


def format_slot_label(start: str, display_timezone: str) -> Optional[str]:
    """Format ``start`` as a 24-hour ``HH:MM`` label in ``display_timezone``.

    Naive timestamps are taken to be in the display zone already.
    """

    start_dt = parse_timestamp(start)
    if start_dt is None:
        return None

    if start_dt.tzinfo is not None:
        start_dt = start_dt.astimezone(ZoneInfo(display_timezone))

    return start_dt.strftime(LABEL_FORMAT)


def normalize_slot(record: Any, display_timezone: str) -> Optional[Dict[str, Any]]:
    """Reduce an upstream slot record to ``{start, end, label}``.

    Returns ``None`` when no start value can be resolved.
    """

    start = first_present(record, START_FIELDS, allow_bare=True)
    if not start:
        return None

    return {
        "start": start,
        "end": first_present(record, END_FIELDS),
        "label": format_slot_label(start, display_timezone),
    }


def extract_slot_records(payload: Any) -> List[Any]:
    """Pull the raw slot records out of an availability response body.

    ``data`` and ``slots`` may hold a flat list or a mapping of date to list;
    mapped lists are concatenated in upstream order.
    """

    if not isinstance(payload, dict):
        return []

    for key in ("data", "slots", "availableSlots"):
        value = payload.get(key)
        if isinstance(value, list):
            return value
        if isinstance(value, dict):
            records: List[Any] = []
            for day_slots in value.values():
                if isinstance(day_slots, list):
                    records.extend(day_slots)
            return records

    return []


def normalize_slots(records: Iterable[Any], display_timezone: str) -> List[Dict[str, Any]]:
    normalized: List[Dict[str, Any]] = []
    for record in records:
        slot = normalize_slot(record, display_timezone)
        if slot is None:
            LOGGER.debug("Dropping slot without start time: %r", record)
            continue
        normalized.append(slot)
    return normalized
