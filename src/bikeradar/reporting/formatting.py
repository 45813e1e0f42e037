from __future__ import annotations

from datetime import datetime, timezone, tzinfo
from typing import Optional


INVALID_TIMESTAMP = "Invalid Timestamp"


def parse_timestamp(value: str) -> Optional[datetime]:
    """
    Parse a station timestamp such as `2024-02-25T08:34:42.895000Z`.

    Naive values are read as UTC. Returns None when the value is not ISO8601.
    """

    if not isinstance(value, str) or not value.strip():
        return None
    try:
        dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_last_updated(
    timestamp: str,
    *,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> str:
    # en_GB short style: "25/02/2024, 08:34", or just "08:34" for today's updates.
    dt = parse_timestamp(timestamp)
    if dt is None:
        return INVALID_TIMESTAMP
    zone = tz or timezone.utc
    local = dt.astimezone(zone)
    today = (now or datetime.now(zone)).astimezone(zone).date()
    if local.date() == today:
        return local.strftime("%H:%M")
    return local.strftime("%d/%m/%Y, %H:%M")


def _one_decimal(value: float) -> str:
    text = f"{value:,.1f}"
    return text[:-2] if text.endswith(".0") else text


def format_distance(meters: Optional[float]) -> Optional[str]:
    if meters is None or meters < 0:
        return None
    if meters >= 1000:
        return f"{_one_decimal(meters / 1000)} km"
    return f"{_one_decimal(meters)} m"


def availability_label(free_bikes: int, empty_slots: Optional[int]) -> str:
    # Some operators do not report slots; "?" keeps the label honest instead of showing 0.
    slots = "?" if empty_slots is None else str(empty_slots)
    return f"Free bikes: {free_bikes} | Empty slots: {slots}"
