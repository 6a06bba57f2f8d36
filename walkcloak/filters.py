from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .models import ActivityRecord


TARGET_ACTIVITY_TYPE = "walk"
WEEKEND_DAYS = frozenset({5, 6})

# Closed bounding box around the weekday walk route.
LAT_MIN, LAT_MAX = 40.0, 41.0
LNG_MIN, LNG_MAX = -74.0, -73.0


class MalformedActivityError(ValueError):
    pass


@dataclass(frozen=True)
class FilterDecision:
    accepted: bool
    reason: str | None = None

    @classmethod
    def accept(cls) -> "FilterDecision":
        return cls(accepted=True)

    @classmethod
    def reject(cls, reason: str) -> "FilterDecision":
        return cls(accepted=False, reason=reason)


def parse_start_date_local(raw: str) -> datetime:
    """Parse an RFC 3339 style timestamp; a zone designator is required."""
    value = raw.strip() if isinstance(raw, str) else ""
    if not value:
        raise MalformedActivityError(f"start_date_local is empty: {raw!r}")
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as exc:
        raise MalformedActivityError(f"start_date_local is not a timestamp: {raw!r}") from exc
    if parsed.tzinfo is None:
        raise MalformedActivityError(f"start_date_local has no UTC offset: {raw!r}")
    return parsed


def in_geofence(lat: float, lng: float) -> bool:
    return LAT_MIN <= lat <= LAT_MAX and LNG_MIN <= lng <= LNG_MAX


def evaluate_activity(activity: ActivityRecord) -> FilterDecision:
    """Run the type, weekday and geofence filters in order.

    The first failing filter decides. Raises MalformedActivityError when
    the start timestamp cannot be parsed, which is not a rejection.
    """
    if activity.activity_type.lower() != TARGET_ACTIVITY_TYPE:
        return FilterDecision.reject(f"type {activity.activity_type!r} is not a walk")

    started = parse_start_date_local(activity.start_date_local)
    if started.weekday() in WEEKEND_DAYS:
        return FilterDecision.reject(f"started on a weekend ({started.strftime('%A')})")

    if activity.start_latlng is None:
        return FilterDecision.reject("no location data")
    lat, lng = activity.start_latlng
    if not in_geofence(lat, lng):
        return FilterDecision.reject(f"start ({lat}, {lng}) is outside the geofence")

    return FilterDecision.accept()
