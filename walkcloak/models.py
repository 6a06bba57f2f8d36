from __future__ import annotations

from dataclasses import dataclass
from typing import Any


class InvalidPayloadError(ValueError):
    pass


def _require_int(payload: dict[str, Any], key: str) -> int:
    value = payload.get(key)
    # bool is an int subclass; JSON true/false is not an id.
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidPayloadError(f"{key} must be an integer, got {value!r}")
    if value < 0:
        raise InvalidPayloadError(f"{key} must be non-negative, got {value!r}")
    return value


def _require_str(payload: dict[str, Any], key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str):
        raise InvalidPayloadError(f"{key} must be a string, got {value!r}")
    return value


@dataclass(frozen=True)
class StravaEvent:
    aspect_type: str
    event_time: int
    object_id: int
    object_type: str
    owner_id: int
    subscription_id: int
    updates: Any = None

    @classmethod
    def from_payload(cls, payload: Any) -> "StravaEvent":
        if not isinstance(payload, dict):
            raise InvalidPayloadError("event body must be a JSON object")
        return cls(
            aspect_type=_require_str(payload, "aspect_type"),
            event_time=_require_int(payload, "event_time"),
            object_id=_require_int(payload, "object_id"),
            object_type=_require_str(payload, "object_type"),
            owner_id=_require_int(payload, "owner_id"),
            subscription_id=_require_int(payload, "subscription_id"),
            updates=payload.get("updates"),
        )

    @property
    def is_activity(self) -> bool:
        return self.object_type == "activity"


@dataclass(frozen=True)
class ActivityRecord:
    id: int
    name: str
    activity_type: str
    start_date_local: str
    start_latlng: tuple[float, float] | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> "ActivityRecord":
        if not isinstance(payload, dict):
            raise InvalidPayloadError("activity body must be a JSON object")
        return cls(
            id=_require_int(payload, "id"),
            name=_require_str(payload, "name"),
            activity_type=_require_str(payload, "type"),
            start_date_local=_require_str(payload, "start_date_local"),
            start_latlng=_parse_latlng(payload.get("start_latlng")),
        )


def _parse_latlng(raw: Any) -> tuple[float, float] | None:
    if raw is None:
        return None
    if not isinstance(raw, (list, tuple)):
        raise InvalidPayloadError(f"start_latlng must be an array, got {raw!r}")
    # Indoor activities report an empty array.
    if len(raw) < 2:
        return None
    lat, lng = raw[0], raw[1]
    for value in (lat, lng):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InvalidPayloadError(f"start_latlng must hold numbers, got {raw!r}")
    return (float(lat), float(lng))
