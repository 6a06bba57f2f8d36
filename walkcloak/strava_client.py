from __future__ import annotations

import logging
from typing import Any

import requests

from .config import Settings
from .models import ActivityRecord


logger = logging.getLogger(__name__)

TIMEOUT_SECONDS = 30


class StravaError(Exception):
    pass


class StravaUnauthorizedError(StravaError):
    pass


class ActivityNotFoundError(StravaError):
    pass


class StravaRateLimitedError(StravaError):
    pass


class StravaNetworkError(StravaError):
    pass


class StravaUpdateError(StravaError):
    def __init__(self, activity_id: int, status_code: int, body: str = ""):
        super().__init__(f"Updating activity {activity_id} failed with status {status_code}.")
        self.activity_id = activity_id
        self.status_code = status_code
        self.body = body


def _is_success(response: requests.Response) -> bool:
    return 200 <= response.status_code < 300


def _raise_for_fetch_status(response: requests.Response, activity_id: int) -> None:
    status = response.status_code
    if status in (401, 403):
        raise StravaUnauthorizedError(f"Strava rejected the access token (status {status}).")
    if status == 404:
        raise ActivityNotFoundError(f"Activity {activity_id} was not found.")
    if status == 429:
        raise StravaRateLimitedError(
            f"Strava rate limit reached (usage={response.headers.get('X-RateLimit-Usage', 'unknown')})."
        )
    if not _is_success(response):
        raise StravaNetworkError(f"Fetching activity {activity_id} failed with status {status}.")


class StravaClient:
    """Bearer-token client for the two Strava calls the receiver needs."""

    def __init__(
        self,
        settings: Settings,
        session: requests.Session | None = None,
    ):
        self.access_token = settings.strava_access_token
        self.api_url = settings.strava_api_url
        self.timeout_seconds = settings.strava_timeout_seconds or TIMEOUT_SECONDS
        self.session = session or requests.Session()

    def _request(
        self, method: str, path: str, *, params: dict[str, Any] | None = None, data: dict[str, Any] | None = None
    ) -> requests.Response:
        try:
            return self.session.request(
                method,
                f"{self.api_url}{path}",
                headers={"Authorization": f"Bearer {self.access_token}"},
                params=params,
                data=data,
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as exc:
            raise StravaNetworkError(f"{method} {path} failed: {exc}") from exc

    def get_activity(self, activity_id: int) -> ActivityRecord:
        response = self._request("GET", f"/activities/{activity_id}")
        _raise_for_fetch_status(response, activity_id)
        try:
            payload = response.json()
        except ValueError as exc:
            raise StravaNetworkError(f"Activity {activity_id} response was not JSON.") from exc
        return ActivityRecord.from_payload(payload)

    def set_private_and_rename(self, activity_id: int, name: str, private: bool = True) -> None:
        response = self._request(
            "PUT",
            f"/activities/{activity_id}",
            data={"name": name, "private": "1" if private else "0"},
        )
        if not _is_success(response):
            raise StravaUpdateError(activity_id, response.status_code, response.text[:500])
        logger.debug("Strava accepted update for activity %s.", activity_id)
