from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


load_dotenv()

DEFAULT_API_URL = "https://www.strava.com/api/v3"


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _int_env(name: str, default: int, minimum: int | None = None, maximum: int | None = None) -> int:
    value = os.getenv(name)
    if value is None:
        parsed = default
    else:
        try:
            parsed = int(value.strip())
        except ValueError:
            parsed = default

    if minimum is not None and parsed < minimum:
        parsed = minimum
    if maximum is not None and parsed > maximum:
        parsed = maximum
    return parsed


def _str_env(*names: str, default: str = "") -> str:
    for name in names:
        value = os.getenv(name)
        if value is not None and value.strip():
            return value.strip()
    return default


@dataclass(frozen=True)
class Settings:
    strava_access_token: str
    strava_api_url: str
    strava_timeout_seconds: int
    webhook_verify_token: str | None

    api_host: str
    api_port: int
    dispatch_workers: int
    log_level: str
    debug: bool

    state_dir: Path
    processed_db_file: Path

    @classmethod
    def from_env(cls) -> "Settings":
        state_dir = Path(os.getenv("STATE_DIR", "state")).resolve()
        db_name = Path(_str_env("PROCESSED_DB_FILE", default="processed_activities.db"))
        processed_db_file = db_name if db_name.is_absolute() else state_dir / db_name

        return cls(
            strava_access_token=_str_env("STRAVA_ACCESS_TOKEN", "ACCESS_TOKEN"),
            strava_api_url=_str_env("STRAVA_API_URL", default=DEFAULT_API_URL).rstrip("/"),
            strava_timeout_seconds=_int_env("STRAVA_TIMEOUT_SECONDS", 30, minimum=1, maximum=300),
            webhook_verify_token=_str_env("WEBHOOK_VERIFY_TOKEN") or None,
            api_host=_str_env("API_HOST", default="0.0.0.0"),
            api_port=_int_env("API_PORT", 3000, minimum=1, maximum=65535),
            dispatch_workers=_int_env("DISPATCH_WORKERS", 4, minimum=1, maximum=32),
            log_level=_str_env("LOG_LEVEL", default="INFO").upper(),
            debug=_bool_env("FLASK_DEBUG", False),
            state_dir=state_dir,
            processed_db_file=processed_db_file,
        )

    def validate(self) -> None:
        if not self.strava_access_token:
            raise ValueError("Missing required environment variables: STRAVA_ACCESS_TOKEN")

    def ensure_state_paths(self) -> None:
        self.state_dir.mkdir(parents=True, exist_ok=True)
        self.processed_db_file.parent.mkdir(parents=True, exist_ok=True)
