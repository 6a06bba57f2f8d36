from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass
from typing import Any

from .config import Settings
from .filters import MalformedActivityError, evaluate_activity
from .models import InvalidPayloadError
from .storage import DuplicateActivityError, ProcessedActivityStore, StoreUnavailableError
from .strava_client import StravaClient, StravaError, StravaUpdateError


logger = logging.getLogger(__name__)

REPLACEMENT_NAME = "Rusty"


@dataclass(frozen=True)
class PipelineContext:
    store: ProcessedActivityStore
    client: StravaClient

    @classmethod
    def from_settings(cls, settings: Settings) -> "PipelineContext":
        return cls(
            store=ProcessedActivityStore(settings.processed_db_file),
            client=StravaClient(settings),
        )


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


def process_activity(activity_id: int, context: PipelineContext) -> dict[str, Any]:
    """Fetch, filter and, when every filter passes, rename and privatize one activity.

    Never raises for the expected failure modes; each one is logged and
    reported through the ``status`` of the returned dict.
    """
    store = context.store
    try:
        if store.has_processed(activity_id):
            processed_at = store.processed_at(activity_id)
            logger.info("Activity %s already processed at %s.", activity_id, processed_at)
            return {
                "status": "already_processed",
                "activity_id": activity_id,
                "processed_at": processed_at.isoformat() if processed_at else None,
            }
    except StoreUnavailableError as exc:
        logger.warning("Dedup store unavailable while checking activity %s: %s", activity_id, exc)
        return {"status": "store_failed", "activity_id": activity_id, "error": str(exc)}

    try:
        activity = context.client.get_activity(activity_id)
    except StravaError as exc:
        logger.warning("Could not fetch activity %s: %s", activity_id, exc)
        return {"status": "fetch_failed", "activity_id": activity_id, "error": str(exc)}
    except InvalidPayloadError as exc:
        logger.warning("Activity %s has malformed data: %s", activity_id, exc)
        return {"status": "invalid_activity", "activity_id": activity_id, "error": str(exc)}

    try:
        decision = evaluate_activity(activity)
    except MalformedActivityError as exc:
        logger.warning("Activity %s has malformed data: %s", activity_id, exc)
        return {"status": "invalid_activity", "activity_id": activity_id, "error": str(exc)}

    if not decision.accepted:
        logger.info("Activity %s skipped: %s.", activity_id, decision.reason)
        return {"status": "rejected", "activity_id": activity_id, "reason": decision.reason}

    try:
        context.client.set_private_and_rename(activity_id, REPLACEMENT_NAME, private=True)
    except StravaUpdateError as exc:
        logger.warning(
            "Failed to update activity %s. Status: %s",
            activity_id,
            exc.status_code,
        )
        return {
            "status": "update_failed",
            "activity_id": activity_id,
            "status_code": exc.status_code,
            "error": str(exc),
        }
    except StravaError as exc:
        logger.warning("Failed to update activity %s: %s", activity_id, exc)
        return {"status": "update_failed", "activity_id": activity_id, "error": str(exc)}

    try:
        store.mark_processed(activity_id)
    except DuplicateActivityError:
        logger.info("Activity %s updated; it was already recorded by a concurrent delivery.", activity_id)
        return {"status": "updated", "activity_id": activity_id, "recorded": False}
    except StoreUnavailableError as exc:
        logger.warning("Activity %s updated but could not be recorded: %s", activity_id, exc)
        return {"status": "store_failed", "activity_id": activity_id, "error": str(exc)}
    logger.info("Activity %s updated successfully.", activity_id)
    return {"status": "updated", "activity_id": activity_id, "recorded": True}


def main() -> None:
    parser = argparse.ArgumentParser(description="Rename and privatize a single Strava walk if it matches the route.")
    parser.add_argument(
        "-a",
        "--activity-id",
        type=int,
        required=True,
        help="Strava activity ID to process.",
    )
    args = parser.parse_args()

    settings = Settings.from_env()
    configure_logging(settings.log_level)
    try:
        settings.validate()
        settings.ensure_state_paths()
        context = PipelineContext.from_settings(settings)
        context.store.initialize()
    except (ValueError, OSError, StoreUnavailableError) as exc:
        logger.error("Startup failed: %s", exc)
        sys.exit(1)

    result = process_activity(args.activity_id, context)
    print(json.dumps(result, indent=2, sort_keys=True))


if __name__ == "__main__":
    main()
