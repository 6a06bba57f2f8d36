from __future__ import annotations

import atexit
import logging
import sys
from datetime import datetime, timezone

from flask import Flask, request

from .config import Settings
from .dispatch import EventDispatcher
from .models import InvalidPayloadError, StravaEvent
from .pipeline import PipelineContext, configure_logging, process_activity
from .storage import StoreUnavailableError


logger = logging.getLogger(__name__)

WEBHOOK_PATH = "/webhook"
ACK_BODY = "OK"


def create_app(
    settings: Settings,
    context: PipelineContext,
    dispatcher: EventDispatcher,
) -> Flask:
    app = Flask(__name__)

    @app.get(WEBHOOK_PATH)
    def webhook_verify():
        challenge = request.args.get("hub.challenge")
        if challenge is None:
            return "Missing hub.challenge", 400
        if settings.webhook_verify_token is not None:
            if request.args.get("hub.verify_token") != settings.webhook_verify_token:
                logger.warning("Rejected webhook verification with a mismatched verify token.")
                return "Forbidden", 403
        logger.info("Answered webhook verification challenge.")
        return challenge, 200, {"Content-Type": "text/plain; charset=utf-8"}

    @app.post(WEBHOOK_PATH)
    def webhook_event():
        payload = request.get_json(force=True, silent=True)
        try:
            event = StravaEvent.from_payload(payload)
        except InvalidPayloadError as exc:
            logger.info("Ignoring undecodable webhook body: %s", exc)
            return ACK_BODY, 200

        if not event.is_activity:
            logger.info("Ignoring %s event for %s %s.", event.aspect_type, event.object_type, event.object_id)
            return ACK_BODY, 200

        logger.info("Received %s event for activity %s.", event.aspect_type, event.object_id)
        try:
            dispatcher.dispatch(process_activity, event.object_id, context)
        except RuntimeError as exc:
            logger.warning("Could not dispatch activity %s: %s", event.object_id, exc)
        return ACK_BODY, 200

    @app.get("/health")
    def health() -> tuple[dict, int]:
        now_iso = datetime.now(timezone.utc).isoformat()
        try:
            processed_count = context.store.count()
        except StoreUnavailableError as exc:
            return {"status": "error", "time_utc": now_iso, "error": str(exc)}, 503
        return {"status": "ok", "time_utc": now_iso, "processed_count": processed_count}, 200

    return app


def main() -> None:
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

    dispatcher = EventDispatcher(max_workers=settings.dispatch_workers)
    atexit.register(dispatcher.shutdown)

    app = create_app(settings, context, dispatcher)
    logger.info("Listening on %s:%s", settings.api_host, settings.api_port)
    app.run(host=settings.api_host, port=settings.api_port, debug=settings.debug, use_reloader=False)


if __name__ == "__main__":
    main()
