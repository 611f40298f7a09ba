"""HTTP trigger blueprint: monday.com webhook endpoint."""

import json
import logging
import re
from typing import Any

import azure.functions as func

from monday_provisioner.config import load_config
from monday_provisioner.orchestration.pipeline import provisioning_pipeline_from_config

logger = logging.getLogger(__name__)

bp = func.Blueprint()

ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]

_UNSAFE_NAME_CHARS = re.compile(r"[^a-zA-Z0-9 ]")


def sanitize_item_name(name: str) -> str:
    """Strip every character that is not a letter, digit or space."""
    return _UNSAFE_NAME_CHARS.sub("", name)


def _json_response(payload: dict[str, Any], status_code: int) -> func.HttpResponse:
    return func.HttpResponse(
        json.dumps(payload), status_code=status_code, mimetype="application/json"
    )


def _text_response(body: str, status_code: int) -> func.HttpResponse:
    return func.HttpResponse(body, status_code=status_code, mimetype="text/plain")


def handle_webhook(req: func.HttpRequest) -> func.HttpResponse:
    """Handle a monday.com webhook delivery.

    Answers the subscription challenge handshake, and for item events
    provisions a destination folder for the item. Any path is accepted;
    only POST is allowed.
    """
    if req.method.upper() != "POST":
        return _text_response("Method Not Allowed\n", 405)

    try:
        payload = json.loads(req.get_body())
    except ValueError:
        logger.error("[handle_webhook] invalid JSON received")
        return _json_response({"error": "Invalid JSON"}, 400)
    if not isinstance(payload, dict):
        logger.error("[handle_webhook] payload is not a JSON object")
        return _json_response({"error": "Invalid JSON"}, 400)

    if payload.get("challenge"):
        logger.info("[handle_webhook] answering challenge handshake")
        return _json_response({"challenge": payload["challenge"]}, 200)

    event = payload.get("event")
    event = event if isinstance(event, dict) else {}
    pulse_name = event.get("pulseName")
    pulse_id = event.get("pulseId")
    if not pulse_name or not pulse_id:
        logger.error("[handle_webhook] pulseName or pulseId missing from payload")
        return _json_response({"error": "pulseName is required"}, 400)

    item_name = sanitize_item_name(str(pulse_name))
    logger.info(
        "[handle_webhook] item event received; pulse_id:%s;item_name:%s", pulse_id, item_name
    )

    try:
        config = load_config()
        pipeline = provisioning_pipeline_from_config(config)
        pipeline.provision_item(pulse_id, item_name)
        return _text_response("Directory structure created.\n", 200)

    except Exception:
        logger.error("[handle_webhook] provisioning failed; pulse_id:%s", pulse_id, exc_info=True)
        return _text_response("Internal Server Error\n", 500)


@bp.route(route="{*path}", methods=ALL_METHODS, auth_level=func.AuthLevel.ANONYMOUS)
def monday_webhook(req: func.HttpRequest) -> func.HttpResponse:
    """monday.com webhook endpoint, bound to every path and method."""
    return handle_webhook(req)
