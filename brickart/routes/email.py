import json

from flask import Blueprint, current_app, jsonify, request

from ..extensions import services
from ..services.sendgrid_client import EmailDeliveryError
from ..services.uploader import strip_data_uri
from .errors import error_response

bp = Blueprint("email_api", __name__)


class _BodyError(Exception):
    def __init__(self, status: int, error: str):
        super().__init__(error)
        self.status = status
        self.error = error


def _read_json_body(limit: int) -> dict:
    """Parse the JSON body, refusing anything over ``limit`` bytes before parsing."""
    if request.content_length is not None and request.content_length > limit:
        raise _BodyError(413, "Payload too large")
    raw = request.stream.read(limit + 1)
    if len(raw) > limit:
        raise _BodyError(413, "Payload too large")
    try:
        data = json.loads(raw) if raw else {}
    except ValueError:
        raise _BodyError(400, "Invalid JSON body")
    if not isinstance(data, dict):
        raise _BodyError(400, "Invalid JSON body")
    return data


def _send(kind: str, attachment_key: str, grid_key: str):
    svc = services()
    try:
        data = _read_json_body(svc.settings.max_email_payload_bytes)
    except _BodyError as exc:
        current_app.logger.warning("Rejected %s email body: %s", kind, exc.error)
        return error_response(exc.status, exc.error)

    email = str(data.get("email") or "").strip()
    attachment = strip_data_uri(data.get(attachment_key))
    if not email or not attachment:
        current_app.logger.warning(
            "Missing email fields: email=%s %s=%s", bool(email), attachment_key, bool(attachment)
        )
        return error_response(400, f"Missing 'email' or '{attachment_key}' in body")

    try:
        svc.notifier.send(
            kind,
            recipient=email,
            attachment_b64=attachment,
            nickname=data.get("nickname"),
            grid=data.get(grid_key),
            baseplate=data.get("baseplate"),
            total_bricks=data.get("totalBricks"),
            brick_counts=data.get("brickCounts") if isinstance(data.get("brickCounts"), dict) else None,
        )
    except EmailDeliveryError as exc:
        current_app.logger.error("SendGrid error: %s", exc.detail)
        return error_response(502, "Email delivery failed", exc.detail)
    except Exception as exc:
        current_app.logger.exception("/api/email-%s error", kind)
        return error_response(500, "Server error", str(exc))

    return jsonify({"ok": True})


@bp.post("/email-image")
def email_image():
    return _send("image", "imageBase64", "grid")


@bp.post("/email-design")
def email_design():
    return _send("design", "pdfBase64", "whichGrid")
