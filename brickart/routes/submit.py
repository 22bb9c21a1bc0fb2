from flask import Blueprint, current_app, jsonify, request

from ..extensions import services
from ..models import Submission
from ..services.publisher import PublishError
from .errors import error_response

bp = Blueprint("submit_api", __name__)


def _missing_fields(body: dict) -> list[str]:
    missing = []
    if not body.get("timestamp"):
        missing.append("timestamp")
    if not body.get("imageClean_b64") and not body.get("imageLogo_b64"):
        missing.append("images")
    return missing


@bp.post("/submit")
def submit():
    body = request.get_json(force=True, silent=True)
    if not isinstance(body, dict):
        return error_response(400, "Invalid JSON body")

    missing = _missing_fields(body)
    if missing:
        return error_response(400, f"Missing required fields: {', '.join(missing)}")

    sub = Submission.from_payload(body)
    current_app.logger.info(
        "Submission nickname=%r category=%r grid=%r timestamp=%r clean_len=%d logo_len=%d has_email=%s",
        sub.nickname, sub.category, sub.grid, sub.timestamp,
        len(sub.image_clean_b64 or ""), len(sub.image_logo_b64 or ""), bool(sub.submitter_email),
    )

    try:
        result = services().pipeline.run(sub)
    except PublishError as exc:
        current_app.logger.error("Create article failed: %s", exc.detail)
        return error_response(500, "Create article failed", exc.detail)
    except Exception as exc:
        current_app.logger.exception("Submit server error")
        return error_response(500, "Server error", str(exc))

    for outcome in result.auxiliary:
        if not outcome.ok:
            current_app.logger.warning("Auxiliary step %s failed: %s", outcome.name, outcome.detail)

    return jsonify(result.to_response())
