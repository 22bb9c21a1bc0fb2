from flask import jsonify, request
from werkzeug.exceptions import HTTPException

ERROR_MESSAGES = {
    400: "Bad Request",
    404: "Not Found",
    405: "Method Not Allowed",
    413: "Payload too large",
}


def error_response(status: int, error: str, detail: str | None = None):
    """Uniform failure envelope: callers branch on ``ok`` alone."""
    body = {"ok": False, "error": error}
    if detail:
        body["detail"] = detail
    return jsonify(body), status


def register_error_handlers(app):
    @app.errorhandler(HTTPException)
    def _http_error(exc: HTTPException):
        if not request.path.startswith("/api"):
            return exc
        response, status = error_response(exc.code or 500, ERROR_MESSAGES.get(exc.code, exc.name))
        # keep the Allow header Flask computes for 405
        for key, value in exc.get_headers():
            if key.lower() == "allow":
                response.headers[key] = value
        return response, status
