from flask import Blueprint

bp = Blueprint("pages", __name__)


@bp.get("/")
def health():
    return "Brick Art Publisher is alive ✅", 200, {"Content-Type": "text/plain; charset=utf-8"}
