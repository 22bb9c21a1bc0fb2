"""Article title, tags and HTML body for a gallery submission (no I/O)."""
from datetime import datetime, timedelta

from ..models import Submission
from ..utils.templates import render

DEFAULT_NICKNAME = "Brick artist"
DEFAULT_CATEGORY = "Uncategorized"
UNKNOWN = "Unknown"


def _count_key(value) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def brick_breakdown(counts: dict | None) -> list[tuple[str, object]]:
    """Color/count pairs, largest count first; ties ordered by color name."""
    items = [(str(color), n) for color, n in (counts or {}).items()]
    return sorted(items, key=lambda kv: (-_count_key(kv[1]), kv[0].lower()))


def grid_label(grid: str | None) -> str:
    if not grid:
        return UNKNOWN
    g = str(grid).strip()
    return g if "x" in g.lower() else f"{g}x{g}"


def format_timestamp(timestamp: str | None) -> str:
    if not timestamp:
        return ""
    try:
        dt = datetime.fromisoformat(str(timestamp).replace("Z", "+00:00"))
    except ValueError:
        return str(timestamp)
    label = dt.strftime("%B %d, %Y %H:%M")
    if dt.utcoffset() == timedelta(0):
        label += " UTC"
    return label


def compose_title(sub: Submission) -> str:
    nickname = sub.nickname or DEFAULT_NICKNAME
    category = sub.category or DEFAULT_CATEGORY
    if sub.grid:
        return f"{nickname} – {category} ({grid_label(sub.grid)})"
    return f"{nickname} – {category}"


def compose_tags(sub: Submission, gallery_tag: str = "") -> str:
    tags = [sub.category, grid_label(sub.grid) if sub.grid else None, sub.baseplate, gallery_tag]
    seen = []
    for t in tags:
        t = str(t or "").replace(",", " ").strip()
        if t and t not in seen:
            seen.append(t)
    return ", ".join(seen)


def compose_article_html(sub: Submission, clean_url: str | None = None, logo_url: str | None = None) -> str:
    total = sub.total_bricks
    return render(
        "article.html",
        nickname=sub.nickname or DEFAULT_NICKNAME,
        category=sub.category or DEFAULT_CATEGORY,
        grid_label=grid_label(sub.grid),
        baseplate=sub.baseplate or UNKNOWN,
        total_bricks=total if total not in (None, "") else UNKNOWN,
        breakdown=brick_breakdown(sub.brick_counts),
        clean_url=clean_url,
        logo_url=logo_url,
        submitted_on=format_timestamp(sub.timestamp),
    )
