"""Email a rendered design (PNG image or PDF) to the person who made it."""
import logging
import re

from ..config import Settings
from ..models import EmailAttachment, EmailJob
from ..utils.templates import render
from .composer import brick_breakdown
from .sendgrid_client import SendGridClient

log = logging.getLogger(__name__)

SUBJECT = "Your Brick Art mosaic design"

# kind -> (template, extension, mime type)
ATTACHMENT_KINDS = {
    "image": ("email/image", "png", "image/png"),
    "design": ("email/design", "pdf", "application/pdf"),
}


def attachment_filename(nickname: str | None, grid, ext: str) -> str:
    safe = re.sub(r"[^a-z0-9_\-]+", "_", str(nickname or "design"), flags=re.IGNORECASE)
    return f"BrickArt-{safe}-{size_label(grid)}.{ext}"


def size_label(grid) -> str:
    return f"{grid}x{grid}" if grid not in (None, "") else "mosaic"


def _total(value):
    # bool is an int subclass; only real numbers make it into the email
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    return None


def compose_email(kind: str, settings: Settings, *, recipient: str, attachment_b64: str,
                  nickname: str | None = None, grid=None, baseplate: str | None = None,
                  total_bricks=None, brick_counts: dict | None = None) -> EmailJob:
    template, ext, mime_type = ATTACHMENT_KINDS[kind]
    context = {
        "grid": grid,
        "size_label": size_label(grid),
        "baseplate": baseplate,
        "total_bricks": _total(total_bricks),
        "breakdown": brick_breakdown(brick_counts),
    }
    return EmailJob(
        recipient=recipient,
        sender=settings.from_email,
        bcc=settings.bcc_email,
        subject=SUBJECT,
        text_body=render(f"{template}.txt", **context),
        html_body=render(f"{template}.html", **context),
        attachment=EmailAttachment(
            content_b64=attachment_b64,
            filename=attachment_filename(nickname, grid, ext),
            mime_type=mime_type,
        ),
    )


class Notifier:
    def __init__(self, settings: Settings, client: SendGridClient):
        self.settings = settings
        self.client = client

    def send(self, kind: str, **fields) -> EmailJob:
        """Compose and send in one call. Raises ``EmailDeliveryError``; no retry."""
        job = compose_email(kind, self.settings, **fields)
        self.client.send(job)
        log.info("Sent %s email with %s (%d base64 chars)", kind, job.attachment.filename,
                 len(job.attachment.content_b64))
        return job
