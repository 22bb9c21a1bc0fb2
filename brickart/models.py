from dataclasses import dataclass, field
from typing import Any


@dataclass
class Submission:
    """One mosaic-design payload posted by the frontend."""

    timestamp: str
    nickname: str | None = None
    category: str | None = None
    grid: str | None = None
    baseplate: str | None = None
    total_bricks: Any = None
    brick_counts: dict[str, Any] = field(default_factory=dict)
    image_clean_b64: str | None = None
    image_logo_b64: str | None = None
    submitter_email: str | None = None

    @classmethod
    def from_payload(cls, body: dict) -> "Submission":
        counts = body.get("brickCounts")
        grid = body.get("grid")
        return cls(
            timestamp=str(body.get("timestamp") or ""),
            nickname=body.get("nickname") or None,
            category=body.get("category") or None,
            grid=str(grid) if grid not in (None, "") else None,
            baseplate=body.get("baseplate") or None,
            total_bricks=body.get("totalBricks"),
            brick_counts=dict(counts) if isinstance(counts, dict) else {},
            image_clean_b64=body.get("imageClean_b64") or None,
            image_logo_b64=body.get("imageLogo_b64") or None,
            # submitterEmail is current; userEmail is what older frontends send
            submitter_email=body.get("submitterEmail") or body.get("userEmail") or None,
        )


@dataclass
class UploadedAsset:
    slot: str
    filename: str
    payload_b64: str
    data: bytes = b""
    mime_type: str = "image/png"
    url: str | None = None


@dataclass
class ArticleRecord:
    title: str
    body_html: str
    tags: str
    published: bool = False
    id: int | str | None = None
    handle: str | None = None
    blog_handle: str | None = None
    url: str | None = None


@dataclass
class EmailAttachment:
    content_b64: str
    filename: str
    mime_type: str


@dataclass
class EmailJob:
    recipient: str
    sender: str
    subject: str
    text_body: str
    html_body: str
    attachment: EmailAttachment
    bcc: str | None = None

    def to_sendgrid(self) -> dict:
        personalization: dict[str, Any] = {"to": [{"email": self.recipient}]}
        # SendGrid rejects a bcc identical to a "to" address
        if self.bcc and self.bcc.lower() != self.recipient.lower():
            personalization["bcc"] = [{"email": self.bcc}]
        return {
            "personalizations": [personalization],
            "from": {"email": self.sender},
            "subject": self.subject,
            "content": [
                {"type": "text/plain", "value": self.text_body},
                {"type": "text/html", "value": self.html_body},
            ],
            "attachments": [
                {
                    "content": self.attachment.content_b64,
                    "filename": self.attachment.filename,
                    "type": self.attachment.mime_type,
                    "disposition": "attachment",
                }
            ],
        }


@dataclass
class AuxiliaryOutcome:
    """Result of a best-effort step whose failure never fails the request."""

    name: str
    ok: bool
    detail: str | None = None


@dataclass
class PipelineResult:
    article: ArticleRecord
    clean_url: str | None = None
    logo_url: str | None = None
    auxiliary: list[AuxiliaryOutcome] = field(default_factory=list)

    def to_response(self) -> dict:
        return {
            "ok": True,
            "articleId": self.article.id,
            "articleUrl": self.article.url,
            "files": {"cleanUrl": self.clean_url, "logoUrl": self.logo_url},
        }
