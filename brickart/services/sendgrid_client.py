import httpx

from ..models import EmailJob

SENDGRID_API_BASE = "https://api.sendgrid.com/v3"
ERROR_BODY_LIMIT = 500


class EmailDeliveryError(Exception):
    def __init__(self, message: str, status_code: int | None = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = (body or "")[:ERROR_BODY_LIMIT]

    @property
    def detail(self) -> str:
        if self.status_code is None:
            return str(self)
        return f"SendGrid {self.status_code}: {self.body or '<empty>'}"


class SendGridClient:
    def __init__(self, api_key: str, timeout: float = 30):
        self.api_key = api_key
        self.timeout = timeout
        self.headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def send(self, job: EmailJob) -> None:
        """Submit one message to ``/mail/send``. SendGrid answers 202 with an empty body."""
        try:
            with httpx.Client(timeout=self.timeout) as client:
                r = client.post(f"{SENDGRID_API_BASE}/mail/send", headers=self.headers, json=job.to_sendgrid())
        except httpx.HTTPError as exc:
            raise EmailDeliveryError(f"SendGrid request failed: {exc}") from exc
        if not r.is_success:
            raise EmailDeliveryError("SendGrid rejected the message", status_code=r.status_code, body=r.text)
