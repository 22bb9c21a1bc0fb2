import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()

UPLOAD_STRATEGIES = ("direct", "staged")

DEFAULT_ALLOWED_ORIGINS = (
    "https://www.brick-art.com",
    "https://brick-art.com",
    "http://localhost:3000",
)

REQUIRED_KEYS = (
    "SHOPIFY_STORE_DOMAIN",
    "SHOPIFY_ADMIN_TOKEN",
    "SHOPIFY_BLOG_ID",
    "SENDGRID_API_KEY",
    "FROM_EMAIL",
)


def _to_bool(value) -> bool:
    return str(value or "").strip().lower() in {"1", "true", "yes", "on"}


def _split_csv(value) -> tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, (list, tuple)):
        return tuple(str(v).strip() for v in value if str(v).strip())
    return tuple(v.strip() for v in str(value).split(",") if v.strip())


class ConfigError(RuntimeError):
    """Raised at startup when required configuration is missing or invalid."""


class Config:
    SHOPIFY_STORE_DOMAIN = os.getenv("SHOPIFY_STORE_DOMAIN")
    SHOPIFY_ADMIN_TOKEN = os.getenv("SHOPIFY_ADMIN_TOKEN")
    SHOPIFY_API_VERSION = os.getenv("SHOPIFY_API_VERSION", "2024-10")
    SHOPIFY_BLOG_ID = os.getenv("SHOPIFY_BLOG_ID")
    SENDGRID_API_KEY = os.getenv("SENDGRID_API_KEY")
    FROM_EMAIL = os.getenv("FROM_EMAIL")
    BCC_EMAIL = os.getenv("BCC_EMAIL")
    UPLOAD_STRATEGY = os.getenv("UPLOAD_STRATEGY", "direct")
    PUBLISH_ARTICLES = os.getenv("PUBLISH_ARTICLES", "false")
    CORS_ALLOWED_ORIGINS = os.getenv("CORS_ALLOWED_ORIGINS", ",".join(DEFAULT_ALLOWED_ORIGINS))
    UPLOAD_POLL_INTERVAL = os.getenv("UPLOAD_POLL_INTERVAL", "0.7")
    UPLOAD_POLL_ATTEMPTS = os.getenv("UPLOAD_POLL_ATTEMPTS", "20")
    MAX_EMAIL_PAYLOAD_BYTES = os.getenv("MAX_EMAIL_PAYLOAD_BYTES", str(4 * 1024 * 1024))
    GALLERY_TAG = os.getenv("GALLERY_TAG", "Brick Art Gallery")


class DevConfig(Config):
    DEBUG = True


class ProdConfig(Config):
    DEBUG = False


@dataclass(frozen=True)
class Settings:
    """Immutable runtime settings, built once from the Flask config in ``create_app``."""

    store_domain: str
    admin_token: str
    blog_id: str
    sendgrid_api_key: str
    from_email: str
    bcc_email: str | None = None
    api_version: str = "2024-10"
    upload_strategy: str = "direct"
    publish_articles: bool = False
    allowed_origins: tuple[str, ...] = DEFAULT_ALLOWED_ORIGINS
    poll_interval: float = 0.7
    poll_attempts: int = 20
    max_email_payload_bytes: int = 4 * 1024 * 1024
    gallery_tag: str = "Brick Art Gallery"

    @classmethod
    def from_mapping(cls, cfg) -> "Settings":
        missing = [k for k in REQUIRED_KEYS if not str(cfg.get(k) or "").strip()]
        if missing:
            raise ConfigError(f"Missing required configuration: {', '.join(missing)}")

        strategy = str(cfg.get("UPLOAD_STRATEGY") or "direct").strip().lower()
        if strategy not in UPLOAD_STRATEGIES:
            raise ConfigError(
                f"UPLOAD_STRATEGY must be one of {', '.join(UPLOAD_STRATEGIES)} (got {strategy!r})"
            )

        try:
            poll_interval = float(cfg.get("UPLOAD_POLL_INTERVAL", 0.7))
            poll_attempts = int(cfg.get("UPLOAD_POLL_ATTEMPTS", 20))
            max_payload = int(cfg.get("MAX_EMAIL_PAYLOAD_BYTES", 4 * 1024 * 1024))
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid numeric configuration: {exc}") from exc
        if poll_attempts < 1:
            raise ConfigError("UPLOAD_POLL_ATTEMPTS must be at least 1")
        if poll_interval < 0:
            raise ConfigError("UPLOAD_POLL_INTERVAL must not be negative")

        return cls(
            store_domain=str(cfg["SHOPIFY_STORE_DOMAIN"]).strip(),
            admin_token=str(cfg["SHOPIFY_ADMIN_TOKEN"]).strip(),
            blog_id=str(cfg["SHOPIFY_BLOG_ID"]).strip(),
            sendgrid_api_key=str(cfg["SENDGRID_API_KEY"]).strip(),
            from_email=str(cfg["FROM_EMAIL"]).strip(),
            bcc_email=(str(cfg.get("BCC_EMAIL") or "").strip() or None),
            api_version=str(cfg.get("SHOPIFY_API_VERSION") or "2024-10").strip(),
            upload_strategy=strategy,
            publish_articles=_to_bool(cfg.get("PUBLISH_ARTICLES")),
            allowed_origins=_split_csv(cfg.get("CORS_ALLOWED_ORIGINS")) or DEFAULT_ALLOWED_ORIGINS,
            poll_interval=poll_interval,
            poll_attempts=poll_attempts,
            max_email_payload_bytes=max_payload,
            gallery_tag=str(cfg.get("GALLERY_TAG") or "").strip(),
        )
