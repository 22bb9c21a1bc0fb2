import logging

from ..models import ArticleRecord, AuxiliaryOutcome
from .shopify_client import ShopifyAPIError, ShopifyClient

log = logging.getLogger(__name__)

METAFIELD_NAMESPACE = "brickart"
METAFIELD_KEY = "submitter_email"


class PublishError(Exception):
    """Article creation was rejected by Shopify; never retried."""

    def __init__(self, message: str, status_code: int | None = None, detail: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail or message


class ArticlePublisher:
    def __init__(self, client: ShopifyClient, blog_id: str, publish: bool = False):
        self.client = client
        self.blog_id = blog_id
        self.publish = publish

    def publish_article(self, title: str, body_html: str, tags: str) -> ArticleRecord:
        record = ArticleRecord(title=title, body_html=body_html, tags=tags, published=self.publish)
        payload = {
            "title": record.title,
            "body_html": record.body_html,
            "published": record.published,
        }
        if record.tags:
            payload["tags"] = record.tags

        try:
            article = self.client.create_article(self.blog_id, payload)
        except ShopifyAPIError as exc:
            log.error("Article create failed: %s", exc.detail)
            raise PublishError("Create article failed", status_code=exc.status_code, detail=exc.detail) from exc

        record.id = article.get("id")
        record.handle = article.get("handle")
        record.blog_handle = (article.get("blog") or {}).get("handle") or article.get("blog_handle")
        record.url = self.client.article_url(record.blog_handle, record.handle)
        log.info("Created article %s (%s)", record.id, record.url or "no public url")
        return record


def record_private_email(client: ShopifyClient, article_id, email: str | None) -> AuxiliaryOutcome:
    """Attach the submitter email as a private metafield. Never raises."""
    name = "metafield"
    if not email:
        return AuxiliaryOutcome(name=name, ok=True, detail="skipped: no email")
    if not article_id:
        return AuxiliaryOutcome(name=name, ok=False, detail="skipped: article has no id")
    try:
        client.create_metafield(article_id, METAFIELD_NAMESPACE, METAFIELD_KEY, str(email))
    except ShopifyAPIError as exc:
        log.warning("Metafield save failed for article %s: %s", article_id, exc.detail)
        return AuxiliaryOutcome(name=name, ok=False, detail=exc.detail)
    except Exception as exc:
        log.warning("Metafield save failed for article %s", article_id, exc_info=True)
        return AuxiliaryOutcome(name=name, ok=False, detail=str(exc))
    return AuxiliaryOutcome(name=name, ok=True)
