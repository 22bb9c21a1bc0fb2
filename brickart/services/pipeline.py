import logging
from concurrent.futures import ThreadPoolExecutor

from ..config import Settings
from ..models import AuxiliaryOutcome, PipelineResult, Submission
from .composer import compose_article_html, compose_tags, compose_title
from .publisher import ArticlePublisher, record_private_email
from .shopify_client import ShopifyAPIError, ShopifyClient
from .uploader import ImageUploader, UploadError, safe_filename

log = logging.getLogger(__name__)

IMAGE_SLOTS = ("clean", "logo")


class SubmissionPipeline:
    """Upload images → compose article → publish → record private email."""

    def __init__(self, settings: Settings, client: ShopifyClient, uploader: ImageUploader,
                 publisher: ArticlePublisher | None = None):
        self.settings = settings
        self.client = client
        self.uploader = uploader
        self.publisher = publisher or ArticlePublisher(client, settings.blog_id, settings.publish_articles)

    def _upload_one(self, sub: Submission, slot: str, payload: str | None) -> tuple[str | None, AuxiliaryOutcome | None]:
        filename = safe_filename(sub.timestamp, sub.nickname, slot)
        try:
            return self.uploader.upload(payload, filename, slot=slot), None
        except (UploadError, ShopifyAPIError) as exc:
            detail = getattr(exc, "detail", None) or str(exc)
            log.error("%s upload failed: %s", slot, detail)
            return None, AuxiliaryOutcome(name=f"{slot}_upload", ok=False, detail=detail)
        except Exception as exc:
            log.exception("%s upload failed", slot)
            return None, AuxiliaryOutcome(name=f"{slot}_upload", ok=False, detail=str(exc))

    def upload_images(self, sub: Submission) -> tuple[dict[str, str | None], list[AuxiliaryOutcome]]:
        payloads = {"clean": sub.image_clean_b64, "logo": sub.image_logo_b64}
        with ThreadPoolExecutor(max_workers=len(IMAGE_SLOTS)) as pool:
            futures = {slot: pool.submit(self._upload_one, sub, slot, payloads[slot]) for slot in IMAGE_SLOTS}
            results = {slot: f.result() for slot, f in futures.items()}

        urls = {slot: results[slot][0] for slot in IMAGE_SLOTS}
        failures = [results[slot][1] for slot in IMAGE_SLOTS if results[slot][1] is not None]
        return urls, failures

    def run(self, sub: Submission) -> PipelineResult:
        """Raises ``PublishError`` if the article cannot be created; everything else is best-effort."""
        urls, auxiliary = self.upload_images(sub)

        title = compose_title(sub)
        body_html = compose_article_html(sub, clean_url=urls["clean"], logo_url=urls["logo"])
        tags = compose_tags(sub, self.settings.gallery_tag)

        article = self.publisher.publish_article(title, body_html, tags)

        if sub.submitter_email:
            auxiliary.append(record_private_email(self.client, article.id, sub.submitter_email))

        return PipelineResult(
            article=article,
            clean_url=urls["clean"],
            logo_url=urls["logo"],
            auxiliary=auxiliary,
        )
