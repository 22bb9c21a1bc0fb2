"""Upload submission images to Shopify Files and resolve their public URLs.

Two strategies exist because the Files REST endpoint and the GraphQL staged
upload flow behave differently per store/API version; a deployment picks one
with ``UPLOAD_STRATEGY`` and ``build_uploader`` instantiates it once.

Shopify may index a freshly created file asynchronously, so both strategies
fall back to polling a file lookup by filename when creation returns no URL.
"""
import base64
import binascii
import logging
import re
import time
from io import BytesIO
from typing import Callable

from PIL import Image, UnidentifiedImageError

from ..models import UploadedAsset
from ..utils.polling import poll_until
from .shopify_client import ShopifyClient

log = logging.getLogger(__name__)

MIN_BASE64_LENGTH = 64

_DATA_URI_PREFIX = re.compile(r"^\s*data:[\w.+-]+/[\w.+-]+;base64,", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")

_MIME_BY_FORMAT = {
    "PNG": "image/png",
    "JPEG": "image/jpeg",
    "WEBP": "image/webp",
    "GIF": "image/gif",
}


class UploadError(Exception):
    """An image could not be turned into a public URL."""


class UploadTimeout(UploadError):
    """The file was created but never became resolvable within the polling window."""


def strip_data_uri(payload: str | None) -> str:
    if not payload:
        return ""
    return _WHITESPACE.sub("", _DATA_URI_PREFIX.sub("", str(payload)))


def safe_filename(timestamp: str, nickname: str | None, slot: str, ext: str = "png") -> str:
    stamp = re.sub(r"[^0-9A-Za-z]", "", str(timestamp or ""))
    name = re.sub(r"[^a-z0-9]+", "-", str(nickname or "artist").lower()).strip("-") or "artist"
    return f"{stamp}-{name}-{slot}.{ext}"


def sniff_mime_type(data: bytes) -> str:
    try:
        with Image.open(BytesIO(data)) as img:
            return _MIME_BY_FORMAT.get(img.format or "", "image/png")
    except (UnidentifiedImageError, OSError):
        # frontend always renders PNG; trust that when Pillow can't tell
        return "image/png"


def prepare_asset(payload: str | None, filename: str, slot: str) -> UploadedAsset | None:
    """Normalize a base64 payload; ``None`` means no image was supplied."""
    raw_b64 = strip_data_uri(payload)
    if len(raw_b64) < MIN_BASE64_LENGTH:
        return None
    try:
        data = base64.b64decode(raw_b64, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise UploadError(f"{slot} image is not valid base64") from exc
    return UploadedAsset(
        slot=slot,
        filename=filename,
        payload_b64=raw_b64,
        data=data,
        mime_type=sniff_mime_type(data),
    )


class ImageUploader:
    strategy = ""

    def __init__(self, client: ShopifyClient, *, poll_interval: float = 0.7, poll_attempts: int = 20,
                 sleep: Callable[[float], None] = time.sleep):
        self.client = client
        self.poll_interval = poll_interval
        self.poll_attempts = poll_attempts
        self.sleep = sleep

    def upload(self, payload: str | None, filename: str, slot: str = "image") -> str | None:
        """Return the public URL for ``payload``, or ``None`` when there is nothing to upload.

        Raises ``ShopifyAPIError`` when Shopify rejects the upload and
        ``UploadTimeout`` when the created file never shows up.
        """
        asset = prepare_asset(payload, filename, slot)
        if asset is None:
            log.info("No %s image supplied; skipping upload", slot)
            return None

        asset.url = self._create(asset)
        if not asset.url:
            result = poll_until(
                lambda: self._lookup(asset),
                interval=self.poll_interval,
                max_attempts=self.poll_attempts,
                sleep=self.sleep,
            )
            if result.timed_out:
                raise UploadTimeout(
                    f"{asset.filename} was not resolvable after {result.attempts} lookups"
                )
            log.info("Resolved %s after %d lookup(s)", asset.filename, result.attempts)
            asset.url = result.value

        log.info("File ready: %s -> %s", asset.filename, asset.url)
        return asset.url

    def _create(self, asset: UploadedAsset) -> str | None:
        raise NotImplementedError

    def _lookup(self, asset: UploadedAsset) -> str | None:
        raise NotImplementedError


class DirectUploader(ImageUploader):
    """REST ``/files.json`` with the base64 bytes as an attachment."""

    strategy = "direct"

    def _create(self, asset: UploadedAsset) -> str | None:
        body = self.client.create_file(asset.payload_b64, asset.filename)
        url = (body.get("file") or {}).get("url")
        if not url and isinstance(body.get("files"), list) and body["files"]:
            url = body["files"][0].get("url")
        return url or None

    def _lookup(self, asset: UploadedAsset) -> str | None:
        for f in self.client.list_files(limit=25):
            if asset.filename in str(f.get("filename") or "") and f.get("url"):
                return f["url"]
        return None


class StagedUploader(ImageUploader):
    """GraphQL staged upload: request target, POST bytes there, register with ``fileCreate``."""

    strategy = "staged"

    def _create(self, asset: UploadedAsset) -> str | None:
        target = self.client.staged_uploads_create(asset.filename, asset.mime_type, len(asset.data))
        self.client.upload_to_staged_target(target, asset.filename, asset.data, asset.mime_type)
        created = self.client.file_create(
            target.get("resourceUrl") or target["url"],
            alt=f"Brick Art mosaic ({asset.slot})",
        )
        return created.get("url")

    def _lookup(self, asset: UploadedAsset) -> str | None:
        return self.client.find_file_by_name(asset.filename)


UPLOADERS = {cls.strategy: cls for cls in (DirectUploader, StagedUploader)}


def build_uploader(settings, client: ShopifyClient, sleep: Callable[[float], None] = time.sleep) -> ImageUploader:
    cls = UPLOADERS[settings.upload_strategy]
    return cls(
        client,
        poll_interval=settings.poll_interval,
        poll_attempts=settings.poll_attempts,
        sleep=sleep,
    )
