"""
Shared test fixtures and configuration for Brick Art publisher tests.
"""
import base64
from io import BytesIO

import pytest
from flask import Flask

from brickart import create_app
from brickart.config import Config, Settings


class GalleryTestConfig(Config):
    TESTING = True
    SHOPIFY_STORE_DOMAIN = "test-store.myshopify.com"
    SHOPIFY_ADMIN_TOKEN = "test_shopify_token"
    SHOPIFY_API_VERSION = "2024-10"
    SHOPIFY_BLOG_ID = "91651211375"
    SENDGRID_API_KEY = "test_sendgrid_key"
    FROM_EMAIL = "designs@brick-art.com"
    BCC_EMAIL = "gallery@brick-art.com"
    UPLOAD_STRATEGY = "direct"
    PUBLISH_ARTICLES = "false"
    CORS_ALLOWED_ORIGINS = "https://www.brick-art.com,https://brick-art.com"
    UPLOAD_POLL_INTERVAL = "0"
    UPLOAD_POLL_ATTEMPTS = "3"
    MAX_EMAIL_PAYLOAD_BYTES = str(64 * 1024)
    GALLERY_TAG = "Brick Art Gallery"


@pytest.fixture
def app() -> Flask:
    """Create and configure a test Flask application instance."""
    app = create_app(GalleryTestConfig)
    yield app


@pytest.fixture
def settings() -> Settings:
    return Settings.from_mapping(vars_of(GalleryTestConfig))


@pytest.fixture
def shopify_client(settings):
    """Create a ShopifyClient instance for testing."""
    from brickart.services.shopify_client import ShopifyClient
    return ShopifyClient(
        store_domain=settings.store_domain,
        admin_token=settings.admin_token,
        api_version=settings.api_version,
    )


@pytest.fixture
def png_b64() -> str:
    """A real 16x16 PNG as raw base64 (no data: prefix)."""
    return make_png_b64()


@pytest.fixture
def submission_body(png_b64) -> dict:
    return {
        "nickname": "Ada",
        "category": "Animals",
        "grid": "32",
        "baseplate": "Green 32x32",
        "totalBricks": 1024,
        "brickCounts": {"red": 5, "blue": 2},
        "timestamp": "2025-01-02T03:04:05.000Z",
        "imageClean_b64": f"data:image/png;base64,{png_b64}",
        "imageLogo_b64": png_b64,
        "submitterEmail": "ada@example.com",
    }


# Helper functions for tests

def vars_of(config_class) -> dict:
    return {k: getattr(config_class, k) for k in dir(config_class) if k.isupper()}


def make_png_b64(width: int = 16, height: int = 16, color: tuple = (255, 0, 0, 255)) -> str:
    from PIL import Image

    img = Image.new("RGBA", (width, height), color)
    buf = BytesIO()
    img.save(buf, "PNG")
    return base64.b64encode(buf.getvalue()).decode("ascii")
