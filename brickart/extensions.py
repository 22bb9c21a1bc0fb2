# brickart/extensions.py
from dataclasses import dataclass

from flask import current_app
from flask_cors import CORS

from .config import Settings
from .services.notifier import Notifier
from .services.pipeline import SubmissionPipeline
from .services.sendgrid_client import SendGridClient
from .services.shopify_client import ShopifyClient
from .services.uploader import build_uploader

# CORS is a real Flask extension (keeps init_app)
cors = CORS()


@dataclass
class Services:
    settings: Settings
    shopify: ShopifyClient
    pipeline: SubmissionPipeline
    notifier: Notifier


def build_services(settings: Settings) -> Services:
    shopify = ShopifyClient(
        store_domain=settings.store_domain,
        admin_token=settings.admin_token,
        api_version=settings.api_version,
    )
    uploader = build_uploader(settings, shopify)
    return Services(
        settings=settings,
        shopify=shopify,
        pipeline=SubmissionPipeline(settings, shopify, uploader),
        notifier=Notifier(settings, SendGridClient(settings.sendgrid_api_key)),
    )


def services() -> Services:
    return current_app.extensions["brickart"]
