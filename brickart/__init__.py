from flask import Flask
from .config import Config, Settings
from .extensions import build_services, cors
from .routes.errors import register_error_handlers


def create_app(config_class: type[Config] = Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Fails fast with ConfigError before any request is served
    settings = Settings.from_mapping(app.config)
    app.extensions["brickart"] = build_services(settings)

    # Extensions
    cors.init_app(
        app,
        resources={r"/api/*": {"origins": list(settings.allowed_origins)}},
        methods=["POST", "OPTIONS"],
        allow_headers=["Content-Type"],
        max_age=86400,
    )

    # Error envelopes
    register_error_handlers(app)

    # Blueprints
    from .routes.pages import bp as pages_bp
    from .routes.submit import bp as submit_api
    from .routes.email import bp as email_api

    app.register_blueprint(pages_bp)
    app.register_blueprint(submit_api, url_prefix="/api")
    app.register_blueprint(email_api, url_prefix="/api")

    app.logger.info(
        "Brick Art publisher ready (store=%s, upload=%s, publish=%s)",
        settings.store_domain, settings.upload_strategy, settings.publish_articles,
    )
    return app
