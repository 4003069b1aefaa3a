from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from flask import Flask


def create_app() -> "Flask":
    """
    Application factory used by local development and the WSGI entry point.
    """
    from .config import load_config
    from .database import init_database
    from .logging_config import configure_logging
    from .middleware.request_logging import init_request_logging
    from .routes import register_blueprints
    from .services import configure_services
    from .storage import init_storage

    config = load_config()

    configure_logging(config)

    from flask import Flask

    app = Flask(__name__)
    app.config.update(config.flask_settings)
    app.config["PORT"] = config.port
    app.config["DEBUG"] = not config.is_production
    app.config["APP_CONFIG"] = config

    configure_services(config)
    firebase_ready = init_database(config)

    # Falls back to the local JSON collections when Firestore is unavailable.
    init_storage(config, firebase_ready=firebase_ready)

    init_request_logging(app)
    register_blueprints(app, config)

    return app
