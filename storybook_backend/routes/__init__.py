from __future__ import annotations

from flask import Flask
from flask_cors import CORS

from . import admin, child_profiles, customers, files, orders, stories, system, woo_orders


def register_blueprints(app: Flask, config) -> None:
    origins = config.cors_allow_list or ["*"]
    cors_config = {
        r"/api/*": {
            "origins": "*" if "*" in origins else origins,
            "supports_credentials": True,
        }
    }
    CORS(app, resources=cors_config)

    app.register_blueprint(customers.blueprint)
    app.register_blueprint(orders.blueprint)
    app.register_blueprint(woo_orders.blueprint)
    app.register_blueprint(stories.blueprint)
    app.register_blueprint(admin.blueprint)
    app.register_blueprint(files.blueprint)
    app.register_blueprint(child_profiles.blueprint)
    app.register_blueprint(system.blueprint)
