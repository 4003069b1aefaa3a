from __future__ import annotations

from flask import Blueprint

from ..database import firebase_client
from ..integrations import object_storage, woo_commerce
from ..services import get_config
from ..utils.http import handle_action

blueprint = Blueprint("system", __name__, url_prefix="/api")


@blueprint.route("/health", methods=["GET"])
def health():
    def action():
        config = get_config()
        return {
            "status": "ok",
            "environment": config.node_env,
            "firebase": firebase_client.is_initialized(),
            "wooCommerce": woo_commerce.is_configured(),
            "objectStorage": object_storage.is_configured(),
        }

    return handle_action(action)
