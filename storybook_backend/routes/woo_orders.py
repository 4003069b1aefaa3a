from __future__ import annotations

from flask import Blueprint, request

from ..middleware.auth import require_admin
from ..services import woo_order_service
from ..utils.http import handle_action, query_int

blueprint = Blueprint("woo_orders", __name__, url_prefix="/api/woo-orders")


@blueprint.route("", methods=["GET"], strict_slashes=False)
@require_admin
def list_woo_orders():
    def action():
        return woo_order_service.list_woo_orders(
            page=query_int("page", 1),
            per_page=query_int("per_page", 20),
            search=(request.args.get("search") or "").strip(),
            status=request.args.get("status") or "any",
        )

    return handle_action(action, failure_message="Failed to fetch orders")


@blueprint.route("/<woo_order_id>", methods=["PUT"])
@require_admin
def update_woo_order(woo_order_id: str):
    body = request.get_json(force=True, silent=True)
    return handle_action(
        lambda: woo_order_service.update_woo_order(woo_order_id, body),
        failure_message="Failed to update order",
    )
