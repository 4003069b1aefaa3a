from __future__ import annotations

from flask import Blueprint, g, request

from ..middleware.auth import require_admin, require_auth
from ..services import order_service
from ..utils.http import handle_action

blueprint = Blueprint("orders", __name__, url_prefix="/api/orders")


@blueprint.route("", methods=["GET"], strict_slashes=False)
@require_auth
def list_orders():
    return handle_action(
        lambda: order_service.list_orders(g.current_user),
        failure_message="Failed to fetch orders",
    )


@blueprint.route("", methods=["POST"], strict_slashes=False)
@require_admin
def create_order():
    payload = request.get_json(force=True, silent=True) or {}
    return handle_action(
        lambda: order_service.create_order(payload),
        status=201,
        failure_message="Failed to create order",
    )


@blueprint.route("", methods=["PUT"], strict_slashes=False)
@require_admin
def update_order():
    payload = request.get_json(force=True, silent=True) or {}
    return handle_action(
        lambda: order_service.update_order(payload.get("id"), payload.get("patch")),
        failure_message="Failed to update order",
    )


@blueprint.route("", methods=["PATCH"], strict_slashes=False)
@require_auth
def update_stage():
    payload = request.get_json(force=True, silent=True) or {}
    return handle_action(
        lambda: order_service.update_stage(g.current_user, payload.get("id"), payload.get("stage")),
        failure_message="Failed to update stage",
    )


@blueprint.route("", methods=["DELETE"], strict_slashes=False)
@require_admin
def delete_order():
    order_id = request.args.get("id")
    return handle_action(
        lambda: order_service.delete_order(order_id),
        status=204,
        failure_message="Failed to delete order",
    )


@blueprint.route("/sync", methods=["POST"])
@require_admin
def sync_orders():
    return handle_action(order_service.sync_from_woo, failure_message="Failed to sync orders")
