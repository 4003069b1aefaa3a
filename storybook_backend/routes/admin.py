from __future__ import annotations

from flask import Blueprint, g, request

from ..integrations import woo_commerce
from ..middleware.auth import require_admin, require_auth
from ..services import stats_service, vendor_service
from ..utils.http import handle_action, query_int

blueprint = Blueprint("admin", __name__, url_prefix="/api")


@blueprint.route("/admin/vendors", methods=["GET"])
@require_admin
def list_vendors():
    return handle_action(vendor_service.list_vendors, failure_message="Failed to fetch vendors")


@blueprint.route("/admin/stats", methods=["GET"])
@require_admin
def production_stats():
    return handle_action(stats_service.production_stats, failure_message="Failed to compute stats")


@blueprint.route("/dashboard-stats", methods=["GET"])
@require_admin
def dashboard_stats():
    return handle_action(stats_service.dashboard_stats, failure_message="Failed to fetch dashboard stats")


@blueprint.route("/products", methods=["GET"])
@require_auth
def list_products():
    def action():
        params = {"page": query_int("page", 1), "per_page": query_int("per_page", 20)}
        search = (request.args.get("search") or "").strip()
        if search:
            params["search"] = search
        result = woo_commerce.fetch_collection("products", params)
        return {"products": result.data, "total": result.total, "totalPages": result.total_pages}

    return handle_action(action, failure_message="Failed to fetch products")


@blueprint.route("/invites", methods=["POST"])
@require_admin
def create_invite():
    payload = request.get_json(force=True, silent=True) or {}
    return handle_action(
        lambda: vendor_service.create_invite(payload.get("role"), created_by=g.current_user.get("uid")),
        status=201,
        failure_message="Failed to create invite",
    )


@blueprint.route("/invites/<code>/consume", methods=["POST"])
@require_auth
def consume_invite(code: str):
    payload = request.get_json(force=True, silent=True) or {}
    return handle_action(
        lambda: vendor_service.consume_invite(code, payload.get("role"), used_by=g.current_user.get("uid")),
        failure_message="Failed to consume invite",
    )
