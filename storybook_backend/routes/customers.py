from __future__ import annotations

from flask import Blueprint, request

from ..middleware.auth import require_admin
from ..services import customer_service
from ..utils.http import handle_action, query_int

blueprint = Blueprint("customers", __name__, url_prefix="/api/customers")


@blueprint.route("", methods=["GET"], strict_slashes=False)
@require_admin
def list_customers():
    def action():
        return customer_service.list_customers(
            page=query_int("page", 1),
            per_page=query_int("per_page", 20),
            search=(request.args.get("search") or "").strip(),
            customer_type=request.args.get("type") or "all",
            sort=request.args.get("sort") or "date_desc",
            min_orders=query_int("min_orders", 0),
        )

    return handle_action(action, failure_message="Failed to fetch customers")
