from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from ..integrations import woo_commerce
from ..integrations.service_error import IntegrationError, ServiceError
from ..repositories import order_repository, user_repository, voice_data_repository

logger = logging.getLogger(__name__)

ASSIGNED_STATUS = "Assigned to Vendor"


def _vendor_names(vendor_ids: List[str]) -> Dict[str, str]:
    names: Dict[str, str] = {}
    for vendor_id in vendor_ids:
        profile = user_repository.find_by_id(vendor_id)
        if profile:
            names[vendor_id] = profile.get("name") or profile.get("email") or "Unknown"
    return names


def annotate_production_status(orders: List[Dict[str, Any]]) -> None:
    """Overlay the internal print-job stage and vendor onto Woo orders, in place."""
    by_wc_id = {order.get("id"): order for order in orders if order.get("id") is not None}
    if not by_wc_id:
        return

    internal = order_repository.find_by_wc_ids(list(by_wc_id.keys()))
    vendor_ids = sorted({job["vendorId"] for job in internal if job.get("vendorId")})
    vendor_names = _vendor_names(vendor_ids)

    for job in internal:
        match = by_wc_id.get(job.get("wcId"))
        if match is None:
            continue
        match["status"] = job.get("stage") or ASSIGNED_STATUS
        match["internal_stage"] = job.get("stage")
        match["s3Key"] = job.get("s3Key")
        if job.get("vendorId"):
            match["vendor_name"] = vendor_names.get(job["vendorId"], "Unknown")


def list_woo_orders(page: int = 1, per_page: int = 20, search: str = "", status: str = "any") -> Dict[str, Any]:
    params: Dict[str, Any] = {"page": page, "per_page": per_page, "order": "desc", "orderby": "date"}
    if search:
        params["search"] = search
    if status and status != "any":
        params["status"] = status

    result = woo_commerce.fetch_collection("orders", params)
    orders = result.data

    try:
        annotate_production_status(orders)
    except Exception:
        # Woo data is still useful without the production overlay.
        logger.exception("Failed to attach internal production status to Woo orders")

    return {"orders": orders, "total": result.total, "totalPages": result.total_pages}


def update_woo_order(woo_order_id: str, body: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    if not isinstance(body, dict):
        raise ServiceError("Invalid JSON")
    if not body.get("meta_data") and not body.get("status"):
        raise ServiceError("Nothing to update")

    meta_data = body.get("meta_data") or []

    try:
        updated = woo_commerce.update_order(woo_order_id, body)
    except IntegrationError as exc:
        logger.warning(
            "WooCommerce update failed for order %s; saving meta locally: %s",
            woo_order_id,
            exc,
        )
        if not meta_data:
            raise IntegrationError("Failed to update order", response=exc.response, status=500) from exc
        voice_data_repository.merge(woo_order_id, meta_data)
        return {"success": True, "message": "Saved to Local Storage Fallback", "fallback": True}

    if meta_data:
        try:
            voice_data_repository.merge(woo_order_id, meta_data)
        except (OSError, ValueError, RuntimeError):
            logger.exception("Failed to mirror order meta locally", extra={"wooOrderId": woo_order_id})

    return {"success": True, "message": "Updated in WooCommerce", "order": updated}
