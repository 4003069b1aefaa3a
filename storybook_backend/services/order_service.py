from __future__ import annotations

import logging
import time
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from ..integrations import woo_commerce
from ..integrations.service_error import ServiceError
from ..repositories import order_repository, user_repository
from ..stages import DEFAULT_STAGE, is_valid_stage, next_stage_options

logger = logging.getLogger(__name__)

BINDINGS = ("Soft", "Hard")
SYNC_BATCH_SIZE = 20

_VENDOR_ALIAS_KEYS = ("vendorId", "vendorCode", "email", "contactEmail", "username")

# Fields an admin may set when creating or patching a print job.
_EDITABLE_FIELDS = (
    "orderId",
    "bookTitle",
    "binding",
    "coverImage",
    "deadline",
    "notes",
    "s3Key",
    "stage",
    "vendorId",
    "customerName",
    "customerEmail",
    "vendor_upload",
)


def _now_ms() -> int:
    return int(time.time() * 1000)


def _today() -> str:
    return date.today().isoformat()


def _to_millis(value: Any) -> int:
    if isinstance(value, bool):
        return _now_ms()
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, datetime):
        return int(value.timestamp() * 1000)
    return _now_ms()


def normalize_order(raw: Dict[str, Any]) -> Dict[str, Any]:
    stage = raw.get("stage")
    normalized = {
        "id": raw.get("id"),
        "orderId": raw.get("orderId") or "",
        "bookTitle": raw.get("bookTitle") or "Untitled",
        "binding": raw.get("binding") if raw.get("binding") in BINDINGS else "Soft",
        "deadline": raw.get("deadline") or _today(),
        "notes": raw.get("notes") or "",
        "s3Key": raw.get("s3Key") or None,
        "stage": stage if isinstance(stage, str) and stage else DEFAULT_STAGE,
        "vendorId": raw.get("vendorId") or None,
        "createdAt": _to_millis(raw.get("createdAt")),
        "updatedAt": _to_millis(raw.get("updatedAt")),
    }
    for key in (
        "coverImage",
        "wcId",
        "customerName",
        "customerEmail",
        "totalAmount",
        "currency",
        "lineItems",
        "wcStatus",
        "vendor_upload",
    ):
        if raw.get(key) is not None:
            normalized[key] = raw.get(key)
    return normalized


def resolve_vendor_identifiers(uid: str, email: Optional[str]) -> List[str]:
    """Every identifier an admin may have typed into an order's vendorId for this vendor."""
    identifiers: List[str] = []

    def add(value: Any) -> None:
        if isinstance(value, str) and value.strip() and value.strip() not in identifiers:
            identifiers.append(value.strip())

    add(uid)
    add(email)

    profile = user_repository.find_by_id(uid)
    if profile is None and email:
        profile = user_repository.find_by_email(email)

    if profile:
        add(profile.get("id"))
        for key in _VENDOR_ALIAS_KEYS:
            add(profile.get(key))
        legacy_ids = profile.get("legacyIds")
        if isinstance(legacy_ids, list):
            for legacy in legacy_ids:
                add(legacy)

    return identifiers


def list_orders(user: Dict[str, Any]) -> List[Dict[str, Any]]:
    if user.get("role") == "admin":
        return [normalize_order(order) for order in order_repository.get_all()]

    identifiers = resolve_vendor_identifiers(user.get("uid"), user.get("email"))
    merged: Dict[str, Dict[str, Any]] = {}
    for identifier in identifiers:
        for order in order_repository.find_by_vendor(identifier):
            merged[str(order.get("id"))] = order

    orders = [normalize_order(order) for order in merged.values()]
    orders.sort(key=lambda order: order.get("updatedAt") or 0, reverse=True)
    logger.debug(
        "Vendor orders resolved",
        extra={"uid": user.get("uid"), "identifiers": identifiers, "orders": len(orders)},
    )
    return orders


def _pick_editable(payload: Dict[str, Any]) -> Dict[str, Any]:
    return {key: payload[key] for key in _EDITABLE_FIELDS if key in payload}


def _validate(fields: Dict[str, Any]) -> None:
    if "binding" in fields and fields["binding"] not in BINDINGS:
        raise ServiceError(f"binding must be one of {', '.join(BINDINGS)}")
    if "stage" in fields and not is_valid_stage(fields["stage"]):
        raise ServiceError(f"Unknown stage: {fields['stage']}")


def create_order(payload: Dict[str, Any]) -> Dict[str, Any]:
    fields = _pick_editable(payload or {})
    _validate(fields)
    now = _now_ms()
    record = {
        "orderId": fields.get("orderId") or "",
        "bookTitle": fields.get("bookTitle") or "Untitled",
        "binding": fields.get("binding") or "Soft",
        "deadline": fields.get("deadline") or _today(),
        "notes": fields.get("notes") or "",
        "s3Key": fields.get("s3Key") or None,
        "stage": fields.get("stage") or DEFAULT_STAGE,
        "vendorId": fields.get("vendorId") or None,
        "createdAt": now,
        "updatedAt": now,
    }
    for key in ("coverImage", "customerName", "customerEmail"):
        if fields.get(key):
            record[key] = fields[key]
    return normalize_order(order_repository.insert(record))


def update_order(order_id: Optional[str], patch: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    if not order_id:
        raise ServiceError("id required")
    fields = _pick_editable(patch or {})
    _validate(fields)
    updated = order_repository.update(order_id, {**fields, "updatedAt": _now_ms()})
    if updated is None:
        raise ServiceError("Not found", 404)
    return normalize_order(updated)


def update_stage(user: Dict[str, Any], order_id: Optional[str], stage: Optional[str]) -> Dict[str, Any]:
    if not order_id:
        raise ServiceError("id required")
    if not is_valid_stage(stage):
        raise ServiceError(f"Unknown stage: {stage}")

    order = order_repository.find_by_id(order_id)
    if order is None:
        raise ServiceError("Not found", 404)

    if user.get("role") != "admin":
        identifiers = resolve_vendor_identifiers(user.get("uid"), user.get("email"))
        assigned = order.get("vendorId").strip() if isinstance(order.get("vendorId"), str) else ""
        if not assigned or assigned not in identifiers:
            raise ServiceError("Forbidden", 403)
        current = order.get("stage") or DEFAULT_STAGE
        if stage not in next_stage_options(current):
            raise ServiceError(f"Cannot move from {current} to {stage}")

    updated = order_repository.update(order_id, {"stage": stage, "updatedAt": _now_ms()})
    logger.info("Order stage changed", extra={"orderId": order_id, "stage": stage, "by": user.get("uid")})
    return normalize_order(updated or order)


def delete_order(order_id: Optional[str]) -> None:
    if not order_id:
        raise ServiceError("id required")
    order_repository.delete(order_id)


def _order_fields_from_woo(wc_order: Dict[str, Any]) -> Dict[str, Any]:
    billing = wc_order.get("billing") or {}
    return {
        "wcId": wc_order.get("id"),
        "orderId": str(wc_order.get("id")),
        "customerName": " ".join(part for part in (billing.get("first_name"), billing.get("last_name")) if part),
        "customerEmail": billing.get("email"),
        "totalAmount": wc_order.get("total"),
        "currency": wc_order.get("currency"),
        "wcStatus": wc_order.get("status"),
        "lineItems": [
            {
                "id": item.get("id"),
                "name": item.get("name"),
                "quantity": item.get("quantity"),
                "total": item.get("total"),
            }
            for item in wc_order.get("line_items") or []
        ],
        "updatedAt": _now_ms(),
    }


def sync_from_woo() -> Dict[str, Any]:
    """Upsert the latest Woo orders as print jobs, keyed by wcId; local production fields are kept."""
    wc_orders = woo_commerce.fetch_collection("orders", {"per_page": SYNC_BATCH_SIZE}).data

    synced = 0
    for wc_order in wc_orders:
        fields = _order_fields_from_woo(wc_order)
        existing = order_repository.find_by_wc_id(wc_order.get("id"))
        if existing is None:
            names = [item.get("name") for item in wc_order.get("line_items") or [] if item.get("name")]
            fields.update(
                {
                    "bookTitle": ", ".join(names) or "Untitled API Order",
                    "binding": "Soft",
                    "stage": DEFAULT_STAGE,
                    "createdAt": _now_ms(),
                }
            )
            order_repository.insert(fields)
        else:
            order_repository.update(existing["id"], fields)
        synced += 1

    logger.info("WooCommerce order sync finished", extra={"count": synced})
    return {"message": "Sync successful", "count": synced}
