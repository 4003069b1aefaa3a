"""
Merged customer view over WooCommerce registered customers and orders.

Registered customers are inserted first, keyed by lower-cased email; orders
then contribute guest customers (``customer_id == 0``) and backfill empty
fields of customers already present. Nothing is persisted: the view is
rebuilt for every request.
"""

from __future__ import annotations

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from ..integrations import woo_commerce

logger = logging.getLogger(__name__)

CUSTOMER_TYPES = ("all", "registered", "guest")
SORT_KEYS = ("date_desc", "spend_desc", "orders_desc")
UPSTREAM_PAGE_SIZE = 100

_ADDRESS_FIELDS = (
    "first_name",
    "last_name",
    "company",
    "address_1",
    "address_2",
    "city",
    "state",
    "postcode",
    "country",
)


@dataclass
class CustomerRecord:
    id: Union[int, str]
    email: str
    first_name: str = ""
    last_name: str = ""
    username: str = ""
    date_created: Optional[str] = None
    total_spent: str = "0.00"
    orders_count: int = 0
    billing: Dict[str, Any] = field(default_factory=dict)
    avatar_url: str = ""
    is_guest: bool = field(default=False, init=False)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class RegisteredCustomer(CustomerRecord):
    is_guest: bool = field(default=False, init=False)


@dataclass
class GuestCustomer(CustomerRecord):
    is_guest: bool = field(default=True, init=False)


@dataclass
class CustomerPage:
    customers: List[CustomerRecord]
    total: int
    total_pages: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "customers": [customer.to_dict() for customer in self.customers],
            "total": self.total,
            "totalPages": self.total_pages,
        }


def normalize_customer_type(value: Optional[str]) -> str:
    text = (value or "").strip().lower()
    return text if text in CUSTOMER_TYPES else "all"


def normalize_sort(value: Optional[str]) -> str:
    text = (value or "").strip().lower()
    return text if text in SORT_KEYS else "date_desc"


def _text(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def _email_key(value: Any) -> str:
    return _text(value).lower()


def _to_int(value: Any) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


def _to_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _money(value: Any, fallback: str = "0.00") -> str:
    text = _text(value)
    return text or fallback


def _is_guest_order(order: Dict[str, Any]) -> bool:
    # Only an explicit 0 marks a guest; a missing customer_id does not.
    customer_id = order.get("customer_id")
    if isinstance(customer_id, bool):
        return False
    if isinstance(customer_id, str):
        return customer_id.strip() == "0"
    return customer_id == 0


def _registered_record(customer: Dict[str, Any]) -> RegisteredCustomer:
    billing = customer.get("billing")
    return RegisteredCustomer(
        id=customer.get("id"),
        email=_text(customer.get("email")),
        first_name=customer.get("first_name") or "",
        last_name=customer.get("last_name") or "",
        username=customer.get("username") or "",
        date_created=customer.get("date_created"),
        total_spent=_money(customer.get("total_spent")),
        orders_count=_to_int(customer.get("orders_count")),
        billing=dict(billing) if isinstance(billing, dict) else {},
        avatar_url=customer.get("avatar_url") or "",
    )


def _order_record(order: Dict[str, Any], email: str) -> CustomerRecord:
    billing = order.get("billing") or {}
    if _is_guest_order(order):
        cls, record_id, username = GuestCustomer, f"guest-{order.get('id')}", "Guest"
    else:
        cls, record_id, username = RegisteredCustomer, order.get("customer_id"), "Customer"
    # total_spent holds this single order's total; repeat guest orders are not summed.
    return cls(
        id=record_id,
        email=email,
        first_name=billing.get("first_name") or "",
        last_name=billing.get("last_name") or "",
        username=username,
        date_created=order.get("date_created"),
        total_spent=_money(order.get("total")),
        orders_count=1,
        billing=dict(billing),
        avatar_url="",
    )


def _backfill(existing: CustomerRecord, order: Dict[str, Any], on_backfill: Optional[Callable[[str, str], None]]) -> None:
    billing = order.get("billing") or {}

    if not existing.first_name and not existing.last_name and (billing.get("first_name") or billing.get("last_name")):
        existing.first_name = billing.get("first_name") or ""
        existing.last_name = billing.get("last_name") or ""
        if on_backfill:
            on_backfill(existing.email, "name")

    if not existing.billing.get("phone") and billing.get("phone"):
        existing.billing["phone"] = billing.get("phone")
        if on_backfill:
            on_backfill(existing.email, "phone")

    # Only empty address sub-fields are filled; populated ones are never replaced.
    if not existing.billing.get("city") and billing.get("city"):
        for key in _ADDRESS_FIELDS:
            if not existing.billing.get(key) and billing.get(key):
                existing.billing[key] = billing.get(key)
        if on_backfill:
            on_backfill(existing.email, "address")

    if not existing.is_guest and existing.orders_count == 0:
        existing.orders_count = 1


def reconcile_customers(
    customers: Iterable[Dict[str, Any]],
    orders: Iterable[Dict[str, Any]],
    customer_type: str = "all",
    on_drop: Optional[Callable[[Dict[str, Any]], None]] = None,
    on_backfill: Optional[Callable[[str, str], None]] = None,
) -> Dict[str, CustomerRecord]:
    """
    Merge registered customers and orders into one record per lower-cased email.

    `on_drop` receives registered customers skipped for lacking an email;
    `on_backfill` receives ``(email, field_group)`` for every enrichment.
    """
    customer_type = normalize_customer_type(customer_type)
    merged: Dict[str, CustomerRecord] = {}

    if customer_type != "guest":
        for customer in customers or []:
            if not isinstance(customer, dict):
                continue
            key = _email_key(customer.get("email"))
            if not key:
                if on_drop:
                    on_drop(customer)
                continue
            merged[key] = _registered_record(customer)

    for order in orders or []:
        if not isinstance(order, dict):
            continue
        key = _email_key((order.get("billing") or {}).get("email"))
        if not key:
            continue

        is_guest = _is_guest_order(order)
        if customer_type == "guest" and not is_guest:
            continue
        if customer_type == "registered" and is_guest:
            continue

        existing = merged.get(key)
        if existing is None:
            merged[key] = _order_record(order, key)
        else:
            _backfill(existing, order, on_backfill)

    return merged


def _date_sort_key(customer: CustomerRecord):
    raw = _text(customer.date_created)
    if not raw:
        return (0, 0.0)
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return (0, 0.0)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return (1, parsed.timestamp())


def filter_sort_paginate(
    customers: Iterable[CustomerRecord],
    min_orders: int = 0,
    sort: str = "date_desc",
    page: int = 1,
    per_page: int = 20,
) -> CustomerPage:
    page = max(1, int(page))
    per_page = max(1, int(per_page))

    selected = list(customers)
    if min_orders > 0:
        selected = [customer for customer in selected if customer.orders_count >= min_orders]

    sort = normalize_sort(sort)
    if sort == "spend_desc":
        selected.sort(key=lambda customer: _to_float(customer.total_spent), reverse=True)
    elif sort == "orders_desc":
        selected.sort(key=lambda customer: customer.orders_count, reverse=True)
    else:
        # Undated records sort last.
        selected.sort(key=_date_sort_key, reverse=True)

    total = len(selected)
    start = (page - 1) * per_page
    return CustomerPage(
        customers=selected[start:start + per_page],
        total=total,
        total_pages=math.ceil(total / per_page),
    )


def fetch_upstream(search: str, customer_type: str):
    """Fetch registered customers and orders concurrently, skipping what the type filter excludes."""
    customer_type = normalize_customer_type(customer_type)
    want_customers = customer_type in ("all", "registered")
    want_orders = customer_type in ("all", "guest")

    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="woo-customers") as pool:
        customers_future = (
            pool.submit(woo_commerce.fetch_customers, search, UPSTREAM_PAGE_SIZE) if want_customers else None
        )
        orders_future = pool.submit(woo_commerce.fetch_orders, search, UPSTREAM_PAGE_SIZE) if want_orders else None
        customers = customers_future.result() if customers_future else []
        orders = orders_future.result() if orders_future else []
    return customers, orders


def list_customers(
    page: int = 1,
    per_page: int = 20,
    search: str = "",
    customer_type: str = "all",
    sort: str = "date_desc",
    min_orders: int = 0,
) -> Dict[str, Any]:
    customer_type = normalize_customer_type(customer_type)
    customers, orders = fetch_upstream(search, customer_type)
    merged = reconcile_customers(customers, orders, customer_type)
    logger.debug(
        "Customers reconciled",
        extra={"registered": len(customers), "orders": len(orders), "merged": len(merged), "type": customer_type},
    )
    return filter_sort_paginate(
        merged.values(),
        min_orders=min_orders,
        sort=sort,
        page=page,
        per_page=per_page,
    ).to_dict()
