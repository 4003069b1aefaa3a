from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional

from ..integrations import woo_commerce
from ..repositories import order_repository
from ..stages import DEFAULT_STAGE, STAGES

logger = logging.getLogger(__name__)

REVENUE_STATUSES = ("completed", "processing", "on-hold")
CLOSED_STATUSES = ("completed", "cancelled", "refunded", "failed", "trash")
PRIORITY_AGE_DAYS = 4
DUE_SOON_DAYS = 3
CURRENCY_SYMBOL = "₹"


def _created_date(value: Any) -> Optional[date]:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1000).date()
    if isinstance(value, datetime):
        return value.date()
    return None


def _days_until(deadline: Any, today: date) -> Optional[int]:
    try:
        return (date.fromisoformat(str(deadline)) - today).days
    except ValueError:
        return None


def production_stats(today: Optional[date] = None) -> Dict[str, Any]:
    today = today or date.today()
    by_stage = {stage: 0 for stage in STAGES}
    new_today = due_soon = missing_pdfs = 0

    orders = order_repository.get_all()
    for order in orders:
        stage = order.get("stage") or DEFAULT_STAGE
        by_stage[stage] = by_stage.get(stage, 0) + 1
        created = _created_date(order.get("createdAt"))
        if created is None or created == today:
            new_today += 1
        if not order.get("s3Key"):
            missing_pdfs += 1
        remaining = _days_until(order.get("deadline"), today)
        if remaining is not None and 0 <= remaining <= DUE_SOON_DAYS:
            due_soon += 1

    return {
        "newToday": new_today,
        "dueSoon": due_soon,
        "missingPdfs": missing_pdfs,
        "byStage": by_stage,
        "total": len(orders),
    }


def _parse_woo_date(raw: Any) -> Optional[datetime]:
    try:
        parsed = datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def dashboard_stats(now: Optional[datetime] = None) -> Dict[str, Any]:
    """Revenue and priority counts over the most recent 100 Woo orders."""
    now = now or datetime.now(timezone.utc)
    orders = woo_commerce.fetch_collection(
        "orders",
        {"per_page": 100, "page": 1, "_fields": "total,status,date_created,created_via"},
    ).data

    revenue_orders = [order for order in orders if order.get("status") in REVENUE_STATUSES]
    revenue = 0.0
    for order in revenue_orders:
        try:
            revenue += float(order.get("total") or 0)
        except (TypeError, ValueError):
            logger.debug("Skipping non-numeric order total", extra={"total": order.get("total")})

    priority = 0
    for order in orders:
        if order.get("status") in CLOSED_STATUSES:
            continue
        created = _parse_woo_date(order.get("date_created"))
        if created is not None and (now - created).days > PRIORITY_AGE_DAYS:
            priority += 1

    return {
        "revenue": round(revenue, 2),
        "currency_symbol": CURRENCY_SYMBOL,
        "order_count": len(revenue_orders),
        "priority_count": priority,
    }
