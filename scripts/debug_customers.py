#!/usr/bin/env python3
"""
Run the customer reconciliation against the live WooCommerce store and log
what it drops and backfills.

Usage:
  python3 scripts/debug_customers.py
  python3 scripts/debug_customers.py --search ann --type guest
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("--search", default="", help="Search term passed to WooCommerce.")
    parser.add_argument("--type", default="all", choices=("all", "registered", "guest"))
    args = parser.parse_args()

    repo_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    if repo_root not in sys.path:
        sys.path.insert(0, repo_root)

    from storybook_backend.config import load_config  # noqa: WPS433
    from storybook_backend.logging_config import configure_logging  # noqa: WPS433
    from storybook_backend.services import configure_services  # noqa: WPS433
    from storybook_backend.services import customer_service  # noqa: WPS433
    from storybook_backend.integrations import woo_commerce  # noqa: WPS433
    from storybook_backend.integrations.service_error import IntegrationError  # noqa: WPS433

    config = load_config()
    configure_logging(config)
    configure_services(config)
    logger = logging.getLogger("storybook.debug_customers")

    if not woo_commerce.is_configured():
        print("WooCommerce credentials are missing; set WC_STORE_URL, WC_CONSUMER_KEY and WC_CONSUMER_SECRET.", file=sys.stderr)
        return 2

    try:
        customers, orders = customer_service.fetch_upstream(args.search, args.type)
    except IntegrationError as exc:
        logger.error("Upstream fetch failed: %s (%s)", exc, exc.response)
        return 1

    logger.info("Fetched %s registered customers and %s orders", len(customers), len(orders))

    def on_drop(customer):
        logger.warning("Dropping registered customer %s: missing email", customer.get("id"))

    def on_backfill(email, group):
        logger.info("Backfilled %s for %s", group, email)

    merged = customer_service.reconcile_customers(
        customers,
        orders,
        args.type,
        on_drop=on_drop,
        on_backfill=on_backfill,
    )

    guests = sum(1 for record in merged.values() if record.is_guest)
    logger.info("Merged %s customers (%s guests)", len(merged), guests)

    first = next(iter(merged.values()), None)
    if first is not None:
        print(json.dumps(first.to_dict(), indent=2, default=str))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
