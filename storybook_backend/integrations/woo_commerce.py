from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

import requests
from requests.auth import HTTPBasicAuth

from ..services import get_config
from ..utils import http_client
from .service_error import IntegrationError

logger = logging.getLogger(__name__)


def _strip(s: Optional[str]) -> str:
    return (s or "").strip()


def is_configured() -> bool:
    data = get_config().woo_commerce
    store = _strip(data.get("store_url"))
    ck = _strip(data.get("consumer_key"))
    cs = _strip(data.get("consumer_secret"))
    return bool(store and ck and cs)


def _client_config():
    data = get_config().woo_commerce
    base_url = _strip(data.get("store_url")).rstrip("/")
    api_version = _strip(data.get("api_version") or "wc/v3").lstrip("/")
    auth = HTTPBasicAuth(_strip(data.get("consumer_key")), _strip(data.get("consumer_secret")))
    timeout = data.get("request_timeout_seconds") or 25
    return base_url, api_version, auth, timeout


@dataclass
class WooPage:
    """One page of a Woo collection plus the pagination headers Woo reports."""

    data: List[Dict[str, Any]] = field(default_factory=list)
    total: Optional[int] = None
    total_pages: Optional[int] = None


# ---- Query sanitising -------------------------------------------------------

_ALLOWED_QUERY_KEYS = {
    "per_page",
    "page",
    "search",
    "status",
    "orderby",
    "order",
    "role",
    "customer",
    "_fields",
    "slug",
    "sku",
    "category",
    "before",
    "after",
}


def _sanitize_query_value(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(int(value)) if float(value).is_integer() else str(float(value))
    s = str(value).strip()
    return s or None


def _sanitize_params(params: Optional[Mapping[str, Any]]) -> Dict[str, str]:
    if not params:
        return {}
    cleaned: Dict[str, str] = {}
    for key, raw in params.items():
        if key not in _ALLOWED_QUERY_KEYS:
            continue
        val = _sanitize_query_value(raw)
        if val is not None:
            cleaned[key] = val
    return cleaned


def _header_int(response: requests.Response, name: str) -> Optional[int]:
    raw = response.headers.get(name)
    try:
        return int(raw) if raw not in (None, "") else None
    except (TypeError, ValueError):
        return None


def _error_body(exc: requests.RequestException) -> Any:
    if exc.response is None:
        return None
    try:
        return exc.response.json()
    except ValueError:
        return exc.response.text


def _wrap_error(message: str, exc: requests.RequestException) -> IntegrationError:
    status_code = getattr(exc.response, "status_code", None)
    return IntegrationError(message, response=_error_body(exc), status=status_code or 502)


# ---- Requests ---------------------------------------------------------------


def _request(method: str, endpoint: str, *, params: Optional[Mapping[str, Any]] = None, json: Any = None) -> requests.Response:
    if not is_configured():
        raise IntegrationError("WooCommerce is not configured", status=500)

    base_url, api_version, auth, timeout = _client_config()
    url = f"{base_url}/wp-json/{api_version}/{endpoint.lstrip('/')}"
    try:
        response = http_client.request(
            method,
            url,
            params=_sanitize_params(params),
            json=json,
            auth=auth,
            timeout=timeout,
        )
        response.raise_for_status()
    except requests.RequestException as exc:
        logger.error(
            "WooCommerce request failed | %s %s status=%s body=%s",
            method,
            endpoint,
            getattr(exc.response, "status_code", None),
            _error_body(exc),
        )
        raise _wrap_error(f"WooCommerce {method} {endpoint} failed", exc) from exc
    return response


def fetch_collection(endpoint: str, params: Optional[Mapping[str, Any]] = None) -> WooPage:
    """Fetch one page of a Woo collection ("customers", "orders", "products")."""
    response = _request("GET", endpoint, params=params)
    try:
        body = response.json()
    except ValueError as exc:
        raise IntegrationError(f"WooCommerce returned non-JSON for {endpoint}", response=response.text) from exc
    if not isinstance(body, list):
        raise IntegrationError(f"Invalid response from WooCommerce for {endpoint}", response=body)
    return WooPage(
        data=[entry for entry in body if isinstance(entry, dict)],
        total=_header_int(response, "X-WP-Total"),
        total_pages=_header_int(response, "X-WP-TotalPages"),
    )


def fetch_customers(search: str = "", per_page: int = 100) -> List[Dict[str, Any]]:
    return fetch_collection("customers", {"role": "all", "per_page": per_page, "search": search}).data


def fetch_orders(search: str = "", per_page: int = 100) -> List[Dict[str, Any]]:
    return fetch_collection("orders", {"per_page": per_page, "search": search}).data


def fetch_order(woo_order_id: str) -> Optional[Dict[str, Any]]:
    """Fetch a single Woo order by id; None when Woo answers 404."""
    try:
        response = _request("GET", f"orders/{woo_order_id}")
    except IntegrationError as exc:
        if exc.status == 404:
            return None
        raise
    body = response.json()
    return body if isinstance(body, dict) and body.get("id") else None


def update_order(woo_order_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    response = _request("PUT", f"orders/{woo_order_id}", json=payload)
    return response.json() if response.content else {}
