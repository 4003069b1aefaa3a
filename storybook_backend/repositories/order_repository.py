from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from .. import storage

COLLECTION = "orders"

# Firestore caps "in" filters; stay well below it.
IN_QUERY_CHUNK = 10


def _get_store():
    return storage.get_document_store()


def get_all() -> List[Dict]:
    return _get_store().list(COLLECTION, order_by="updatedAt", descending=True)


def find_by_id(order_id: str) -> Optional[Dict]:
    if not order_id:
        return None
    return _get_store().get(COLLECTION, order_id)


def find_by_vendor(identifier: str) -> List[Dict]:
    return _get_store().where(COLLECTION, "vendorId", identifier)


def find_by_wc_id(wc_id: Any) -> Optional[Dict]:
    matches = _get_store().where(COLLECTION, "wcId", wc_id, limit=1)
    return matches[0] if matches else None


def find_by_wc_ids(wc_ids: Iterable[Any]) -> List[Dict]:
    ids = [wc_id for wc_id in wc_ids if wc_id is not None]
    found: List[Dict] = []
    for start in range(0, len(ids), IN_QUERY_CHUNK):
        found.extend(_get_store().where_in(COLLECTION, "wcId", ids[start:start + IN_QUERY_CHUNK]))
    return found


def insert(order: Dict) -> Dict:
    return _get_store().add(COLLECTION, order)


def update(order_id: str, patch: Dict) -> Optional[Dict]:
    return _get_store().update(COLLECTION, order_id, patch)


def delete(order_id: str) -> bool:
    return _get_store().delete(COLLECTION, order_id)
