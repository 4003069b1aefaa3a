"""Local copy of WooCommerce order meta (voice recordings, personalisation)."""

from __future__ import annotations

from typing import Dict, List

from .. import storage


def _get_store():
    store = storage.voice_data_store
    if store is None:
        raise RuntimeError("voice_data_store is not initialised")
    return store


def get(order_id: str) -> List[Dict]:
    return list(_get_store().read().get(str(order_id), []))


def merge(order_id: str, meta_data: List[Dict]) -> List[Dict]:
    """Replace entries sharing a key, append the rest; returns the merged meta list."""
    key = str(order_id)

    def mutate(all_data: Dict[str, List[Dict]]) -> Dict[str, List[Dict]]:
        current = list(all_data.get(key, []))
        for item in meta_data or []:
            if not isinstance(item, dict):
                continue
            index = next((i for i, existing in enumerate(current) if existing.get("key") == item.get("key")), None)
            if index is None:
                current.append(item)
            else:
                current[index] = item
        all_data[key] = current
        return all_data

    return list(_get_store().update(mutate)[key])
