from __future__ import annotations

from typing import Dict, List, Optional

from .. import storage

COLLECTION = "stories"


def _get_store():
    return storage.get_document_store()


def get_all() -> List[Dict]:
    return _get_store().list(COLLECTION, order_by="createdAt", descending=True)


def find_by_id(story_id: str) -> Optional[Dict]:
    if not story_id:
        return None
    return _get_store().get(COLLECTION, str(story_id).strip())


def insert(story: Dict) -> Dict:
    return _get_store().add(COLLECTION, story)


def update(story_id: str, patch: Dict) -> Optional[Dict]:
    return _get_store().update(COLLECTION, str(story_id).strip(), patch)


def delete(story_id: str) -> bool:
    return _get_store().delete(COLLECTION, str(story_id).strip())
