from __future__ import annotations

from typing import Dict, List, Optional

from .. import storage

COLLECTION = "child_profiles"


def _get_store():
    return storage.get_document_store()


def get_all() -> List[Dict]:
    return _get_store().list(COLLECTION, order_by="createdAt", descending=True)


def find(parent_email: str, child_name: str) -> Optional[Dict]:
    # One equality filter in the store, the second applied here.
    for profile in _get_store().where(COLLECTION, "parentEmail", parent_email):
        if profile.get("childName") == child_name:
            return profile
    return None


def insert(profile: Dict) -> Dict:
    return _get_store().add(COLLECTION, profile)


def update(profile_id: str, patch: Dict) -> Optional[Dict]:
    return _get_store().update(COLLECTION, profile_id, patch)
