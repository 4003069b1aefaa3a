from __future__ import annotations

from typing import Dict, List, Optional

from .. import storage

COLLECTION = "users"


def _get_store():
    return storage.get_document_store()


def find_by_id(uid: str) -> Optional[Dict]:
    if not uid:
        return None
    return _get_store().get(COLLECTION, uid)


def find_by_email(email: Optional[str]) -> Optional[Dict]:
    if not email:
        return None
    matches = _get_store().where(COLLECTION, "email", email, limit=1)
    return matches[0] if matches else None


def list_by_role(role: str) -> List[Dict]:
    return _get_store().where(COLLECTION, "role", role)


def upsert(uid: str, user: Dict) -> Dict:
    existing = find_by_id(uid) or {}
    return _get_store().set(COLLECTION, uid, {**existing, **user})
