from __future__ import annotations

from typing import Dict, Optional

from .. import storage

COLLECTION = "invites"


def _get_store():
    return storage.get_document_store()


def find_by_code(code: str) -> Optional[Dict]:
    if not code:
        return None
    return _get_store().get(COLLECTION, code)


def insert(code: str, invite: Dict) -> Dict:
    return _get_store().set(COLLECTION, code, invite)


def update(code: str, patch: Dict) -> Optional[Dict]:
    return _get_store().update(COLLECTION, code, patch)
