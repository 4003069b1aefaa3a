from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional
from uuid import uuid4

from .json_store import JsonStore

logger = logging.getLogger(__name__)

Document = Dict[str, Any]


class DocumentStore(ABC):
    """
    Collection/document persistence used by the repositories.

    Every returned document is a plain dict carrying its id under "id".
    """

    @abstractmethod
    def list(self, collection: str, order_by: Optional[str] = None, descending: bool = False) -> List[Document]:
        ...

    @abstractmethod
    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        ...

    @abstractmethod
    def add(self, collection: str, data: Document) -> Document:
        ...

    @abstractmethod
    def set(self, collection: str, doc_id: str, data: Document) -> Document:
        ...

    @abstractmethod
    def update(self, collection: str, doc_id: str, patch: Document) -> Optional[Document]:
        """Merge `patch` into an existing document; None when it does not exist."""

    @abstractmethod
    def delete(self, collection: str, doc_id: str) -> bool:
        ...

    @abstractmethod
    def where(self, collection: str, field: str, value: Any, limit: Optional[int] = None) -> List[Document]:
        ...

    def where_in(self, collection: str, field: str, values: Iterable[Any]) -> List[Document]:
        wanted = list(values)
        if not wanted:
            return []
        return [doc for doc in self.list(collection) if doc.get(field) in wanted]


def _sort_key(value: Any):
    # None sorts before everything; mixed types compare by their string form.
    if value is None:
        return (0, "")
    if isinstance(value, (int, float)):
        return (1, value)
    return (2, str(value))


class LocalDocumentStore(DocumentStore):
    """Development store: one JSON file per collection under `base_dir`."""

    def __init__(self, base_dir: Path, encryption_secret: Optional[str] = None, encryption_algorithm: str = "aes-256-gcm"):
        self.base_dir = Path(base_dir)
        self.encryption_secret = encryption_secret
        self.encryption_algorithm = encryption_algorithm
        self._stores: Dict[str, JsonStore[List[Document]]] = {}

    def _store(self, collection: str) -> JsonStore[List[Document]]:
        store = self._stores.get(collection)
        if store is None:
            store = JsonStore(
                base_dir=self.base_dir,
                file_name=f"{collection}.json",
                default_factory=list,
                encryption_secret=self.encryption_secret,
                encryption_algorithm=self.encryption_algorithm,
            )
            store.init()
            self._stores[collection] = store
        return store

    def list(self, collection: str, order_by: Optional[str] = None, descending: bool = False) -> List[Document]:
        docs = [dict(doc) for doc in self._store(collection).read()]
        if order_by:
            docs.sort(key=lambda doc: _sort_key(doc.get(order_by)), reverse=descending)
        return docs

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        target = str(doc_id).strip()
        return next((dict(doc) for doc in self._store(collection).read() if str(doc.get("id")) == target), None)

    def add(self, collection: str, data: Document) -> Document:
        if data.get("id"):
            return self.set(collection, str(data["id"]), data)
        doc = {**data, "id": uuid4().hex}
        self._store(collection).update(lambda docs: docs + [doc])
        return dict(doc)

    def set(self, collection: str, doc_id: str, data: Document) -> Document:
        doc = {**data, "id": doc_id}

        def mutate(docs: List[Document]) -> List[Document]:
            remaining = [existing for existing in docs if str(existing.get("id")) != str(doc_id)]
            return remaining + [doc]

        self._store(collection).update(mutate)
        return dict(doc)

    def update(self, collection: str, doc_id: str, patch: Document) -> Optional[Document]:
        result: Dict[str, Document] = {}

        def mutate(docs: List[Document]) -> List[Document]:
            for index, existing in enumerate(docs):
                if str(existing.get("id")) == str(doc_id):
                    merged = {**existing, **patch, "id": existing.get("id")}
                    docs[index] = merged
                    result["doc"] = merged
                    break
            return docs

        self._store(collection).update(mutate)
        updated = result.get("doc")
        return dict(updated) if updated is not None else None

    def delete(self, collection: str, doc_id: str) -> bool:
        removed = {"count": 0}

        def mutate(docs: List[Document]) -> List[Document]:
            remaining = [doc for doc in docs if str(doc.get("id")) != str(doc_id)]
            removed["count"] = len(docs) - len(remaining)
            return remaining

        self._store(collection).update(mutate)
        return removed["count"] > 0

    def where(self, collection: str, field: str, value: Any, limit: Optional[int] = None) -> List[Document]:
        matches = [dict(doc) for doc in self._store(collection).read() if doc.get(field) == value]
        return matches[:limit] if limit else matches


class FirestoreDocumentStore(DocumentStore):
    """Firestore-backed store; expects an initialised firebase_admin app."""

    def __init__(self, client=None):
        if client is None:
            from firebase_admin import firestore

            client = firestore.client()
        self.client = client

    @staticmethod
    def _to_dict(snapshot) -> Document:
        data = snapshot.to_dict() or {}
        data["id"] = snapshot.id
        return data

    def list(self, collection: str, order_by: Optional[str] = None, descending: bool = False) -> List[Document]:
        from firebase_admin import firestore

        query = self.client.collection(collection)
        if order_by:
            direction = firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
            query = query.order_by(order_by, direction=direction)
        return [self._to_dict(snapshot) for snapshot in query.stream()]

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        snapshot = self.client.collection(collection).document(str(doc_id)).get()
        if not snapshot.exists:
            return None
        return self._to_dict(snapshot)

    def add(self, collection: str, data: Document) -> Document:
        payload = {key: value for key, value in data.items() if key != "id"}
        doc_id = data.get("id")
        if doc_id:
            ref = self.client.collection(collection).document(str(doc_id))
            ref.set(payload)
        else:
            _, ref = self.client.collection(collection).add(payload)
        return {**payload, "id": ref.id}

    def set(self, collection: str, doc_id: str, data: Document) -> Document:
        payload = {key: value for key, value in data.items() if key != "id"}
        self.client.collection(collection).document(str(doc_id)).set(payload)
        return {**payload, "id": str(doc_id)}

    def update(self, collection: str, doc_id: str, patch: Document) -> Optional[Document]:
        ref = self.client.collection(collection).document(str(doc_id))
        if not ref.get().exists:
            return None
        payload = {key: value for key, value in patch.items() if key != "id"}
        if payload:
            ref.update(payload)
        return self._to_dict(ref.get())

    def delete(self, collection: str, doc_id: str) -> bool:
        ref = self.client.collection(collection).document(str(doc_id))
        if not ref.get().exists:
            return False
        ref.delete()
        return True

    def where(self, collection: str, field: str, value: Any, limit: Optional[int] = None) -> List[Document]:
        from google.cloud.firestore_v1.base_query import FieldFilter

        query = self.client.collection(collection).where(filter=FieldFilter(field, "==", value))
        if limit:
            query = query.limit(limit)
        return [self._to_dict(snapshot) for snapshot in query.stream()]

    def where_in(self, collection: str, field: str, values: Iterable[Any]) -> List[Document]:
        from google.cloud.firestore_v1.base_query import FieldFilter

        wanted = list(values)
        if not wanted:
            return []
        query = self.client.collection(collection).where(filter=FieldFilter(field, "in", wanted))
        return [self._to_dict(snapshot) for snapshot in query.stream()]
