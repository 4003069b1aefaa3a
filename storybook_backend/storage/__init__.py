from __future__ import annotations

import logging
from typing import Dict, List, Optional

from .document_store import DocumentStore, FirestoreDocumentStore, LocalDocumentStore
from .json_store import JsonStore

logger = logging.getLogger(__name__)

document_store: Optional[DocumentStore] = None
voice_data_store: Optional[JsonStore[Dict[str, List[dict]]]] = None


def _encryption(config):
    secret = (config.encryption.get("key") or "").strip() if config.encryption else ""
    algorithm = config.encryption.get("algorithm", "aes-256-gcm") if config.encryption else "aes-256-gcm"
    return secret or None, algorithm


def init_storage(config, firebase_ready: bool = False) -> None:
    global document_store, voice_data_store

    secret, algorithm = _encryption(config)

    if firebase_ready:
        document_store = FirestoreDocumentStore()
    else:
        if config.is_production and not config.flask_settings.get("LOCAL_STORE_ENABLED"):
            raise RuntimeError("Firebase Admin not initialized and local store disabled in production")
        logger.warning("Using local JSON document store under %s", config.data_dir)
        document_store = LocalDocumentStore(
            base_dir=config.data_dir / "collections",
            encryption_secret=secret,
            encryption_algorithm=algorithm,
        )

    voice_data_store = JsonStore(
        base_dir=config.data_dir,
        file_name="voice_data.json",
        default_factory=dict,
        encryption_secret=secret,
        encryption_algorithm=algorithm,
    )
    voice_data_store.init()


def use_document_store(store: Optional[DocumentStore]) -> None:
    global document_store
    document_store = store


def get_document_store() -> DocumentStore:
    if document_store is None:
        raise RuntimeError("document_store is not initialised")
    return document_store


__all__ = [
    "DocumentStore",
    "FirestoreDocumentStore",
    "JsonStore",
    "LocalDocumentStore",
    "document_store",
    "get_document_store",
    "init_storage",
    "use_document_store",
    "voice_data_store",
]
