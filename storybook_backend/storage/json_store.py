from __future__ import annotations

import base64
import json
import logging
import os
import threading
from dataclasses import dataclass, field
from hashlib import sha256
from pathlib import Path
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

logger = logging.getLogger(__name__)

T = TypeVar("T")

_ENVELOPE_VERSION = 1


def _derive_key(secret: str) -> bytes:
    return sha256(secret.encode("utf-8")).digest()


def _is_envelope(data: Any) -> bool:
    return (
        isinstance(data, dict)
        and data.get("v") == _ENVELOPE_VERSION
        and "iv" in data
        and "payload" in data
        and "tag" in data
    )


@dataclass
class JsonStore(Generic[T]):
    """
    A single JSON document on disk, optionally sealed with AES-GCM.

    `update()` holds the store lock across read-modify-write so concurrent
    requests in one process never interleave their writes.
    """

    base_dir: Path
    file_name: str
    default_factory: Callable[[], T]
    encryption_secret: Optional[str] = None
    encryption_algorithm: str = "aes-256-gcm"
    _lock: threading.RLock = field(default_factory=threading.RLock, init=False, repr=False)

    def __post_init__(self) -> None:
        self.file_path = self.base_dir / self.file_name

    def _ensure_dir(self) -> None:
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _get_key(self) -> Optional[bytes]:
        if not self.encryption_secret:
            return None
        return _derive_key(self.encryption_secret)

    def init(self) -> None:
        with self._lock:
            self._ensure_dir()
            if not self.file_path.exists():
                self.write(self.default_factory())

    def read(self) -> T:
        with self._lock:
            self._ensure_dir()
            if not self.file_path.exists():
                return self.default_factory()
            raw = self.file_path.read_text(encoding="utf-8")
            if not raw.strip():
                return self.default_factory()

            data = json.loads(raw)
            if not _is_envelope(data):
                return data

            key = self._get_key()
            if key is None:
                raise RuntimeError(f"{self.file_name} is encrypted but DATA_ENCRYPTION_KEY is not set")
            try:
                return json.loads(self._decrypt(data, key))
            except InvalidTag:
                logger.error("Failed to decrypt %s: wrong key or corrupted payload", self.file_name)
                raise

    def write(self, data: T) -> None:
        with self._lock:
            self._ensure_dir()
            key = self._get_key()
            if key:
                envelope = self._encrypt(json.dumps(data, ensure_ascii=False), key)
                payload = json.dumps(envelope, indent=2)
            else:
                payload = json.dumps(data, indent=2, ensure_ascii=False)
            tmp_path = self.file_path.with_suffix(self.file_path.suffix + ".tmp")
            tmp_path.write_text(payload, encoding="utf-8")
            os.replace(tmp_path, self.file_path)

    def update(self, mutator: Callable[[T], T]) -> T:
        with self._lock:
            updated = mutator(self.read())
            self.write(updated)
            return updated

    # Internal helpers -------------------------------------------------

    def _encrypt(self, plaintext: str, key: bytes) -> Dict[str, Any]:
        aes = AESGCM(key)
        iv = os.urandom(12)
        ciphertext = aes.encrypt(iv, plaintext.encode("utf-8"), None)
        return {
            "v": _ENVELOPE_VERSION,
            "alg": self.encryption_algorithm,
            "iv": base64.b64encode(iv).decode("ascii"),
            "tag": base64.b64encode(ciphertext[-16:]).decode("ascii"),
            "payload": base64.b64encode(ciphertext[:-16]).decode("ascii"),
        }

    def _decrypt(self, envelope: Dict[str, Any], key: bytes) -> str:
        aes = AESGCM(key)
        iv = base64.b64decode(envelope["iv"])
        tag = base64.b64decode(envelope["tag"])
        payload = base64.b64decode(envelope["payload"])
        return aes.decrypt(iv, payload + tag, None).decode("utf-8")
