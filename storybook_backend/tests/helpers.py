from __future__ import annotations

import tempfile
import unittest
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, Optional
from unittest.mock import MagicMock

from storybook_backend import storage
from storybook_backend.config import AppConfig
from storybook_backend.services import configure_services
from storybook_backend.storage import JsonStore, LocalDocumentStore


def make_config(data_dir: Path, **overrides: Any) -> AppConfig:
    config = AppConfig(
        node_env="development",
        port=3001,
        data_dir=Path(data_dir),
        cors_allow_list=["*"],
        log_level="warning",
        woo_commerce={
            "store_url": "https://shop.example",
            "consumer_key": "ck_test",
            "consumer_secret": "cs_test",
            "api_version": "wc/v3",
            "request_timeout_seconds": 5,
        },
        firebase={"project_id": "", "client_email": "", "private_key": "", "credentials_file": ""},
        s3={},
        encryption={"key": "", "algorithm": "aes-256-gcm"},
        flask_settings={"JSON_SORT_KEYS": False, "MAX_CONTENT_LENGTH": 1024 * 1024, "LOCAL_STORE_ENABLED": True},
    )
    return replace(config, **overrides) if overrides else config


def woo_response(body: Any, headers: Optional[Dict[str, str]] = None, status_code: int = 200) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = body
    response.headers = headers or {}
    response.content = b"{}"
    response.text = str(body)
    return response


class StoreTestCase(unittest.TestCase):
    """Runs each test against fresh local JSON collections in a temp directory."""

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.data_dir = Path(self._tmp.name)
        self.config = make_config(self.data_dir)
        configure_services(self.config)
        self.store = LocalDocumentStore(self.data_dir / "collections")
        storage.use_document_store(self.store)
        storage.voice_data_store = JsonStore(
            base_dir=self.data_dir,
            file_name="voice_data.json",
            default_factory=dict,
        )

    def tearDown(self) -> None:
        storage.use_document_store(None)
        storage.voice_data_store = None
        self._tmp.cleanup()
