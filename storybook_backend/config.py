from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent


def _load_dotenv() -> None:
    env_path = os.environ.get("DOTENV_CONFIG_PATH")
    if env_path:
        candidate = Path(env_path).expanduser()
    else:
        candidate = BASE_DIR / ".env"
    load_dotenv(candidate)


def _to_int(value: Optional[str], fallback: int) -> int:
    try:
        if value is None or value == "":
            return fallback
        return int(value)
    except (TypeError, ValueError):
        return fallback


def _parse_list(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


def _resolve_path(value: Optional[str], fallback: str) -> Path:
    candidate = Path(value or fallback)
    if candidate.is_absolute():
        return candidate
    return BASE_DIR / candidate


def _to_bool(value: Optional[str], fallback: bool = False) -> bool:
    if value is None:
        return fallback
    text = str(value).strip().lower()
    if text == "":
        return fallback
    return text in ("1", "true", "yes", "on")


def _private_key(raw: Optional[str]) -> str:
    # Keys pasted into .env files usually carry literal "\n" sequences.
    return (raw or "").replace("\\n", "\n").strip()


@dataclass
class AppConfig:
    node_env: str
    port: int
    data_dir: Path
    cors_allow_list: List[str]
    log_level: str
    woo_commerce: Dict[str, Any]
    firebase: Dict[str, Any]
    s3: Dict[str, Any]
    encryption: Dict[str, Any]
    flask_settings: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_production(self) -> bool:
        return self.node_env.lower() == "production"

    @property
    def is_development(self) -> bool:
        return self.node_env.lower() == "development"


def load_config() -> AppConfig:
    _load_dotenv()

    node_env = os.environ.get("NODE_ENV", "development")

    def _s(val: Optional[str]) -> str:
        return (val or "").strip()

    config = AppConfig(
        node_env=node_env,
        port=_to_int(os.environ.get("PORT"), 3001),
        data_dir=_resolve_path(os.environ.get("DATA_DIR"), "server-data"),
        cors_allow_list=_parse_list(os.environ.get("CORS_ALLOW_ORIGINS") or "*"),
        log_level=os.environ.get("LOG_LEVEL", "info" if node_env == "production" else "debug"),
        woo_commerce={
            "store_url": _s(os.environ.get("WC_STORE_URL") or os.environ.get("WOOCOMMERCE_URL")),
            "consumer_key": _s(os.environ.get("WC_CONSUMER_KEY") or os.environ.get("WOOCOMMERCE_CONSUMER_KEY")),
            "consumer_secret": _s(
                os.environ.get("WC_CONSUMER_SECRET") or os.environ.get("WOOCOMMERCE_CONSUMER_SECRET")
            ),
            "api_version": _s(os.environ.get("WC_API_VERSION") or "wc/v3"),
            "request_timeout_seconds": _to_int(os.environ.get("WC_REQUEST_TIMEOUT_SECONDS"), 25),
        },
        firebase={
            "project_id": _s(os.environ.get("FIREBASE_PROJECT_ID")),
            "client_email": _s(os.environ.get("FIREBASE_CLIENT_EMAIL")),
            "private_key": _private_key(os.environ.get("FIREBASE_PRIVATE_KEY")),
            "credentials_file": _s(os.environ.get("GOOGLE_APPLICATION_CREDENTIALS")),
        },
        s3={
            "bucket": _s(os.environ.get("S3_BUCKET") or os.environ.get("BUCKET_NAME")),
            "region": _s(os.environ.get("S3_REGION") or os.environ.get("AWS_REGION")),
            "access_key_id": _s(os.environ.get("S3_ACCESS_KEY_ID") or os.environ.get("AWS_ACCESS_KEY_ID")),
            "secret_access_key": _s(
                os.environ.get("S3_SECRET_ACCESS_KEY") or os.environ.get("AWS_SECRET_ACCESS_KEY")
            ),
            "upload_expires_seconds": _to_int(os.environ.get("S3_UPLOAD_URL_EXPIRES"), 60),
            "view_expires_seconds": _to_int(os.environ.get("S3_VIEW_URL_EXPIRES"), 60),
        },
        encryption={
            "key": os.environ.get("DATA_ENCRYPTION_KEY", ""),
            "algorithm": os.environ.get("DATA_ENCRYPTION_ALGO", "aes-256-gcm"),
        },
        flask_settings={
            "JSON_SORT_KEYS": False,
            "MAX_CONTENT_LENGTH": _to_int(os.environ.get("MAX_UPLOAD_BYTES"), 50 * 1024 * 1024),
            "LOCAL_STORE_ENABLED": _to_bool(os.environ.get("LOCAL_STORE_ENABLED"), node_env != "production"),
        },
    )

    config.data_dir.mkdir(parents=True, exist_ok=True)
    return config
