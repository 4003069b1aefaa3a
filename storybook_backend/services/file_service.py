from __future__ import annotations

import io
import json
import logging
import re
import time
import zipfile
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import requests

from ..integrations import object_storage
from ..integrations.service_error import ServiceError
from ..utils import http_client
from . import get_config

logger = logging.getLogger(__name__)

_SAFE_ZIP_NAME = re.compile(r"[^a-z0-9\-_]", re.IGNORECASE)


def _safe_name(raw: Optional[str], fallback: str) -> str:
    return re.sub(r"\s+", "-", (raw or "").strip()) or fallback


def upload_dir() -> Path:
    return get_config().data_dir / "uploads"


def create_upload_url(file_name: Optional[str], content_type: Optional[str], origin: str) -> Dict[str, Any]:
    stamp = int(time.time() * 1000)

    if not object_storage.is_configured():
        final_name = f"{stamp}-{_safe_name(file_name, 'upload.bin')}"
        return {
            "url": f"{origin.rstrip('/')}/api/local-upload?filename={final_name}",
            "key": f"local/{final_name}",
            "isLocal": True,
        }

    key = f"orders/{stamp}-{_safe_name(file_name, 'upload.pdf')}"
    url = object_storage.presign_upload(key, content_type or "application/pdf")
    return {"url": url, "key": key}


def save_local_upload(filename: Optional[str], body: bytes) -> Dict[str, Any]:
    if not filename:
        raise ServiceError("Filename is required")
    name = Path(filename).name
    if not name or name != filename:
        raise ServiceError("Invalid filename")

    target_dir = upload_dir()
    target_dir.mkdir(parents=True, exist_ok=True)
    (target_dir / name).write_bytes(body)
    logger.info("Stored local upload", extra={"file": name, "bytes": len(body)})
    return {"success": True, "path": f"/uploads/{name}"}


def create_view_url(key: Optional[str]) -> str:
    if not key:
        raise ServiceError("Missing key")
    return object_storage.presign_view(key)


def zip_filename(raw: Optional[str]) -> str:
    return _SAFE_ZIP_NAME.sub("_", raw or "download") + ".zip"


def _entry_name(raw: Optional[str]) -> str:
    # Archive members never carry directories.
    name = Path(str(raw or "")).name
    return name if name not in ("", ".", "..") else "file"


def build_zip(urls: Any, filename: Optional[str]) -> Tuple[bytes, str]:
    """Fetch every {url, name} entry into one zip; failed fetches become `<name>-error.txt`."""
    if not isinstance(urls, list) or not urls:
        raise ServiceError("No URLs provided")

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=9) as archive:
        for entry in urls:
            if not isinstance(entry, dict) or not entry.get("url"):
                continue
            url = entry["url"]
            name = _entry_name(entry.get("name") or Path(url.split("?", 1)[0]).name)
            try:
                response = http_client.get(url)
                response.raise_for_status()
                archive.writestr(name, response.content)
            except requests.RequestException as exc:
                logger.error("Failed to zip file %s: %s", url, exc)
                archive.writestr(f"{name}-error.txt", f"Failed to download: {url}")

    return buffer.getvalue(), zip_filename(filename)


def parse_zip_request(json_body: Any, form_data: Optional[str]) -> Optional[Dict[str, Any]]:
    if isinstance(json_body, dict):
        return json_body
    if form_data:
        try:
            parsed = json.loads(form_data)
        except ValueError:
            logger.warning("Failed to parse form data JSON for zip download")
            return None
        return parsed if isinstance(parsed, dict) else None
    return None


def fetch_image(url: Optional[str]) -> Tuple[bytes, str]:
    """Fetch a remote image for same-origin use; upstream failures keep the upstream status."""
    if not url:
        raise ServiceError("Missing url parameter")
    if not url.lower().startswith(("http://", "https://")):
        raise ServiceError("Unsupported url")

    try:
        response = http_client.get(url)
    except requests.RequestException as exc:
        logger.error("Image proxy fetch failed for %s: %s", url, exc)
        raise ServiceError("Internal Server Error", 500) from exc

    if not response.ok:
        logger.warning("Image proxy upstream answered %s for %s", response.status_code, url)
        raise ServiceError("Failed to fetch image", response.status_code)

    return response.content, response.headers.get("Content-Type") or "application/octet-stream"
