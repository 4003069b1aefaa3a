"""S3 helpers for print PDFs, cover images and voice recordings."""

from __future__ import annotations

import logging
from typing import Any, Dict

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..services import get_config
from .service_error import IntegrationError

logger = logging.getLogger(__name__)


def _settings() -> Dict[str, Any]:
    return get_config().s3 or {}


def is_configured() -> bool:
    s3 = _settings()
    return all(
        (s3.get(key) or "").strip()
        for key in ("bucket", "region", "access_key_id", "secret_access_key")
    )


def _client():
    s3 = _settings()
    return boto3.client(
        "s3",
        region_name=s3.get("region"),
        aws_access_key_id=s3.get("access_key_id"),
        aws_secret_access_key=s3.get("secret_access_key"),
    )


def presign_upload(key: str, content_type: str) -> str:
    s3 = _settings()
    try:
        return _client().generate_presigned_url(
            "put_object",
            Params={"Bucket": s3.get("bucket"), "Key": key, "ContentType": content_type},
            ExpiresIn=int(s3.get("upload_expires_seconds") or 60),
        )
    except (BotoCoreError, ClientError) as exc:
        logger.error(
            "Failed to presign upload",
            exc_info=True,
            extra={"key": key, "bucket": bool(s3.get("bucket")), "region": bool(s3.get("region"))},
        )
        raise IntegrationError("Failed to create upload URL", response=str(exc), status=500) from exc


def presign_view(key: str, content_type: str = "application/pdf") -> str:
    s3 = _settings()
    try:
        return _client().generate_presigned_url(
            "get_object",
            Params={
                "Bucket": s3.get("bucket"),
                "Key": key,
                "ResponseContentType": content_type,
                "ResponseContentDisposition": "inline",
            },
            ExpiresIn=int(s3.get("view_expires_seconds") or 60),
        )
    except (BotoCoreError, ClientError) as exc:
        logger.error("Failed to presign view URL", exc_info=True, extra={"key": key})
        raise IntegrationError("Failed to generate view URL", response=str(exc), status=500) from exc
