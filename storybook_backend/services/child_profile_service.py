"""Per-child voice recordings keyed by (parentEmail, childName)."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..integrations.service_error import ServiceError
from ..repositories import child_profile_repository

logger = logging.getLogger(__name__)

DELETE_VOICE_ACTION = "delete_voice"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def list_profiles() -> List[Dict[str, Any]]:
    return child_profile_repository.get_all()


def get_profile(parent_email: Optional[str], child_name: Optional[str]) -> Optional[Dict[str, Any]]:
    if not parent_email or not child_name:
        raise ServiceError("Missing parameters")
    return child_profile_repository.find(parent_email, child_name)


def save_voice(payload: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    payload = payload or {}
    parent_email = payload.get("parentEmail")
    child_name = payload.get("childName")
    if not parent_email or not child_name:
        raise ServiceError("Missing parentEmail or childName")

    existing = child_profile_repository.find(parent_email, child_name)
    now = _now_iso()

    if payload.get("action") == DELETE_VOICE_ACTION:
        if existing is not None:
            child_profile_repository.update(
                existing["id"],
                {"voiceUrl": None, "voiceOwner": None, "updatedAt": now},
            )
            logger.info("Child voice cleared", extra={"profileId": existing["id"]})
        return {"success": True}

    if existing is not None:
        child_profile_repository.update(
            existing["id"],
            {
                "voiceUrl": payload.get("voiceUrl") or existing.get("voiceUrl"),
                "voiceOwner": payload.get("voiceOwner") or existing.get("voiceOwner"),
                "updatedAt": now,
            },
        )
        return {"success": True, "id": existing["id"]}

    created = child_profile_repository.insert(
        {
            "parentEmail": parent_email,
            "childName": child_name,
            "voiceUrl": payload.get("voiceUrl"),
            "voiceOwner": payload.get("voiceOwner"),
            "createdAt": now,
            "updatedAt": now,
        }
    )
    return {"success": True, "id": created["id"]}
