from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..integrations.service_error import ServiceError
from ..repositories import story_repository

logger = logging.getLogger(__name__)

_STORY_FIELDS = (
    "title",
    "description",
    "idealFor",
    "ageRange",
    "character",
    "genre",
    "pageCount",
    "pages",
    "narrationFlow",
    "coverImageKey",
    "coverImageUrl",
)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _to_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def list_stories() -> List[Dict[str, Any]]:
    return story_repository.get_all()


def get_story(story_id: str) -> Dict[str, Any]:
    story = story_repository.find_by_id(story_id)
    if story is None:
        raise ServiceError("Story not found", 404)
    return story


def create_story(payload: Optional[Dict[str, Any]], created_by: str) -> Dict[str, Any]:
    payload = payload or {}
    pages = payload.get("pages")
    if not payload.get("title") or not isinstance(pages, list):
        raise ServiceError("Missing required fields")

    now = _now_iso()
    story = {key: payload.get(key) for key in _STORY_FIELDS}
    story.update(
        {
            "status": "published",
            "pageCount": _to_int(payload.get("pageCount")) or len(pages),
            "coverImageKey": payload.get("coverImageKey") or None,
            "coverImageUrl": payload.get("coverImageUrl") or None,
            "createdBy": created_by,
            "createdAt": now,
            "updatedAt": now,
        }
    )
    saved = story_repository.insert(story)
    logger.info("Story created", extra={"storyId": saved.get("id"), "createdBy": created_by})
    return saved


def update_story(story_id: str, payload: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    payload = payload or {}
    if not payload.get("title"):
        raise ServiceError("Title is required")

    patch = {key: payload[key] for key in _STORY_FIELDS if key in payload}
    if "pageCount" in patch:
        patch["pageCount"] = _to_int(patch["pageCount"])
    if "status" in payload:
        patch["status"] = payload["status"]
    patch["updatedAt"] = _now_iso()

    updated = story_repository.update(story_id, patch)
    if updated is None:
        raise ServiceError("Story not found", 404)
    return {**updated, "message": "Story updated successfully"}


def delete_story(story_id: str) -> Dict[str, Any]:
    if not story_repository.delete(story_id):
        raise ServiceError("Story not found", 404)
    return {"message": "Story deleted successfully"}
