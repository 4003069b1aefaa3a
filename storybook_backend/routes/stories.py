from __future__ import annotations

from flask import Blueprint, g, request

from ..middleware.auth import require_auth
from ..services import story_service
from ..utils.http import handle_action

blueprint = Blueprint("stories", __name__, url_prefix="/api/stories")


@blueprint.route("", methods=["GET"], strict_slashes=False)
@require_auth
def list_stories():
    return handle_action(story_service.list_stories, failure_message="Failed to fetch stories")


@blueprint.route("", methods=["POST"], strict_slashes=False)
@require_auth
def create_story():
    payload = request.get_json(force=True, silent=True) or {}
    return handle_action(
        lambda: story_service.create_story(payload, created_by=g.current_user.get("uid")),
        status=201,
        failure_message="Failed to save story",
    )


@blueprint.route("/<story_id>", methods=["GET"])
@require_auth
def get_story(story_id: str):
    return handle_action(lambda: story_service.get_story(story_id), failure_message="Failed to fetch story")


@blueprint.route("/<story_id>", methods=["PUT"])
@require_auth
def update_story(story_id: str):
    payload = request.get_json(force=True, silent=True) or {}
    return handle_action(
        lambda: story_service.update_story(story_id, payload),
        failure_message="Failed to update story",
    )


@blueprint.route("/<story_id>", methods=["DELETE"])
@require_auth
def delete_story(story_id: str):
    return handle_action(lambda: story_service.delete_story(story_id), failure_message="Failed to delete story")
