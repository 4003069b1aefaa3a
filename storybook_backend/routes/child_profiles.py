from __future__ import annotations

from flask import Blueprint, request

from ..services import child_profile_service
from ..utils.http import handle_action

blueprint = Blueprint("child_profiles", __name__, url_prefix="/api/child-profiles-api")


@blueprint.route("", methods=["GET"], strict_slashes=False)
def get_profiles():
    def action():
        if request.args.get("getAll"):
            return child_profile_service.list_profiles()
        return child_profile_service.get_profile(
            request.args.get("parentEmail"),
            request.args.get("childName"),
        )

    return handle_action(action, failure_message="Failed to fetch profiles")


@blueprint.route("", methods=["POST"], strict_slashes=False)
def save_profile():
    payload = request.get_json(force=True, silent=True)
    return handle_action(
        lambda: child_profile_service.save_voice(payload),
        failure_message="Failed to save profile",
    )
