from __future__ import annotations

from flask import Blueprint, make_response, redirect, request

from ..integrations.service_error import ServiceError
from ..middleware.auth import require_auth
from ..services import file_service
from ..utils.http import handle_action

blueprint = Blueprint("files", __name__, url_prefix="/api")


@blueprint.route("/upload-url", methods=["GET"])
@require_auth
def upload_url():
    def action():
        return file_service.create_upload_url(
            request.args.get("fileName"),
            request.args.get("contentType"),
            origin=request.host_url,
        )

    return handle_action(action, failure_message="Failed to create upload URL")


@blueprint.route("/local-upload", methods=["PUT"])
def local_upload():
    def action():
        return file_service.save_local_upload(request.args.get("filename"), request.get_data())

    return handle_action(action, failure_message="Upload failed")


@blueprint.route("/view-url", methods=["GET"])
@require_auth
def view_url():
    return handle_action(
        lambda: redirect(file_service.create_view_url(request.args.get("key")), code=302),
        failure_message="Failed to generate view URL",
    )


@blueprint.route("/download-zip", methods=["POST"])
@require_auth
def download_zip():
    def action():
        body = file_service.parse_zip_request(
            request.get_json(silent=True) if request.is_json else None,
            request.form.get("data"),
        )
        if body is None:
            raise ServiceError("Invalid request body")
        data, filename = file_service.build_zip(body.get("urls"), body.get("filename"))
        resp = make_response(data)
        resp.headers["Content-Type"] = "application/zip"
        resp.headers["Content-Disposition"] = f'attachment; filename="{filename}"'
        resp.headers["Cache-Control"] = "no-cache"
        return resp

    return handle_action(action, failure_message="Internal Server Error")


@blueprint.route("/proxy-image", methods=["GET"])
def proxy_image():
    def action():
        content, content_type = file_service.fetch_image(request.args.get("url"))
        resp = make_response(content)
        resp.headers["Content-Type"] = content_type
        resp.headers["Cache-Control"] = "public, max-age=86400"
        resp.headers["Access-Control-Allow-Origin"] = "*"
        return resp

    return handle_action(action)
