from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from flask import Response, jsonify, request

from ..integrations.service_error import IntegrationError

logger = logging.getLogger("storybook.api")


def error_status(error: Exception) -> int:
    # Upstream failures always answer 500; the upstream status stays on the exception for logging.
    if isinstance(error, IntegrationError):
        return 500
    return getattr(error, "status", None) or 500


def json_success(data: Any, status: int = 200) -> Response:
    if status == 204:
        return Response(status=204)
    if isinstance(data, Response):
        return data
    return jsonify(data), status


def json_error(error: Exception, failure_message: Optional[str] = None) -> Response:
    status = error_status(error)
    message = getattr(error, "message", None) or str(error) or "Internal server error"
    if status >= 500 and failure_message:
        return jsonify({"message": failure_message, "error": message}), status
    return jsonify({"message": message}), status


def handle_action(
    action: Callable[[], Any],
    status: int = 200,
    failure_message: Optional[str] = None,
) -> Response:
    try:
        payload = action()
        return json_success(payload, status=status)
    except Exception as exc:
        error_code = error_status(exc)
        if error_code >= 500:
            logger.exception(
                "Unhandled API error",
                extra={
                    "method": request.method,
                    "path": request.path,
                    "status": error_code,
                    "upstreamStatus": getattr(exc, "status", None),
                },
            )
        else:
            logger.info("%s %s -> %s: %s", request.method, request.path, error_code, exc)
        return json_error(exc, failure_message)


def query_int(name: str, fallback: int) -> int:
    raw = request.args.get(name)
    try:
        if raw is None or raw.strip() == "":
            return fallback
        return int(raw)
    except (TypeError, ValueError):
        return fallback
