from __future__ import annotations

import logging
import time

from flask import Flask, g, jsonify, request
from werkzeug.exceptions import RequestEntityTooLarge


def _should_track(path: str) -> bool:
    return path.startswith("/api")


def init_request_logging(app: Flask) -> None:
    """
    Attach request/response logging and JSON error pages for API routes.
    """
    logger = logging.getLogger("storybook.http")

    @app.before_request
    def _log_start() -> None:
        if _should_track(request.path):
            g._request_started_at = time.perf_counter()

    @app.after_request
    def _log_response(response):
        if _should_track(request.path):
            started = getattr(g, "_request_started_at", None)
            duration_ms = (time.perf_counter() - started) * 1000 if isinstance(started, float) else -1
            logger.info(
                "HTTP %s %s -> %s (%.1f ms)",
                request.method,
                request.path,
                response.status_code,
                duration_ms,
            )
        return response

    @app.errorhandler(404)
    def _not_found(error):
        if _should_track(request.path):
            logger.warning("Route not found: %s %s", request.method, request.path)
            return jsonify({"message": "Endpoint does not exist"}), 404
        return error

    @app.errorhandler(405)
    def _method_not_allowed(error):
        if _should_track(request.path):
            logger.warning("Method not allowed: %s %s", request.method, request.path)
            return jsonify({"message": "Method not allowed"}), 405
        return error

    @app.errorhandler(RequestEntityTooLarge)
    def _request_too_large(error):
        if _should_track(request.path):
            max_bytes = app.config.get("MAX_CONTENT_LENGTH")
            logger.warning("Payload too large: %s %s (max=%s)", request.method, request.path, max_bytes)
            return (
                jsonify(
                    {
                        "message": "Upload is too large.",
                        "maxBytes": int(max_bytes) if isinstance(max_bytes, int) else None,
                    }
                ),
                413,
            )
        return error
