from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Callable, Dict, Optional, TypeVar

from firebase_admin import auth as firebase_auth
from flask import Response, g, jsonify, request

from ..database import firebase_client
from ..repositories import user_repository
from ..services import get_config

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable)

DEV_FALLBACK_USER = {"uid": "dev-fallback", "role": "admin", "email": "dev@localhost"}


def _bearer_token() -> Optional[str]:
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        return None
    token = header[len("Bearer "):].strip()
    return token or None


def _verify_token(token: str) -> Dict[str, Any]:
    """Verify a Firebase ID token and return its decoded claims."""
    return firebase_auth.verify_id_token(token, app=firebase_client.get_app())


def get_user_from_request() -> Optional[Dict[str, Any]]:
    if not firebase_client.is_initialized() and get_config().is_development:
        return dict(DEV_FALLBACK_USER)

    token = _bearer_token()
    if not token:
        return None
    try:
        claims = _verify_token(token)
    except firebase_auth.ExpiredIdTokenError:
        logger.info("Rejected expired ID token")
        return None
    except (firebase_auth.InvalidIdTokenError, firebase_auth.CertificateFetchError, ValueError) as exc:
        logger.info("Rejected ID token: %s", exc)
        return None

    uid = claims.get("uid") or claims.get("sub")
    if not uid:
        return None
    profile = user_repository.find_by_id(uid) or {}
    role = profile.get("role") if profile.get("role") in ("admin", "vendor") else "vendor"
    return {"uid": uid, "role": role, "email": claims.get("email") or profile.get("email")}


def require_auth(func: F) -> F:
    @wraps(func)
    def wrapper(*args, **kwargs):
        if not firebase_client.is_initialized() and not get_config().is_development:
            return _server_error("Server Error: Firebase Admin not initialized. Check Environment Variables.")
        user = get_user_from_request()
        if not user:
            return _unauthorized("Unauthorized: Invalid Token or Session Expired")
        g.current_user = user
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def require_admin(func: F) -> F:
    @require_auth
    @wraps(func)
    def wrapper(*args, **kwargs):
        if g.current_user.get("role") != "admin":
            return _forbidden("Forbidden")
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def _unauthorized(message: str) -> Response:
    return jsonify({"message": message}), 401


def _forbidden(message: str) -> Response:
    return jsonify({"message": message}), 403


def _server_error(message: str) -> Response:
    return jsonify({"message": message}), 500
