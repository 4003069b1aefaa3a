from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import firebase_admin
from firebase_admin import credentials

logger = logging.getLogger(__name__)

_APP: Optional[firebase_admin.App] = None
_PROJECT_ID: str = ""


def _build_credential(settings: Dict[str, Any]) -> Optional[credentials.Base]:
    credentials_file = (settings.get("credentials_file") or "").strip()
    if credentials_file:
        return credentials.Certificate(credentials_file)

    project_id = (settings.get("project_id") or "").strip()
    client_email = (settings.get("client_email") or "").strip()
    private_key = settings.get("private_key") or ""
    if not (project_id and client_email and private_key):
        return None
    if "BEGIN PRIVATE KEY" not in private_key:
        raise ValueError(
            "FIREBASE_PRIVATE_KEY appears malformed (missing BEGIN PRIVATE KEY). "
            "Ensure literal \\n newlines or proper quoting."
        )
    return credentials.Certificate(
        {
            "type": "service_account",
            "project_id": project_id,
            "client_email": client_email,
            "private_key": private_key,
            "token_uri": "https://oauth2.googleapis.com/token",
        }
    )


def init_database(config) -> bool:
    """
    Initialise the Firebase admin app when credentials are configured.

    Returns False (and leaves the app uninitialised) when no credentials are
    present so callers can fall back to the local JSON store.
    """
    global _APP, _PROJECT_ID
    settings = config.firebase or {}
    _PROJECT_ID = (settings.get("project_id") or "").strip()

    if _APP is not None:
        return True
    try:
        _APP = firebase_admin.get_app()
        return True
    except ValueError:
        # No default app yet.
        pass

    try:
        credential = _build_credential(settings)
    except ValueError as exc:
        logger.error("Firebase admin credentials rejected: %s", exc)
        if config.is_production:
            raise
        return False

    if credential is None:
        logger.warning("Firebase admin credentials not configured; using local document store")
        return False

    options = {"projectId": _PROJECT_ID} if _PROJECT_ID else None
    _APP = firebase_admin.initialize_app(credential, options)
    if not _PROJECT_ID:
        _PROJECT_ID = _APP.project_id or ""
    logger.info("Firebase admin initialised", extra={"projectId": _PROJECT_ID})
    return True


def is_initialized() -> bool:
    return _APP is not None


def get_app() -> Optional[firebase_admin.App]:
    return _APP


def project_id() -> str:
    return _PROJECT_ID
