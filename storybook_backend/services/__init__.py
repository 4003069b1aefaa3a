from __future__ import annotations

from typing import Optional

from ..config import AppConfig

_APP_CONFIG: Optional[AppConfig] = None


def configure_services(config: AppConfig) -> None:
    global _APP_CONFIG
    _APP_CONFIG = config


def get_config() -> AppConfig:
    """
    Return the active AppConfig.

    Normally populated by `configure_services()` in `storybook_backend.create_app()`.
    Falls back to the Flask app config when only an app context is available.
    """
    global _APP_CONFIG
    if _APP_CONFIG is not None:
        return _APP_CONFIG
    try:
        from flask import current_app

        config = current_app.config.get("APP_CONFIG")
        if isinstance(config, AppConfig):
            _APP_CONFIG = config
            return config
    except RuntimeError:
        # Outside of an application context.
        pass
    raise RuntimeError("Service configuration has not been initialised")
