from .firebase_client import init_database, is_initialized

__all__ = ["init_database", "is_initialized"]
