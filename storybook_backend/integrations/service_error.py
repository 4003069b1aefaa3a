from typing import Any, Optional


class ServiceError(RuntimeError):
    """Domain or validation failure carrying the HTTP status to answer with."""

    def __init__(self, message: str, status: int = 400) -> None:
        super().__init__(message)
        self.message = message
        self.status = status


class IntegrationError(RuntimeError):
    """Upstream (WooCommerce, object storage) request failed."""

    def __init__(self, message: str, response: Optional[Any] = None, status: int = 502) -> None:
        super().__init__(message)
        self.message = message
        self.response = response
        self.status = status
