"""Custom exceptions for the back-office control plane."""
from __future__ import annotations


class BackofficeException(Exception):
    """Base exception for all back-office errors."""

    def __init__(self, message: str, *args: object) -> None:
        super().__init__(message, *args)
        self.message = message


class ConfigurationException(BackofficeException):
    """Configuration errors."""

    pass


class RemoteNotConfiguredException(ConfigurationException):
    """Remote persistence service URL or key is missing."""

    def __init__(self) -> None:
        super().__init__("Remote store is not configured (set SUPABASE_URL and SUPABASE_ANON_KEY)")


class RemoteStoreException(BackofficeException):
    """Remote store rejected a request."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class RemoteServerException(RemoteStoreException):
    """Remote store answered with a 5xx status."""

    pass


class NetworkException(RemoteStoreException):
    """Remote store could not be reached after all retries."""

    def __init__(
        self,
        message: str,
        *,
        is_timeout: bool = False,
        is_offline: bool = False,
        attempts: int = 1,
    ) -> None:
        super().__init__(message)
        self.is_timeout = is_timeout
        self.is_offline = is_offline
        self.attempts = attempts


class EntityNotFoundException(BackofficeException):
    """Entity not found in the local store."""

    def __init__(self, entity_type: str, entity_id: str) -> None:
        super().__init__(f"{entity_type} with ID {entity_id} not found")
        self.entity_type = entity_type
        self.entity_id = entity_id


class OrderNotFoundException(EntityNotFoundException):
    """Order not found in the local store."""

    def __init__(self, order_id: str) -> None:
        super().__init__("Order", order_id)
        self.order_id = order_id


class StockItemNotFoundException(EntityNotFoundException):
    """Stock item not found in the local store."""

    def __init__(self, stock_id: str) -> None:
        super().__init__("Stock item", stock_id)
        self.stock_id = stock_id


class ValidationException(BackofficeException):
    """Input validation errors."""

    pass
