"""Shared dependencies for admin API routers."""
from __future__ import annotations

from fastapi import HTTPException

from backoffice.bootstrap import Container

# Set by api_server.create_api_app
_container: Container | None = None

ERROR_STATUS_CODES = {
    "not_found": 404,
    "invalid_status": 400,
    "not_configured": 503,
    "already_validated": 409,
    "payment_not_validated": 409,
    "grant_failed": 502,
    "service_unavailable": 503,
}

ERROR_MESSAGES = {
    "not_found": "Not found",
    "invalid_status": "Invalid status",
    "not_configured": "Remote store is not configured",
    "already_validated": "Payment already validated",
    "payment_not_validated": "Payment not validated yet",
    "grant_failed": "Ticket grant failed",
    "service_unavailable": "Service unavailable",
}


def set_container(container: Container | None) -> None:
    global _container
    _container = container


def get_container() -> Container:
    """Dependency to get the wired services."""
    if _container is None:
        raise HTTPException(status_code=503, detail="Back-office not initialized")
    return _container


def raise_for_error_key(error_key: str | None, detail: str | None = None) -> None:
    if not error_key:
        return
    raise HTTPException(
        status_code=ERROR_STATUS_CODES.get(error_key, 400),
        detail=detail or ERROR_MESSAGES.get(error_key, error_key),
    )
