"""Shared helper utilities reused across entities, services and sync."""
from __future__ import annotations

import secrets
import time
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping


def utcnow() -> datetime:
    """Return current timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def new_entity_id(prefix: str) -> str:
    """Generate ids shaped like ``order-<millis>-<random>``."""
    return f"{prefix}-{int(time.time() * 1000)}-{secrets.token_hex(5)[:9]}"


def to_decimal(value: Any, default: Decimal | None = Decimal("0")) -> Decimal | None:
    """Convert remote numbers (floats, strings, None) to Decimal via str()."""
    if value is None or value == "":
        return default
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return default


def money_to_json(value: Decimal | None) -> float | None:
    if value is None:
        return None
    return float(value)


def datetime_to_json(value: datetime | None) -> str | None:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def get_field(row: Any, key: str, default: Any = None) -> Any:
    """Safely extract a column from a remote row (mapping or object)."""
    if row is None:
        return default
    if isinstance(row, Mapping):
        value = row.get(key, default)
        return default if value is None else value
    return getattr(row, key, default)


def ensure_aware(value: datetime | None) -> datetime | None:
    """Treat naive datetimes coming from remote rows as UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
