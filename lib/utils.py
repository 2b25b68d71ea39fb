# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the application.
# =============================================================================

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any
from uuid import UUID


# =============================================================================
# UUID Utilities
# =============================================================================

def normalize_uuid(value: str | UUID) -> str:
    """
    Normalize a UUID to string format.

    Handles both string and UUID objects, ensuring consistent string output.

    Example:
        task_id = normalize_uuid(uuid_obj)  # "550e8400-..."
        task_id = normalize_uuid("550e8400-...")  # "550e8400-..."
    """
    return str(value) if isinstance(value, UUID) else value


def same_user(a: str | UUID | None, b: str | UUID | None) -> bool:
    """Compare two user ids regardless of str/UUID type."""
    if a is None or b is None:
        return False
    return normalize_uuid(a).lower() == normalize_uuid(b).lower()


# =============================================================================
# Row Serialization
# =============================================================================

def to_db_value(value: Any) -> Any:
    """
    Convert a Python value into something PostgREST accepts in JSON.

    Decimals become strings so currency amounts keep their exact digits;
    datetimes become ISO-8601 (naive values are treated as UTC).
    """
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat()
    return value


def utcnow() -> datetime:
    """Timezone-aware current time."""
    return datetime.now(timezone.utc)
