from __future__ import annotations

import enum
from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from vansales.app.services.storage import StorageSession

AUDIT_TABLE = "audit_logs"


def _jsonable(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, (Decimal, UUID)):
        return str(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


async def log_action(
    tx: StorageSession,
    *,
    user_id: UUID | str | None,
    action: str,
    resource_type: str,
    resource_id: str,
    changes: dict[str, Any] | None = None,
) -> None:
    """Write a single row to the audit_logs table.

    Runs on the caller's transaction session, so the audit row is kept or
    rolled back together with the change it describes.
    """
    await tx.insert(
        AUDIT_TABLE,
        {
            "table_name": resource_type,
            "record_id": resource_id,
            "action": action,
            "changed_by": str(user_id) if user_id is not None else None,
            "new_values": _jsonable(changes) if changes is not None else None,
        },
    )
