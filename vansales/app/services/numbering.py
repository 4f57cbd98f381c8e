"""Human-readable document numbers.

Two schemes:

* :func:`timestamp_number` gives ``INV-261018-123456`` from the last six
  digits of the epoch milliseconds.  Two calls in the same millisecond (or
  exactly 1000 seconds apart) collide, so it is not unique.
* :class:`SequenceNumberGenerator` gives ``INV-261018-000001`` from a
  per-prefix, per-day counter stored in ``document_sequences``.  The counter
  is read and bumped inside the caller's transaction, so a rolled-back
  document does not consume a number.  All repositories use this one.
"""

from __future__ import annotations

from datetime import date, datetime

from vansales.app.services.storage import StorageSession

SEQUENCES_TABLE = "document_sequences"


def timestamp_number(prefix: str, now: datetime | None = None) -> str:
    if now is None:
        now = datetime.now()
    millis = str(int(now.timestamp() * 1000))[-6:]
    return f"{prefix}-{now:%y%m%d}-{millis}"


def format_sequence_number(prefix: str, on_date: date, value: int) -> str:
    return f"{prefix}-{on_date:%y%m%d}-{value:06d}"


class SequenceNumberGenerator:
    async def next_value(self, tx: StorageSession, prefix: str, on_date: date) -> int:
        rows = await tx.query(
            SEQUENCES_TABLE, {"prefix": prefix, "sequence_date": on_date}
        )
        if not rows:
            await tx.insert(
                SEQUENCES_TABLE,
                {"prefix": prefix, "sequence_date": on_date, "last_value": 1},
            )
            return 1
        value = rows[0]["last_value"] + 1
        await tx.update(SEQUENCES_TABLE, rows[0]["id"], {"last_value": value})
        return value

    async def next_number(
        self, tx: StorageSession, prefix: str, on_date: date | None = None
    ) -> str:
        if on_date is None:
            on_date = date.today()
        value = await self.next_value(tx, prefix, on_date)
        return format_sequence_number(prefix, on_date, value)
