"""Session log: append, list and clear entries, newest first."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from trsim.infra.config import settings
from trsim.models.db_models import LogEntry
from trsim.models.result import LogCategory


async def _next_seq(db: AsyncSession) -> int:
    result = await db.execute(select(func.coalesce(func.max(LogEntry.seq), 0)))
    return result.scalar_one() + 1


async def append_log(
    db: AsyncSession,
    text: str,
    category: LogCategory = LogCategory.SYSTEM,
    ts: datetime | None = None,
) -> LogEntry:
    """Add an entry and drop the oldest ones beyond the configured cap."""
    seq = await _next_seq(db)
    entry = LogEntry(seq=seq, text=text, category=category.value)
    if ts is not None:
        entry.ts = ts
    db.add(entry)
    await db.flush()

    cutoff = seq - settings.log_max_entries
    if cutoff > 0:
        await db.execute(delete(LogEntry).where(LogEntry.seq <= cutoff))
        await db.flush()
    return entry


async def get_log(db: AsyncSession, limit: int | None = None) -> list[LogEntry]:
    stmt = select(LogEntry).order_by(LogEntry.seq.desc())
    if limit is not None:
        stmt = stmt.limit(limit)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def count_log(db: AsyncSession) -> int:
    result = await db.execute(select(func.count()).select_from(LogEntry))
    return result.scalar_one()


async def clear_log(db: AsyncSession) -> None:
    await db.execute(delete(LogEntry))
    await db.flush()


def entry_to_dict(entry: LogEntry) -> dict:
    return {
        "id": entry.id,
        "ts": entry.ts.isoformat() if entry.ts else None,
        "category": entry.category,
        "text": entry.text,
    }
