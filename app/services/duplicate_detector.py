# app/services/duplicate_detector.py
from __future__ import annotations

from datetime import date as date_type

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.daily_log import DailyLog


async def find_duplicate(
    db: AsyncSession,
    log_date: date_type,
    team_leader_id: int,
    project_id: int,
    exclude_log_id: int | None = None,
) -> int | None:
    """
    Return the id of the log already holding (log_date, team_leader_id,
    project_id), or None.

    This is an advisory pre-check: the unique constraint on daily_logs is
    what actually guarantees the invariant under concurrent writers.
    `exclude_log_id` lets an update ignore the row being edited.
    """
    stmt = select(DailyLog.id).where(
        DailyLog.log_date == log_date,
        DailyLog.team_leader_id == team_leader_id,
        DailyLog.project_id == project_id,
    )
    if exclude_log_id is not None:
        stmt = stmt.where(DailyLog.id != exclude_log_id)

    result = await db.execute(stmt.limit(1))
    return result.scalar_one_or_none()
