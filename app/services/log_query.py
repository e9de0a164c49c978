# app/services/log_query.py
from __future__ import annotations

import logging

from sqlalchemy import Select, and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.daily_log import DailyLog
from app.schemas.daily_log import LogFilter, UserRole

logger = logging.getLogger(__name__)


def apply_role_scope(
    filters: LogFilter,
    requester_role: str,
    requester_id: int,
) -> LogFilter:
    """
    Authorization floor for listings.

    Managers see whatever they ask for. Anyone else is pinned to their own
    logs: the team leader filter is overwritten with the requester's id no
    matter what was supplied.
    """
    if requester_role == UserRole.MANAGER.value:
        return filters

    if filters.team_leader_id is not None and filters.team_leader_id != requester_id:
        logger.info(
            "User %s asked for team leader %s; scoping to own logs",
            requester_id,
            filters.team_leader_id,
        )
    return filters.model_copy(update={"team_leader_id": requester_id})


def build_list_statement(filters: LogFilter) -> Select:
    """
    Translate a (already scoped) filter into a SELECT ordered by date, newest first.
    """
    conditions = []

    if filters.start_date is not None:
        conditions.append(DailyLog.log_date >= filters.start_date)
    if filters.end_date is not None:
        conditions.append(DailyLog.log_date <= filters.end_date)
    if filters.project_id is not None:
        conditions.append(DailyLog.project_id == filters.project_id)
    if filters.status is not None:
        conditions.append(DailyLog.status == filters.status.value)
    if filters.team_leader_id is not None:
        conditions.append(DailyLog.team_leader_id == filters.team_leader_id)
    if filters.search_term:
        conditions.append(
            DailyLog.work_description.icontains(filters.search_term, autoescape=True)
        )

    stmt = select(DailyLog)
    if conditions:
        stmt = stmt.where(and_(*conditions))
    return stmt.order_by(DailyLog.log_date.desc(), DailyLog.id.desc())


async def list_logs(
    db: AsyncSession,
    filters: LogFilter,
    requester_role: str,
    requester_id: int,
) -> list[DailyLog]:
    scoped = apply_role_scope(filters, requester_role, requester_id)
    result = await db.execute(build_list_statement(scoped))
    return list(result.scalars().all())
