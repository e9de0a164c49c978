# app/services/directory.py
from __future__ import annotations

import logging
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.employee import Employee
from app.models.project import Project
from app.models.user import User

logger = logging.getLogger(__name__)


class Directory:
    """
    Read-only lookups of the people and projects a log refers to.

    Missing ids resolve to None (or are skipped for collections); whether
    that is fatal is the caller's decision.
    """

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def get_user(self, user_id: int | None) -> User | None:
        if user_id is None:
            return None
        return await self._db.get(User, user_id)

    async def get_project(self, project_id: int | None) -> Project | None:
        if project_id is None:
            return None
        return await self._db.get(Project, project_id)

    async def get_employees(self, employee_ids: Iterable[int]) -> list[Employee]:
        """
        Resolve employee ids, keeping the requested order and dropping
        duplicates and unknown ids.
        """
        ordered_ids: list[int] = []
        for employee_id in employee_ids:
            if employee_id not in ordered_ids:
                ordered_ids.append(employee_id)

        if not ordered_ids:
            return []

        result = await self._db.execute(
            select(Employee).where(Employee.id.in_(ordered_ids))
        )
        by_id = {employee.id: employee for employee in result.scalars().all()}

        missing = [i for i in ordered_ids if i not in by_id]
        if missing:
            logger.warning("Ignoring unknown employee ids %s", missing)

        return [by_id[i] for i in ordered_ids if i in by_id]
