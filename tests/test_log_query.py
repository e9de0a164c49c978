# tests/test_log_query.py
from datetime import date, datetime

import pytest

from app.db.session import AsyncSessionLocal
from app.schemas.daily_log import LogCreate, LogFilter, LogStatus
from app.services.log_lifecycle import LogLifecycleService
from app.services.log_query import apply_role_scope, list_logs


def test_role_scope_leaves_manager_filters_untouched():
    filters = LogFilter(team_leader_id=7, project_id=3)
    assert apply_role_scope(filters, "manager", requester_id=1) is filters


def test_role_scope_pins_team_leader_to_requester():
    filters = LogFilter(team_leader_id=7, search_term="slab")

    scoped = apply_role_scope(filters, "team_leader", requester_id=2)

    assert scoped.team_leader_id == 2
    assert scoped.search_term == "slab"
    # The caller's filter object is not modified.
    assert filters.team_leader_id == 7


def test_role_scope_adds_team_leader_when_absent():
    scoped = apply_role_scope(LogFilter(), "team_leader", requester_id=5)
    assert scoped.team_leader_id == 5


async def _create(service, seeded, leader, day, project=None, description="General works"):
    return await service.create(
        LogCreate(
            log_date=date(2024, 3, day),
            project_id=project or seeded.project,
            start_time=datetime(2024, 3, day, 8, 0),
            end_time=datetime(2024, 3, day, 16, 0),
            work_description=description,
        ),
        requester_id=leader,
    )


@pytest.mark.asyncio
async def test_listing_filters_and_orders_newest_first(seeded, notifier):
    async with AsyncSessionLocal() as session:
        service = LogLifecycleService(session, notifier)
        first = await _create(service, seeded, seeded.leader, 1, description="Poured SLAB east")
        second = await _create(service, seeded, seeded.leader, 2)
        third = await _create(service, seeded, seeded.leader, 3, description="Slab curing")
        await _create(service, seeded, seeded.leader, 3, project=seeded.other_project)
        await _create(service, seeded, seeded.other_leader, 2)
        await service.submit(second.id, requester_id=seeded.leader)

        everything = await list_logs(session, LogFilter(), "manager", seeded.manager)
        assert [log.log_date.day for log in everything] == [3, 3, 2, 2, 1]

        window = await list_logs(
            session,
            LogFilter(start_date=date(2024, 3, 2), end_date=date(2024, 3, 3), project_id=seeded.project),
            "manager",
            seeded.manager,
        )
        assert {log.log_date.day for log in window} == {2, 3}
        assert all(log.project_id == seeded.project for log in window)

        submitted = await list_logs(
            session, LogFilter(status=LogStatus.SUBMITTED), "manager", seeded.manager
        )
        assert [log.id for log in submitted] == [second.id]

        searched = await list_logs(
            session, LogFilter(search_term="slab"), "manager", seeded.manager
        )
        assert [log.id for log in searched] == [third.id, first.id]


@pytest.mark.asyncio
async def test_search_term_wildcards_are_literal(seeded, notifier):
    async with AsyncSessionLocal() as session:
        service = LogLifecycleService(session, notifier)
        await _create(service, seeded, seeded.leader, 1, description="100% complete")
        await _create(service, seeded, seeded.leader, 2, description="1000 blocks laid")

        matches = await list_logs(session, LogFilter(search_term="0%"), "manager", seeded.manager)

    assert [log.work_description for log in matches] == ["100% complete"]


@pytest.mark.asyncio
async def test_team_leader_never_sees_other_leaders_logs(seeded, notifier):
    async with AsyncSessionLocal() as session:
        service = LogLifecycleService(session, notifier)
        own = await _create(service, seeded, seeded.leader, 1)
        await _create(service, seeded, seeded.other_leader, 1)

        logs = await service.list(
            LogFilter(team_leader_id=seeded.other_leader), "team_leader", seeded.leader
        )

    assert [log.id for log in logs] == [own.id]
