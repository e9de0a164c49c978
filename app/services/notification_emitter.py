# app/services/notification_emitter.py
from __future__ import annotations

import asyncio
import logging
from datetime import date as date_type
from typing import Any, Callable, Coroutine, Dict, Optional, Protocol

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.db.session import AsyncSessionLocal
from app.models.daily_log import DailyLog
from app.models.notification import Notification
from app.models.project import Project
from app.schemas.notification import NotificationKind
from app.services.report_builder import format_long_date

logger = logging.getLogger(__name__)


class NotificationDeliveryError(RuntimeError):
    """
    Raised inside a dispatch task when the webhook rejects an event.
    Never propagates to the operation that triggered the notification.
    """


class Notifier(Protocol):
    """
    Lifecycle event sink. Both methods schedule work and return immediately.
    """

    def notify_duplicate_attempt(
        self, user_id: int, log_date: date_type, project_id: int
    ) -> None: ...

    def notify_log_approved(self, log_id: int) -> None: ...


SessionFactory = Callable[[], Any]


class NotificationEmitter:
    """
    Fire-and-forget notification dispatcher.

    Responsibilities
    ----------------
    - Persist an in-app `Notification` row for the addressed user, using its
      own session so the triggering transaction is never involved.
    - Optionally forward the event as JSON to NOTIFICATION_WEBHOOK_URL.

    Notes
    -----
    - Dispatch runs as an asyncio task on the current loop; callers never
      await it. Failures are logged and otherwise dropped.
    - `drain()` waits for in-flight tasks (app shutdown, tests).
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        webhook_url: str | None = None,
        timeout_seconds: float = 5.0,
    ) -> None:
        self._session_factory = session_factory
        self._webhook_url = webhook_url
        self._timeout_seconds = timeout_seconds
        self._pending: set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def notify_duplicate_attempt(
        self, user_id: int, log_date: date_type, project_id: int
    ) -> None:
        self._dispatch(self._deliver_duplicate_attempt(user_id, log_date, project_id))

    def notify_log_approved(self, log_id: int) -> None:
        self._dispatch(self._deliver_log_approved(log_id))

    async def drain(self) -> None:
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    # ------------------------------------------------------------------
    # Task plumbing
    # ------------------------------------------------------------------

    def _dispatch(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Notification dispatch failed", exc_info=exc)

    # ------------------------------------------------------------------
    # Deliveries
    # ------------------------------------------------------------------

    async def _deliver_duplicate_attempt(
        self, user_id: int, log_date: date_type, project_id: int
    ) -> None:
        async with self._session_factory() as session:
            project = await session.get(Project, project_id)
            project_label = project.name if project else f"project #{project_id}"
            message = (
                f"A log for {project_label} on {format_long_date(log_date)} "
                "already exists. Edit the existing log instead of creating a new one."
            )
            await self._store(
                session,
                Notification(
                    user_id=user_id,
                    kind=NotificationKind.DUPLICATE_LOG_ATTEMPT.value,
                    message=message,
                    related_project_id=project_id,
                ),
            )

        await self._post_webhook(
            {
                "event": NotificationKind.DUPLICATE_LOG_ATTEMPT.value,
                "user_id": user_id,
                "date": log_date.isoformat(),
                "project_id": project_id,
            }
        )

    async def _deliver_log_approved(self, log_id: int) -> None:
        async with self._session_factory() as session:
            log = await session.get(DailyLog, log_id)
            if log is None:
                logger.warning("Approved log %s vanished before notification", log_id)
                return

            project_label = log.project.name if log.project else f"project #{log.project_id}"
            message = (
                f"Your daily log for {project_label} on "
                f"{format_long_date(log.log_date)} has been approved."
            )
            team_leader_id = log.team_leader_id
            await self._store(
                session,
                Notification(
                    user_id=team_leader_id,
                    kind=NotificationKind.LOG_APPROVED.value,
                    message=message,
                    related_log_id=log.id,
                    related_project_id=log.project_id,
                ),
            )

        await self._post_webhook(
            {
                "event": NotificationKind.LOG_APPROVED.value,
                "user_id": team_leader_id,
                "log_id": log_id,
            }
        )

    async def _store(self, session: AsyncSession, notification: Notification) -> None:
        session.add(notification)
        await session.commit()
        logger.info(
            "Stored %s notification for user %s",
            notification.kind,
            notification.user_id,
        )

    async def _post_webhook(self, payload: Dict[str, Any]) -> None:
        if not self._webhook_url:
            return

        async with httpx.AsyncClient(timeout=self._timeout_seconds) as client:
            resp = await client.post(self._webhook_url, json=payload)

        if resp.status_code // 100 != 2:
            raise NotificationDeliveryError(
                f"Notification webhook failed (status={resp.status_code}): {resp.text}"
            )


# Simple singleton-style accessor wired to app settings
_emitter_instance: Optional[NotificationEmitter] = None


def get_notification_emitter() -> NotificationEmitter:
    """
    Lazily construct the process-wide NotificationEmitter.
    """
    global _emitter_instance
    if _emitter_instance is None:
        settings = get_settings()
        webhook_url = settings.NOTIFICATION_WEBHOOK_URL
        _emitter_instance = NotificationEmitter(
            session_factory=AsyncSessionLocal,
            webhook_url=str(webhook_url) if webhook_url else None,
            timeout_seconds=settings.NOTIFICATION_TIMEOUT_SECONDS,
        )
    return _emitter_instance
