# app/api/dependencies/services.py
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.services.notification_emitter import Notifier, get_notification_emitter
from app.services.log_lifecycle import LogLifecycleService


def get_notifier() -> Notifier:
    return get_notification_emitter()


def get_log_service(
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
) -> LogLifecycleService:
    return LogLifecycleService(db=db, notifier=notifier)
