# app/api/routes/notifications.py
from http import HTTPStatus

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies.principal import Principal, get_current_principal
from app.db.session import get_db
from app.models.notification import Notification
from app.schemas.notification import NotificationRead

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get(
    "",
    response_model=list[NotificationRead],
    summary="List the caller's notifications",
    description="Newest first. Use `unread_only=true` for a badge count.",
)
async def list_notifications(
    unread_only: bool = Query(default=False),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
) -> list[NotificationRead]:
    stmt = select(Notification).where(Notification.user_id == principal.user_id)
    if unread_only:
        stmt = stmt.where(Notification.is_read.is_(False))

    result = await db.execute(stmt.order_by(Notification.id.desc()))
    return [NotificationRead.model_validate(n) for n in result.scalars().all()]


@router.post(
    "/{notification_id}/read",
    response_model=NotificationRead,
    summary="Mark a notification as read",
    responses={404: {"description": "No notification with this ID is addressed to the caller."}},
)
async def mark_notification_read(
    notification_id: int = Path(..., ge=1),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
) -> NotificationRead:
    notification = await db.get(Notification, notification_id)
    # Someone else's notification is reported as missing.
    if notification is None or notification.user_id != principal.user_id:
        raise HTTPException(
            status_code=HTTPStatus.NOT_FOUND,
            detail=f"Notification with id {notification_id} not found.",
        )

    notification.is_read = True
    await db.commit()
    await db.refresh(notification)

    return NotificationRead.model_validate(notification)
