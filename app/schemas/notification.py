# app/schemas/notification.py
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class NotificationKind(str, Enum):
    DUPLICATE_LOG_ATTEMPT = "duplicate_log_attempt"
    LOG_APPROVED = "log_approved"


class NotificationRead(BaseModel):
    """
    Public representation of an in-app notification.
    """

    id: int
    user_id: int
    kind: NotificationKind
    message: str = Field(..., examples=["Your daily log for March 1, 2024 has been approved."])
    related_log_id: int | None = None
    related_project_id: int | None = None
    is_read: bool
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)
