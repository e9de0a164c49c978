# app/models/notification.py
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, func

from app.db.base import Base


class Notification(Base):
    """
    In-app notification addressed to a single user.

    `kind` is one of "duplicate_log_attempt" or "log_approved".
    """

    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    kind = Column(String(64), nullable=False)
    message = Column(Text, nullable=False)

    # No FK constraints: notifications outlive the log they mention.
    related_log_id = Column(Integer, nullable=True)
    related_project_id = Column(Integer, nullable=True)

    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<Notification id={self.id} user_id={self.user_id} kind={self.kind}>"
