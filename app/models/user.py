# app/models/user.py
from sqlalchemy import Column, DateTime, Integer, String, func

from app.db.base import Base


class User(Base):
    """
    Directory entry for a person who can author or approve logs.

    `role` is either "manager" or "team_leader".
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True, unique=True)
    role = Column(String(32), nullable=False, default="team_leader")

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<User id={self.id} role={self.role}>"
