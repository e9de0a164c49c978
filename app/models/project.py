# app/models/project.py
from sqlalchemy import Boolean, Column, DateTime, Integer, String, func

from app.db.base import Base


class Project(Base):
    """
    A construction site / job that daily logs are recorded against.
    """

    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    address = Column(String(512), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        return f"<Project id={self.id} name={self.name!r}>"
