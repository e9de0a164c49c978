# app/models/daily_log.py
from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import relationship

from app.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DailyLog(Base):
    """
    One team leader's record of a single day's work on one project.

    Status moves strictly draft -> submitted -> approved; only the lifecycle
    service writes `status`, `approved_by_id` and `approved_at`.
    """

    __tablename__ = "daily_logs"

    id = Column(Integer, primary_key=True, index=True)

    log_date = Column(Date, nullable=False, index=True)
    team_leader_id = Column(
        Integer,
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    project_id = Column(
        Integer,
        ForeignKey("projects.id"),
        nullable=False,
        index=True,
    )

    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)

    work_description = Column(Text, nullable=False)
    weather = Column(String(255), nullable=True)
    issues_encountered = Column(Text, nullable=True)
    next_steps = Column(Text, nullable=True)

    status = Column(String(16), nullable=False, default="draft", index=True)
    approved_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    team_leader = relationship("User", foreign_keys=[team_leader_id], lazy="joined")
    approved_by = relationship("User", foreign_keys=[approved_by_id], lazy="joined")
    project = relationship("Project", lazy="joined")

    employee_links = relationship(
        "LogEmployee",
        order_by="LogEmployee.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )
    materials_used = relationship(
        "LogMaterial",
        order_by="LogMaterial.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )
    photos = relationship(
        "LogPhoto",
        order_by="LogPhoto.id",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )
    documents = relationship(
        "LogDocument",
        order_by="LogDocument.id",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )

    __table_args__ = (
        UniqueConstraint(
            "log_date",
            "team_leader_id",
            "project_id",
            name="uq_daily_logs_date_leader_project",
        ),
    )

    @property
    def employee_ids(self) -> list[int]:
        return [link.employee_id for link in self.employee_links]

    @property
    def employees(self) -> list:
        return [link.employee for link in self.employee_links if link.employee is not None]

    def __repr__(self) -> str:
        return (
            f"<DailyLog id={self.id} date={self.log_date} "
            f"team_leader_id={self.team_leader_id} project_id={self.project_id} "
            f"status={self.status}>"
        )


class LogEmployee(Base):
    """
    Ordered membership of an employee in a log's crew.
    """

    __tablename__ = "daily_log_employees"

    log_id = Column(
        Integer,
        ForeignKey("daily_logs.id", ondelete="CASCADE"),
        primary_key=True,
    )
    employee_id = Column(
        Integer,
        ForeignKey("employees.id", ondelete="CASCADE"),
        primary_key=True,
    )
    position = Column(Integer, nullable=False, default=0)

    employee = relationship("Employee", lazy="selectin")


class LogMaterial(Base):
    __tablename__ = "log_materials"

    id = Column(Integer, primary_key=True)
    log_id = Column(
        Integer,
        ForeignKey("daily_logs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position = Column(Integer, nullable=False, default=0)

    name = Column(String(255), nullable=False)
    quantity = Column(Float, nullable=False)
    unit = Column(String(64), nullable=False)
    notes = Column(Text, nullable=True)


class LogPhoto(Base):
    __tablename__ = "log_photos"

    id = Column(Integer, primary_key=True)
    log_id = Column(
        Integer,
        ForeignKey("daily_logs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    path = Column(String(512), nullable=False)
    original_name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    uploaded_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)


class LogDocument(Base):
    """
    `doc_type` is one of delivery_note, receipt, invoice, other.
    """

    __tablename__ = "log_documents"

    id = Column(Integer, primary_key=True)
    log_id = Column(
        Integer,
        ForeignKey("daily_logs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    path = Column(String(512), nullable=False)
    original_name = Column(String(255), nullable=False)
    doc_type = Column(String(32), nullable=False, default="other")
    uploaded_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
