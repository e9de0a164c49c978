# app/schemas/daily_log.py
from __future__ import annotations

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class LogStatus(str, Enum):
    """
    Lifecycle states of a daily log, in the only order they may occur.
    """

    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"


class DocumentType(str, Enum):
    DELIVERY_NOTE = "delivery_note"
    RECEIPT = "receipt"
    INVOICE = "invoice"
    OTHER = "other"


class UserRole(str, Enum):
    MANAGER = "manager"
    TEAM_LEADER = "team_leader"


# --------------------------------------------------------------------------
# Nested value objects
# --------------------------------------------------------------------------

class MaterialEntry(BaseModel):
    """
    A material consumed during the day's work.

    Only types are checked here; required/non-negative rules are enforced by
    the lifecycle service so they hold regardless of the entry point.
    """

    name: str | None = Field(default=None, examples=["Cement"])
    quantity: float | None = Field(default=None, examples=[12.5])
    unit: str | None = Field(default=None, examples=["bags"])
    notes: str | None = Field(default=None, examples=["Delivered 7am"])

    model_config = ConfigDict(from_attributes=True)


class PhotoRead(BaseModel):
    id: int
    path: str
    original_name: str
    description: str | None = None
    uploaded_at: datetime

    model_config = ConfigDict(from_attributes=True)


class DocumentRead(BaseModel):
    id: int
    path: str
    original_name: str
    doc_type: DocumentType
    uploaded_at: datetime

    model_config = ConfigDict(from_attributes=True)


# --------------------------------------------------------------------------
# Create schema (POST /logs)
# --------------------------------------------------------------------------

class LogCreate(BaseModel):
    """
    Payload for creating a log. The team leader is always the caller and is
    never read from the body.
    """

    log_date: date | None = Field(
        default=None,
        description="Calendar date the work was carried out.",
        examples=["2024-03-01"],
    )
    project_id: int | None = Field(default=None, examples=[1])
    employee_ids: list[int] = Field(
        default_factory=list,
        description="Employees present on site, in display order.",
    )
    start_time: datetime | None = Field(default=None, examples=["2024-03-01T08:00:00"])
    end_time: datetime | None = Field(default=None, examples=["2024-03-01T16:30:00"])
    work_description: str | None = Field(default=None, examples=["Poured slab for block B"])
    weather: str | None = None
    issues_encountered: str | None = None
    next_steps: str | None = None
    materials_used: list[MaterialEntry] = Field(default_factory=list)


# --------------------------------------------------------------------------
# Update schema (PATCH /logs/{id})
# --------------------------------------------------------------------------

class LogUpdate(BaseModel):
    """
    Partial update. Only fields present in the request body are applied;
    an explicit null clears an optional field.
    """

    log_date: date | None = None
    project_id: int | None = None
    employee_ids: list[int] | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    work_description: str | None = None
    weather: str | None = None
    issues_encountered: str | None = None
    next_steps: str | None = None
    materials_used: list[MaterialEntry] | None = None


# --------------------------------------------------------------------------
# Read schema
# --------------------------------------------------------------------------

class LogRead(BaseModel):
    id: int
    log_date: date
    team_leader_id: int
    team_leader_name: str | None = None
    project_id: int
    project_name: str | None = None
    project_address: str | None = None
    employee_ids: list[int]
    employee_names: list[str]
    start_time: datetime
    end_time: datetime
    work_description: str
    weather: str | None = None
    issues_encountered: str | None = None
    next_steps: str | None = None
    materials_used: list[MaterialEntry]
    photos: list[PhotoRead]
    documents: list[DocumentRead]
    status: LogStatus
    approved_by_id: int | None = None
    approved_by_name: str | None = None
    approved_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_model(cls, log) -> "LogRead":
        """
        Build the response from a fully loaded DailyLog, flattening the
        display names of its relations.
        """
        return cls(
            id=log.id,
            log_date=log.log_date,
            team_leader_id=log.team_leader_id,
            team_leader_name=log.team_leader.full_name if log.team_leader else None,
            project_id=log.project_id,
            project_name=log.project.name if log.project else None,
            project_address=log.project.address if log.project else None,
            employee_ids=log.employee_ids,
            employee_names=[e.full_name for e in log.employees],
            start_time=log.start_time,
            end_time=log.end_time,
            work_description=log.work_description,
            weather=log.weather,
            issues_encountered=log.issues_encountered,
            next_steps=log.next_steps,
            materials_used=[MaterialEntry.model_validate(m) for m in log.materials_used],
            photos=[PhotoRead.model_validate(p) for p in log.photos],
            documents=[DocumentRead.model_validate(d) for d in log.documents],
            status=LogStatus(log.status),
            approved_by_id=log.approved_by_id,
            approved_by_name=log.approved_by.full_name if log.approved_by else None,
            approved_at=log.approved_at,
            created_at=log.created_at,
            updated_at=log.updated_at,
        )


class LogTransitionResult(BaseModel):
    """
    Response body for submit/approve.
    """

    message: str = Field(..., examples=["Log submitted successfully"])
    id: int
    status: LogStatus


class LogDeleteResult(BaseModel):
    message: str = Field(..., examples=["Log deleted successfully"])


# --------------------------------------------------------------------------
# Query filter (GET /logs)
# --------------------------------------------------------------------------

class LogFilter(BaseModel):
    """
    Filters accepted by the log listing. Every key is optional and bounds
    are inclusive.
    """

    start_date: date | None = None
    end_date: date | None = None
    project_id: int | None = None
    status: LogStatus | None = None
    team_leader_id: int | None = None
    search_term: str | None = None
