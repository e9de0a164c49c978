# app/schemas/report.py
from datetime import date, datetime

from pydantic import BaseModel, Field


class ReportMaterialLine(BaseModel):
    name: str
    quantity: float
    unit: str
    notes: str | None = None


class LogReportSnapshot(BaseModel):
    """
    Fully resolved, read-only view of a log used to build its report.

    Every display name is already looked up, so building and rendering the
    report never touches the database.
    """

    log_id: int
    log_date: date
    project_name: str
    project_address: str | None = None
    team_leader_name: str
    start_time: datetime
    end_time: datetime
    status: str = Field(..., examples=["approved"])
    approved_by_name: str | None = None
    approved_at: datetime | None = None
    employee_names: list[str] = Field(default_factory=list)
    work_description: str
    weather: str | None = None
    issues_encountered: str | None = None
    next_steps: str | None = None
    materials: list[ReportMaterialLine] = Field(default_factory=list)
