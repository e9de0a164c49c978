# app/schemas/employee.py
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class EmployeeCreate(BaseModel):
    full_name: str = Field(..., min_length=1, examples=["Tom Byrne"])
    is_active: bool = True


class EmployeeRead(EmployeeCreate):
    id: int
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)
