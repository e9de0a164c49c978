# app/schemas/user.py
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.daily_log import UserRole


class UserCreate(BaseModel):
    full_name: str = Field(..., min_length=1, examples=["Jane Murphy"])
    email: str | None = Field(default=None, examples=["jane@example.com"])
    role: UserRole = Field(default=UserRole.TEAM_LEADER)


class UserRead(UserCreate):
    id: int
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)
