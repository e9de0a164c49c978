# app/schemas/project.py

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


# --------------------------------------------------------------------------
# Base schema shared by create/update/read
# --------------------------------------------------------------------------

class ProjectBase(BaseModel):
    """
    Shared fields used by ProjectCreate and ProjectRead.
    """
    name: str = Field(
        ...,
        min_length=1,
        description="Human-readable project name.",
        examples=["Riverside Apartments"],
    )

    address: str | None = Field(
        default=None,
        description="Site address printed on exported reports.",
        examples=["12 Quay Street, Dublin"],
    )

    is_active: bool = Field(
        default=True,
        description="Whether new logs are expected for this project.",
    )


# --------------------------------------------------------------------------
# Create schema (POST /projects)
# --------------------------------------------------------------------------

class ProjectCreate(ProjectBase):
    pass


# --------------------------------------------------------------------------
# Update schema (PATCH /projects/{id})
# --------------------------------------------------------------------------

class ProjectUpdate(BaseModel):
    """
    Schema for updating a project.
    All fields are optional; only provided fields are updated.
    """
    name: str | None = Field(default=None, min_length=1)
    address: str | None = Field(default=None)
    is_active: bool | None = Field(default=None)


# --------------------------------------------------------------------------
# Read schema (GET /projects, GET /projects/{id})
# --------------------------------------------------------------------------

class ProjectRead(ProjectBase):
    """
    Response schema for reading a project.
    Includes the DB-generated fields.
    """

    id: int = Field(
        ...,
        description="Auto-incremented project ID.",
        examples=[12],
    )

    created_at: datetime | None = Field(
        None,
        description="Timestamp when the project record was created (if available).",
    )

    updated_at: datetime | None = Field(
        None,
        description="Timestamp when the project record was last updated (if available).",
    )

    model_config = ConfigDict(from_attributes=True)
