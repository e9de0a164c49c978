# app/api/routes/projects.py
from http import HTTPStatus

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.models.project import Project
from app.schemas.project import ProjectCreate, ProjectRead, ProjectUpdate

router = APIRouter(prefix="/projects", tags=["Projects"])


@router.post(
    "",
    response_model=ProjectRead,
    status_code=HTTPStatus.CREATED,
    summary="Register a construction project",
    description=(
        "Add a project that team leaders can file daily logs against.\n\n"
        "The optional `address` is printed as the Location line of exported reports."
    ),
    responses={
        201: {
            "description": "Project successfully created.",
            "content": {
                "application/json": {
                    "example": {
                        "id": 1,
                        "name": "Riverside Apartments",
                        "address": "12 Quay Street, Dublin",
                        "is_active": True,
                    }
                }
            },
        },
    },
)
async def create_project(
    payload: ProjectCreate,
    db: AsyncSession = Depends(get_db),
) -> ProjectRead:
    project = Project(
        name=payload.name.strip(),
        address=(payload.address or "").strip() or None,
        is_active=payload.is_active,
    )
    db.add(project)
    await db.commit()
    await db.refresh(project)

    return ProjectRead.model_validate(project)


@router.get(
    "",
    response_model=list[ProjectRead],
    summary="List projects",
    description="Optional filters can be used to show only active or inactive projects.",
)
async def list_projects(
    only_active: bool | None = Query(
        default=None,
        description=(
            "If true, returns only projects where `is_active` is true. "
            "If false, returns only inactive projects. If omitted, returns all."
        ),
        examples=[True],
    ),
    db: AsyncSession = Depends(get_db),
) -> list[ProjectRead]:
    stmt = select(Project)
    if only_active is True:
        stmt = stmt.where(Project.is_active.is_(True))
    elif only_active is False:
        stmt = stmt.where(Project.is_active.is_(False))

    result = await db.execute(stmt.order_by(Project.id.asc()))
    projects = result.scalars().all()

    return [ProjectRead.model_validate(p) for p in projects]


@router.get(
    "/{project_id}",
    response_model=ProjectRead,
    summary="Get project details by ID",
    responses={
        404: {
            "description": "No project exists with the given ID.",
            "content": {
                "application/json": {
                    "example": {"detail": "Project with id 42 not found."}
                }
            },
        },
    },
)
async def get_project(
    project_id: int = Path(..., description="Numeric ID of the project.", ge=1),
    db: AsyncSession = Depends(get_db),
) -> ProjectRead:
    project = await db.get(Project, project_id)
    if project is None:
        raise HTTPException(
            status_code=HTTPStatus.NOT_FOUND,
            detail=f"Project with id {project_id} not found.",
        )

    return ProjectRead.model_validate(project)


@router.patch(
    "/{project_id}",
    response_model=ProjectRead,
    summary="Partially update an existing project",
    description="Only fields provided in the request body will be modified.",
    responses={404: {"description": "No project exists with the given ID."}},
)
async def update_project(
    project_id: int = Path(..., description="Numeric ID of the project.", ge=1),
    payload: ProjectUpdate | None = None,
    db: AsyncSession = Depends(get_db),
) -> ProjectRead:
    project = await db.get(Project, project_id)
    if project is None:
        raise HTTPException(
            status_code=HTTPStatus.NOT_FOUND,
            detail=f"Project with id {project_id} not found.",
        )

    if payload is None:
        # Nothing to update; return current state
        return ProjectRead.model_validate(project)

    for field, value in payload.model_dump(exclude_unset=True).items():
        # Only the address may be cleared.
        if value is None and field != "address":
            continue
        setattr(project, field, value)

    await db.commit()
    await db.refresh(project)

    return ProjectRead.model_validate(project)
