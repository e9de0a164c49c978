# app/api/routes/directory.py
from http import HTTPStatus

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.models.employee import Employee
from app.models.user import User
from app.schemas.daily_log import UserRole
from app.schemas.employee import EmployeeCreate, EmployeeRead
from app.schemas.user import UserCreate, UserRead

router = APIRouter(tags=["Directory"])


@router.post(
    "/users",
    response_model=UserRead,
    status_code=HTTPStatus.CREATED,
    summary="Register a manager or team leader",
    responses={400: {"description": "A user with the same email already exists."}},
)
async def create_user(
    payload: UserCreate,
    db: AsyncSession = Depends(get_db),
) -> UserRead:
    user = User(
        full_name=payload.full_name.strip(),
        email=payload.email,
        role=payload.role.value,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(
            status_code=HTTPStatus.BAD_REQUEST,
            detail=f"User with email '{payload.email}' already exists.",
        )
    await db.refresh(user)

    return UserRead.model_validate(user)


@router.get(
    "/users",
    response_model=list[UserRead],
    summary="List users",
)
async def list_users(
    role: UserRole | None = Query(default=None, description="Only users with this role."),
    db: AsyncSession = Depends(get_db),
) -> list[UserRead]:
    stmt = select(User)
    if role is not None:
        stmt = stmt.where(User.role == role.value)

    result = await db.execute(stmt.order_by(User.id.asc()))
    return [UserRead.model_validate(u) for u in result.scalars().all()]


@router.post(
    "/employees",
    response_model=EmployeeRead,
    status_code=HTTPStatus.CREATED,
    summary="Register a site employee",
)
async def create_employee(
    payload: EmployeeCreate,
    db: AsyncSession = Depends(get_db),
) -> EmployeeRead:
    employee = Employee(full_name=payload.full_name.strip(), is_active=payload.is_active)
    db.add(employee)
    await db.commit()
    await db.refresh(employee)

    return EmployeeRead.model_validate(employee)


@router.get(
    "/employees",
    response_model=list[EmployeeRead],
    summary="List site employees",
)
async def list_employees(
    only_active: bool | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
) -> list[EmployeeRead]:
    stmt = select(Employee)
    if only_active is True:
        stmt = stmt.where(Employee.is_active.is_(True))
    elif only_active is False:
        stmt = stmt.where(Employee.is_active.is_(False))

    result = await db.execute(stmt.order_by(Employee.full_name.asc(), Employee.id.asc()))
    return [EmployeeRead.model_validate(e) for e in result.scalars().all()]
