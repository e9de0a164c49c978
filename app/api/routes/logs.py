# app/api/routes/logs.py
from datetime import date as date_type
from http import HTTPStatus

from fastapi import APIRouter, Depends, Path, Query, Response

from app.api.dependencies.principal import Principal, get_current_principal, require_manager
from app.api.dependencies.services import get_log_service
from app.schemas.daily_log import (
    LogCreate,
    LogDeleteResult,
    LogFilter,
    LogRead,
    LogStatus,
    LogTransitionResult,
    LogUpdate,
)
from app.services.log_lifecycle import LogLifecycleService
from app.services.pdf_renderer import render_log_report

router = APIRouter(prefix="/logs", tags=["Logs"])


_CONFLICT_RESPONSE = {
    "description": "Operation not allowed in the log's current status.",
    "content": {
        "application/json": {
            "example": {
                "kind": "conflict",
                "detail": "Log is already submitted",
                "current_status": "submitted",
            }
        }
    },
}


@router.post(
    "",
    response_model=LogRead,
    status_code=HTTPStatus.CREATED,
    summary="Create a draft daily log",
    description=(
        "Create a new daily log owned by the caller, in `draft` status.\n\n"
        "Only one log may exist per (date, team leader, project). A second attempt "
        "is rejected with 409 and the id of the existing log, and the caller "
        "receives a duplicate-attempt notification."
    ),
    responses={
        400: {"description": "A required field is missing or malformed."},
        409: {
            "description": "A log already exists for this date and project.",
            "content": {
                "application/json": {
                    "example": {
                        "kind": "duplicate_log",
                        "detail": "A log already exists for this date and project",
                        "existing_log_id": 17,
                    }
                }
            },
        },
    },
)
async def create_log(
    payload: LogCreate,
    principal: Principal = Depends(get_current_principal),
    service: LogLifecycleService = Depends(get_log_service),
) -> LogRead:
    log = await service.create(payload, requester_id=principal.user_id)
    return LogRead.from_model(log)


@router.get(
    "",
    response_model=list[LogRead],
    summary="List daily logs",
    description=(
        "Return logs matching the given filters, newest date first.\n\n"
        "- Date bounds are inclusive and independently optional.\n"
        "- `search_term` is a case-insensitive substring match on the work description.\n"
        "- Team leaders only ever see their own logs; `team_leader_id` is ignored for them."
    ),
)
async def list_logs(
    start_date: date_type | None = Query(default=None, examples=["2024-03-01"]),
    end_date: date_type | None = Query(default=None, examples=["2024-03-31"]),
    project_id: int | None = Query(default=None),
    status: LogStatus | None = Query(default=None),
    team_leader_id: int | None = Query(default=None),
    search_term: str | None = Query(default=None, examples=["slab"]),
    principal: Principal = Depends(get_current_principal),
    service: LogLifecycleService = Depends(get_log_service),
) -> list[LogRead]:
    filters = LogFilter(
        start_date=start_date,
        end_date=end_date,
        project_id=project_id,
        status=status,
        team_leader_id=team_leader_id,
        search_term=search_term,
    )
    logs = await service.list(filters, principal.role, principal.user_id)
    return [LogRead.from_model(log) for log in logs]


@router.get(
    "/{log_id}",
    response_model=LogRead,
    summary="Get a daily log",
    responses={
        403: {"description": "Team leaders may only view their own logs."},
        404: {"description": "No log exists with the given ID."},
    },
)
async def get_log(
    log_id: int = Path(..., ge=1),
    principal: Principal = Depends(get_current_principal),
    service: LogLifecycleService = Depends(get_log_service),
) -> LogRead:
    log = await service.get(log_id, principal.user_id, principal.role)
    return LogRead.from_model(log)


@router.patch(
    "/{log_id}",
    response_model=LogRead,
    summary="Partially update a daily log",
    description=(
        "Only fields present in the request body are changed. Sending `null` "
        "clears an optional field. Approved logs cannot be edited."
    ),
    responses={409: _CONFLICT_RESPONSE},
)
async def update_log(
    payload: LogUpdate,
    log_id: int = Path(..., ge=1),
    principal: Principal = Depends(get_current_principal),
    service: LogLifecycleService = Depends(get_log_service),
) -> LogRead:
    log = await service.update(log_id, payload, requester_id=principal.user_id)
    return LogRead.from_model(log)


@router.delete(
    "/{log_id}",
    response_model=LogDeleteResult,
    summary="Delete a daily log",
    description=(
        "Owners may delete their draft or submitted logs. Managers may delete "
        "any log, including approved ones."
    ),
    responses={409: _CONFLICT_RESPONSE},
)
async def delete_log(
    log_id: int = Path(..., ge=1),
    principal: Principal = Depends(get_current_principal),
    service: LogLifecycleService = Depends(get_log_service),
) -> LogDeleteResult:
    await service.remove(log_id, principal.user_id, principal.is_manager)
    return LogDeleteResult(message="Log deleted successfully")


@router.post(
    "/{log_id}/submit",
    response_model=LogTransitionResult,
    summary="Submit a draft log for approval",
    responses={409: _CONFLICT_RESPONSE},
)
async def submit_log(
    log_id: int = Path(..., ge=1),
    principal: Principal = Depends(get_current_principal),
    service: LogLifecycleService = Depends(get_log_service),
) -> LogTransitionResult:
    log = await service.submit(log_id, requester_id=principal.user_id)
    return LogTransitionResult(
        message="Log submitted successfully",
        id=log.id,
        status=LogStatus(log.status),
    )


@router.post(
    "/{log_id}/approve",
    response_model=LogTransitionResult,
    summary="Approve a submitted log (managers only)",
    responses={
        403: {"description": "Caller is not a registered manager."},
        409: _CONFLICT_RESPONSE,
    },
)
async def approve_log(
    log_id: int = Path(..., ge=1),
    principal: Principal = Depends(require_manager),
    service: LogLifecycleService = Depends(get_log_service),
) -> LogTransitionResult:
    log = await service.approve(log_id, approver_id=principal.user_id)
    return LogTransitionResult(
        message="Log approved successfully",
        id=log.id,
        status=LogStatus(log.status),
    )


@router.get(
    "/{log_id}/export/pdf",
    response_class=Response,
    summary="Export a daily log as PDF",
    description="Visible to managers and to the team leader who owns the log.",
    responses={200: {"content": {"application/pdf": {}}}},
)
async def export_log_pdf(
    log_id: int = Path(..., ge=1),
    principal: Principal = Depends(get_current_principal),
    service: LogLifecycleService = Depends(get_log_service),
) -> Response:
    snapshot = await service.resolve_report(log_id, principal.user_id, principal.role)
    pdf_bytes = render_log_report(snapshot)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename=daily-log-{log_id}.pdf"},
    )
