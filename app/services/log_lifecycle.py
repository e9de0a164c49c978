# app/services/log_lifecycle.py
from __future__ import annotations

import logging
from datetime import date as date_type
from datetime import datetime, timezone
from typing import Any, Callable

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import (
    DuplicateLogError,
    LogConflictError,
    LogForbiddenError,
    LogNotFoundError,
    LogValidationError,
    ReportRenderError,
)
from app.models.daily_log import DailyLog, LogDocument, LogEmployee, LogMaterial, LogPhoto
from app.schemas.daily_log import (
    DocumentType,
    LogCreate,
    LogFilter,
    LogStatus,
    LogUpdate,
    UserRole,
)
from app.schemas.report import LogReportSnapshot, ReportMaterialLine
from app.services.directory import Directory
from app.services.duplicate_detector import find_duplicate
from app.services.log_query import list_logs
from app.services.notification_emitter import Notifier

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("log_date", "project_id", "start_time", "end_time", "work_description")
OPTIONAL_TEXT_FIELDS = ("weather", "issues_encountered", "next_steps")
SCALAR_FIELDS = REQUIRED_FIELDS + OPTIONAL_TEXT_FIELDS


# --------------------------------------------------------------------------
# Field normalization / validation
# --------------------------------------------------------------------------

def _strip(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


def _normalize_material(material: Any) -> dict[str, Any]:
    if hasattr(material, "model_dump"):
        material = material.model_dump()
    notes = _strip(material.get("notes"))
    return {
        "name": _strip(material.get("name")),
        "quantity": material.get("quantity"),
        "unit": _strip(material.get("unit")),
        "notes": notes or None,
    }


def normalize_fields(values: dict[str, Any]) -> dict[str, Any]:
    """
    Trim text, turn blank optional text into None and flatten materials.
    Only keys present in `values` are returned.
    """
    normalized: dict[str, Any] = {}
    for key, value in values.items():
        if key == "materials_used":
            normalized[key] = [_normalize_material(m) for m in (value or [])]
        elif key == "employee_ids":
            normalized[key] = list(value or [])
        elif key in OPTIONAL_TEXT_FIELDS:
            normalized[key] = _strip(value) or None
        else:
            normalized[key] = _strip(value)
    return normalized


def validate_fields(values: dict[str, Any]) -> None:
    """
    Check a complete set of log fields. Raises LogValidationError listing
    every problem at once.

    `end_time` is not compared with `start_time`.
    """
    errors: list[dict[str, str]] = []

    for field in REQUIRED_FIELDS:
        value = values.get(field)
        if value is None or (isinstance(value, str) and not value):
            errors.append({"field": field, "message": f"{field} is required"})

    for index, material in enumerate(values.get("materials_used") or []):
        prefix = f"materials_used[{index}]"
        if not material.get("name"):
            errors.append({"field": f"{prefix}.name", "message": "Material name is required"})
        quantity = material.get("quantity")
        if quantity is None:
            errors.append({"field": f"{prefix}.quantity", "message": "Quantity is required"})
        elif quantity < 0:
            errors.append({"field": f"{prefix}.quantity", "message": "Quantity cannot be negative"})
        if not material.get("unit"):
            errors.append({"field": f"{prefix}.unit", "message": "Unit is required"})

    if errors:
        raise LogValidationError(errors)


# --------------------------------------------------------------------------
# Service
# --------------------------------------------------------------------------

class LogLifecycleService:
    """
    Owns the daily log state machine.

    draft --submit--> submitted --approve--> approved

    Every operation loads the log, checks who is asking and what state the
    log is in, then applies one change and commits. Status, approver and
    approval time are written nowhere else.
    """

    def __init__(self, db: AsyncSession, notifier: Notifier) -> None:
        self._db = db
        self._notifier = notifier
        self._directory = Directory(db)

    # ------------------------------------------------------------------
    # Loading / helpers
    # ------------------------------------------------------------------

    async def _load(self, log_id: int) -> DailyLog:
        stmt = (
            select(DailyLog)
            .where(DailyLog.id == log_id)
            .execution_options(populate_existing=True)
        )
        result = await self._db.execute(stmt)
        log = result.scalar_one_or_none()
        if log is None:
            raise LogNotFoundError(log_id)
        return log

    def _notify(self, send: Callable[[], None]) -> None:
        # Notification problems are reported here and nowhere else.
        try:
            send()
        except Exception:
            logger.exception("Failed to schedule notification")

    async def _reject_duplicate(
        self,
        existing_log_id: int,
        requester_id: int,
        log_date: date_type,
        project_id: int,
    ) -> None:
        logger.warning(
            "Duplicate log attempt by user %s for project %s on %s (existing log %s)",
            requester_id,
            project_id,
            log_date,
            existing_log_id,
        )
        self._notify(
            lambda: self._notifier.notify_duplicate_attempt(requester_id, log_date, project_id)
        )
        raise DuplicateLogError(existing_log_id)

    async def _commit_unique(
        self,
        requester_id: int,
        log_date: date_type,
        project_id: int,
        exclude_log_id: int | None,
        notify: bool,
    ) -> None:
        """
        Commit, mapping a unique-constraint rejection (a writer that slipped
        past the pre-check) to DuplicateLogError.
        """
        try:
            await self._db.commit()
        except IntegrityError:
            await self._db.rollback()
            existing = await find_duplicate(
                self._db, log_date, requester_id, project_id, exclude_log_id=exclude_log_id
            )
            if existing is None:
                raise
            if notify:
                await self._reject_duplicate(existing, requester_id, log_date, project_id)
            raise DuplicateLogError(existing) from None

    async def _transition(
        self,
        log: DailyLog,
        expected: LogStatus,
        values: dict[str, Any],
    ) -> bool:
        """
        Compare-and-set the status: the UPDATE only matches while the row is
        still in `expected`. Returns False when another writer got there first.
        """
        stmt = (
            update(DailyLog)
            .where(DailyLog.id == log.id, DailyLog.status == expected.value)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self._db.execute(stmt)
        await self._db.commit()
        return result.rowcount == 1

    async def _resolve_project(self, project_id: int) -> None:
        if await self._directory.get_project(project_id) is None:
            raise LogValidationError(
                [{"field": "project_id", "message": f"Project {project_id} not found"}]
            )

    async def _employee_links(
        self, log: DailyLog | None, employee_ids: list[int]
    ) -> list[LogEmployee]:
        employees = await self._directory.get_employees(employee_ids)
        existing = {link.employee_id: link for link in (log.employee_links if log else [])}
        links = []
        for position, employee in enumerate(employees):
            link = existing.get(employee.id) or LogEmployee(employee_id=employee.id)
            link.position = position
            links.append(link)
        return links

    @staticmethod
    def _materials(materials: list[dict[str, Any]]) -> list[LogMaterial]:
        return [
            LogMaterial(position=position, **material)
            for position, material in enumerate(materials)
        ]

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def create(self, payload: LogCreate, requester_id: int) -> DailyLog:
        """
        Create a draft log owned by the requester.

        Raises LogValidationError, DuplicateLogError or LogForbiddenError.
        """
        if await self._directory.get_user(requester_id) is None:
            raise LogForbiddenError("Unknown user cannot create logs")

        values = normalize_fields(payload.model_dump())
        validate_fields(values)
        await self._resolve_project(values["project_id"])

        log_date = values["log_date"]
        project_id = values["project_id"]

        existing = await find_duplicate(self._db, log_date, requester_id, project_id)
        if existing is not None:
            await self._reject_duplicate(existing, requester_id, log_date, project_id)

        log = DailyLog(
            **{field: values[field] for field in SCALAR_FIELDS},
            team_leader_id=requester_id,
            status=LogStatus.DRAFT.value,
        )
        log.employee_links = await self._employee_links(None, values["employee_ids"])
        log.materials_used = self._materials(values["materials_used"])
        self._db.add(log)

        await self._commit_unique(requester_id, log_date, project_id, None, notify=True)
        logger.info("Created log %s for user %s", log.id, requester_id)
        return await self._load(log.id)

    async def update(self, log_id: int, changes: LogUpdate, requester_id: int) -> DailyLog:
        """
        Apply only the fields present in `changes` to a non-approved log
        owned by the requester.
        """
        log = await self._load(log_id)

        # Approved logs are frozen for everyone, owner or not.
        if log.status == LogStatus.APPROVED.value:
            raise LogConflictError("Cannot update an approved log", log.status)
        if log.team_leader_id != requester_id:
            raise LogForbiddenError("You are not authorized to update this log")

        supplied = normalize_fields(changes.model_dump(exclude_unset=True))

        merged: dict[str, Any] = {field: getattr(log, field) for field in SCALAR_FIELDS}
        merged["materials_used"] = [
            {"name": m.name, "quantity": m.quantity, "unit": m.unit, "notes": m.notes}
            for m in log.materials_used
        ]
        merged.update(supplied)
        validate_fields(merged)

        if "project_id" in supplied and supplied["project_id"] != log.project_id:
            await self._resolve_project(supplied["project_id"])

        key_changed = (
            merged["log_date"] != log.log_date or merged["project_id"] != log.project_id
        )
        if key_changed:
            existing = await find_duplicate(
                self._db,
                merged["log_date"],
                log.team_leader_id,
                merged["project_id"],
                exclude_log_id=log.id,
            )
            if existing is not None:
                raise DuplicateLogError(existing)

        for field in SCALAR_FIELDS:
            if field in supplied:
                setattr(log, field, supplied[field])
        if "employee_ids" in supplied:
            log.employee_links = await self._employee_links(log, supplied["employee_ids"])
        if "materials_used" in supplied:
            log.materials_used = self._materials(supplied["materials_used"])

        await self._commit_unique(
            requester_id, merged["log_date"], merged["project_id"], log.id, notify=False
        )
        logger.info("Updated log %s (%s)", log.id, ", ".join(sorted(supplied)) or "no fields")
        return await self._load(log.id)

    async def submit(self, log_id: int, requester_id: int) -> DailyLog:
        log = await self._load(log_id)

        if log.team_leader_id != requester_id:
            raise LogForbiddenError("You are not authorized to submit this log")
        if log.status != LogStatus.DRAFT.value:
            raise LogConflictError(f"Log is already {log.status}", log.status)

        if not await self._transition(
            log, LogStatus.DRAFT, {"status": LogStatus.SUBMITTED.value}
        ):
            current = await self._load(log_id)
            raise LogConflictError(f"Log is already {current.status}", current.status)

        logger.info("Log %s submitted by user %s", log_id, requester_id)
        return await self._load(log_id)

    async def approve(self, log_id: int, approver_id: int) -> DailyLog:
        """
        Approve a submitted log. The caller guarantees the approver is a manager.
        """
        if await self._directory.get_user(approver_id) is None:
            raise LogForbiddenError("Unknown user cannot approve logs")

        log = await self._load(log_id)
        self._ensure_approvable(log.status)

        approved = await self._transition(
            log,
            LogStatus.SUBMITTED,
            {
                "status": LogStatus.APPROVED.value,
                "approved_by_id": approver_id,
                "approved_at": datetime.now(timezone.utc),
            },
        )
        if not approved:
            current = await self._load(log_id)
            self._ensure_approvable(current.status)

        logger.info("Log %s approved by user %s", log_id, approver_id)
        self._notify(lambda: self._notifier.notify_log_approved(log_id))
        return await self._load(log_id)

    @staticmethod
    def _ensure_approvable(status: str) -> None:
        if status == LogStatus.APPROVED.value:
            raise LogConflictError("Log is already approved", status)
        if status != LogStatus.SUBMITTED.value:
            raise LogConflictError("Only submitted logs can be approved", status)

    async def remove(self, log_id: int, requester_id: int, requester_is_manager: bool) -> None:
        if requester_is_manager and await self._directory.get_user(requester_id) is None:
            raise LogForbiddenError("Unknown user cannot delete logs")

        log = await self._load(log_id)

        if not requester_is_manager and log.team_leader_id != requester_id:
            raise LogForbiddenError("You are not authorized to delete this log")
        if log.status == LogStatus.APPROVED.value and not requester_is_manager:
            raise LogConflictError("Cannot delete an approved log", log.status)

        await self._db.delete(log)
        await self._db.commit()
        logger.info("Log %s deleted by user %s", log_id, requester_id)

    async def get(self, log_id: int, requester_id: int, requester_role: str) -> DailyLog:
        log = await self._load(log_id)
        if requester_role != UserRole.MANAGER.value and log.team_leader_id != requester_id:
            raise LogForbiddenError("You are not authorized to view this log")
        return log

    async def list(
        self,
        filters: LogFilter,
        requester_role: str,
        requester_id: int,
    ) -> list[DailyLog]:
        return await list_logs(self._db, filters, requester_role, requester_id)

    # ------------------------------------------------------------------
    # Attachments (append-only)
    # ------------------------------------------------------------------

    async def ensure_attachable(self, log_id: int, requester_id: int) -> DailyLog:
        log = await self._load(log_id)
        if log.team_leader_id != requester_id:
            raise LogForbiddenError("You are not authorized to add attachments to this log")
        if log.status == LogStatus.APPROVED.value:
            raise LogConflictError("Cannot add attachments to an approved log", log.status)
        return log

    async def add_photo(
        self,
        log_id: int,
        requester_id: int,
        path: str,
        original_name: str,
        description: str | None = None,
    ) -> DailyLog:
        await self.ensure_attachable(log_id, requester_id)
        # Insert a row rather than rewriting the collection so concurrent
        # uploads to the same log all land.
        self._db.add(
            LogPhoto(
                log_id=log_id,
                path=path,
                original_name=original_name,
                description=_strip(description) or None,
            )
        )
        await self._db.commit()
        logger.info("Photo %s attached to log %s", path, log_id)
        return await self._load(log_id)

    async def add_document(
        self,
        log_id: int,
        requester_id: int,
        path: str,
        original_name: str,
        doc_type: DocumentType = DocumentType.OTHER,
    ) -> DailyLog:
        await self.ensure_attachable(log_id, requester_id)
        self._db.add(
            LogDocument(
                log_id=log_id,
                path=path,
                original_name=original_name,
                doc_type=doc_type.value,
            )
        )
        await self._db.commit()
        logger.info("Document %s attached to log %s", path, log_id)
        return await self._load(log_id)

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    async def resolve_report(
        self,
        log_id: int,
        requester_id: int,
        requester_role: str,
    ) -> LogReportSnapshot:
        """
        Visibility-checked, fully resolved snapshot for the report renderer.
        """
        log = await self.get(log_id, requester_id, requester_role)

        if log.project is None:
            raise ReportRenderError(f"Log {log_id} references a missing project.")
        if log.team_leader is None:
            raise ReportRenderError(f"Log {log_id} references a missing team leader.")

        return LogReportSnapshot(
            log_id=log.id,
            log_date=log.log_date,
            project_name=log.project.name,
            project_address=log.project.address,
            team_leader_name=log.team_leader.full_name,
            start_time=log.start_time,
            end_time=log.end_time,
            status=log.status,
            approved_by_name=log.approved_by.full_name if log.approved_by else None,
            approved_at=log.approved_at,
            employee_names=[employee.full_name for employee in log.employees],
            work_description=log.work_description,
            weather=log.weather,
            issues_encountered=log.issues_encountered,
            next_steps=log.next_steps,
            materials=[
                ReportMaterialLine(
                    name=m.name, quantity=m.quantity, unit=m.unit, notes=m.notes
                )
                for m in log.materials_used
            ],
        )
