# app/core/errors.py
from __future__ import annotations

from http import HTTPStatus
from typing import Any


class SiteLogError(Exception):
    """
    Base class for every domain error raised by the log services.

    Each subclass carries a stable `kind` (exposed to API clients so they can
    branch on it) and the HTTP status the API layer maps it to.
    """

    kind: str = "error"
    status_code: int = HTTPStatus.BAD_REQUEST

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict[str, Any]:
        return {"kind": self.kind, "detail": self.message}


class LogValidationError(SiteLogError):
    """
    A required field is missing or malformed.

    `errors` holds one `{"field": ..., "message": ...}` entry per problem.
    """

    kind = "validation_error"
    status_code = HTTPStatus.BAD_REQUEST

    def __init__(self, errors: list[dict[str, str]]) -> None:
        super().__init__("; ".join(f"{e['field']}: {e['message']}" for e in errors))
        self.errors = errors

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["errors"] = self.errors
        return payload


class DuplicateLogError(SiteLogError):
    kind = "duplicate_log"
    status_code = HTTPStatus.CONFLICT

    def __init__(self, existing_log_id: int) -> None:
        super().__init__("A log already exists for this date and project")
        self.existing_log_id = existing_log_id

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["existing_log_id"] = self.existing_log_id
        return payload


class LogNotFoundError(SiteLogError):
    kind = "not_found"
    status_code = HTTPStatus.NOT_FOUND

    def __init__(self, log_id: int) -> None:
        super().__init__(f"Log with id={log_id} not found.")
        self.log_id = log_id


class LogForbiddenError(SiteLogError):
    kind = "forbidden"
    status_code = HTTPStatus.FORBIDDEN


class LogConflictError(SiteLogError):
    """
    The operation is not valid for the log's current status.
    """

    kind = "conflict"
    status_code = HTTPStatus.CONFLICT

    def __init__(self, message: str, current_status: str) -> None:
        super().__init__(message)
        self.current_status = current_status

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["current_status"] = self.current_status
        return payload


class AttachmentRejectedError(SiteLogError):
    kind = "attachment_rejected"
    status_code = HTTPStatus.BAD_REQUEST


class ReportRenderError(SiteLogError):
    kind = "report_error"
    status_code = HTTPStatus.INTERNAL_SERVER_ERROR
