# app/api/routes/attachments.py
from http import HTTPStatus

from fastapi import APIRouter, Depends, File, Form, Path, UploadFile
from starlette.concurrency import run_in_threadpool

from app.api.dependencies.principal import Principal, get_current_principal
from app.api.dependencies.services import get_log_service
from app.schemas.daily_log import DocumentType, LogRead
from app.services.attachment_gate import (
    AttachmentKind,
    AttachmentStorage,
    get_attachment_storage,
    max_upload_bytes,
)
from app.services.log_lifecycle import LogLifecycleService

router = APIRouter(prefix="/logs", tags=["Attachments"])


async def _store_upload(
    storage: AttachmentStorage,
    kind: AttachmentKind,
    log_id: int,
    file: UploadFile,
) -> str:
    # One byte past the limit is enough to know the file is too large.
    data = await file.read(max_upload_bytes(kind) + 1)
    return await run_in_threadpool(
        storage.save,
        kind,
        log_id,
        data,
        file.content_type,
        file.filename or "upload",
    )


@router.post(
    "/{log_id}/photos",
    response_model=LogRead,
    status_code=HTTPStatus.CREATED,
    summary="Attach a site photo to a log",
    description="Accepts any `image/*` upload up to 5 MiB.",
    responses={400: {"description": "File type or size rejected."}},
)
async def upload_photo(
    log_id: int = Path(..., ge=1),
    file: UploadFile = File(...),
    description: str | None = Form(default=None),
    principal: Principal = Depends(get_current_principal),
    service: LogLifecycleService = Depends(get_log_service),
    storage: AttachmentStorage = Depends(get_attachment_storage),
) -> LogRead:
    await service.ensure_attachable(log_id, principal.user_id)
    path = await _store_upload(storage, AttachmentKind.PHOTO, log_id, file)
    try:
        log = await service.add_photo(
            log_id,
            principal.user_id,
            path=path,
            original_name=file.filename or path,
            description=description,
        )
    except Exception:
        storage.discard(path)
        raise
    return LogRead.from_model(log)


@router.post(
    "/{log_id}/documents",
    response_model=LogRead,
    status_code=HTTPStatus.CREATED,
    summary="Attach a delivery note, receipt, invoice or other document to a log",
    description="Accepts PDF, Word, Excel and JPEG/PNG/GIF uploads up to 10 MiB.",
    responses={400: {"description": "File type or size rejected."}},
)
async def upload_document(
    log_id: int = Path(..., ge=1),
    file: UploadFile = File(...),
    doc_type: DocumentType = Form(default=DocumentType.OTHER),
    principal: Principal = Depends(get_current_principal),
    service: LogLifecycleService = Depends(get_log_service),
    storage: AttachmentStorage = Depends(get_attachment_storage),
) -> LogRead:
    await service.ensure_attachable(log_id, principal.user_id)
    path = await _store_upload(storage, AttachmentKind.DOCUMENT, log_id, file)
    try:
        log = await service.add_document(
            log_id,
            principal.user_id,
            path=path,
            original_name=file.filename or path,
            doc_type=doc_type,
        )
    except Exception:
        storage.discard(path)
        raise
    return LogRead.from_model(log)
