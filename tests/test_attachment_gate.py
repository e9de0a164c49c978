# tests/test_attachment_gate.py
from datetime import datetime, timezone

import pytest

from app.core.errors import AttachmentRejectedError
from app.services.attachment_gate import (
    AttachmentKind,
    AttachmentStorage,
    build_storage_name,
    validate_upload,
)

MIB = 1024 * 1024


@pytest.mark.parametrize("content_type", ["image/jpeg", "image/png", "image/webp", "IMAGE/HEIC"])
def test_any_image_type_is_accepted_as_photo(content_type):
    assert validate_upload(AttachmentKind.PHOTO, content_type, 1024).accepted


def test_non_image_photo_is_rejected():
    decision = validate_upload(AttachmentKind.PHOTO, "application/pdf", 1024)
    assert not decision.accepted
    assert decision.reason == "Only image files are allowed!"


def test_photo_size_limit_is_inclusive():
    assert validate_upload(AttachmentKind.PHOTO, "image/png", 5 * MIB).accepted
    assert not validate_upload(AttachmentKind.PHOTO, "image/png", 5 * MIB + 1).accepted


@pytest.mark.parametrize(
    "content_type",
    [
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "image/jpeg",
        "image/png",
        "image/gif",
    ],
)
def test_whitelisted_document_types_are_accepted(content_type):
    assert validate_upload(AttachmentKind.DOCUMENT, content_type, 10 * MIB).accepted


@pytest.mark.parametrize("content_type", ["application/zip", "image/webp", "text/plain", None])
def test_other_document_types_are_rejected(content_type):
    decision = validate_upload(AttachmentKind.DOCUMENT, content_type, 10)
    assert not decision.accepted
    assert decision.reason == "Only PDF, DOC, DOCX, XLS, XLSX, and image files are allowed!"


def test_oversized_document_is_rejected():
    decision = validate_upload(AttachmentKind.DOCUMENT, "application/pdf", 10 * MIB + 1)
    assert not decision.accepted
    assert "too large" in decision.reason


def test_storage_name_keeps_extension_and_log_prefix():
    now = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
    name = build_storage_name(42, "site photo.JPG", now=now)

    log_id, epoch_ms, rest = name.split("-", 2)
    assert log_id == "42"
    assert epoch_ms == str(int(now.timestamp() * 1000))
    assert rest.endswith(".JPG")


def test_storage_writes_accepted_file_under_kind_directory(tmp_path):
    storage = AttachmentStorage(tmp_path)

    path = storage.save(AttachmentKind.DOCUMENT, 3, b"%PDF-1.4", "application/pdf", "note.pdf")

    assert path.startswith("documents/3-")
    assert path.endswith(".pdf")
    assert (tmp_path / path).read_bytes() == b"%PDF-1.4"

    storage.discard(path)
    assert not (tmp_path / path).exists()


def test_storage_rejects_before_writing(tmp_path):
    storage = AttachmentStorage(tmp_path)

    with pytest.raises(AttachmentRejectedError):
        storage.save(AttachmentKind.DOCUMENT, 3, b"PK\x03\x04", "application/zip", "a.zip")

    assert not (tmp_path / "documents").exists()
