# app/services/attachment_gate.py
from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path, PurePath

from app.core.config import get_settings
from app.core.errors import AttachmentRejectedError

logger = logging.getLogger(__name__)


class AttachmentKind(str, Enum):
    PHOTO = "photo"
    DOCUMENT = "document"


DOCUMENT_MIME_TYPES = frozenset(
    {
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "image/jpeg",
        "image/png",
        "image/gif",
    }
)

_SUBDIRECTORIES = {
    AttachmentKind.PHOTO: "photos",
    AttachmentKind.DOCUMENT: "documents",
}


@dataclass(frozen=True)
class AttachmentDecision:
    accepted: bool
    reason: str | None = None


def max_upload_bytes(kind: AttachmentKind) -> int:
    settings = get_settings()
    if kind is AttachmentKind.PHOTO:
        return settings.PHOTO_MAX_BYTES
    return settings.DOCUMENT_MAX_BYTES


def validate_upload(
    kind: AttachmentKind,
    content_type: str | None,
    size_bytes: int,
) -> AttachmentDecision:
    """
    Decide whether an incoming file may be attached to a log.

    Rules
    -----
    - Photos: declared content type must start with ``image/``; max 5 MiB.
    - Documents: content type must be in DOCUMENT_MIME_TYPES; max 10 MiB.

    The check depends only on the file's metadata, never on the log's status.
    """
    content_type = (content_type or "").lower()

    if kind is AttachmentKind.PHOTO:
        if not content_type.startswith("image/"):
            return AttachmentDecision(False, "Only image files are allowed!")
    elif content_type not in DOCUMENT_MIME_TYPES:
        return AttachmentDecision(
            False,
            "Only PDF, DOC, DOCX, XLS, XLSX, and image files are allowed!",
        )

    limit = max_upload_bytes(kind)
    if size_bytes > limit:
        return AttachmentDecision(
            False,
            f"File too large: {size_bytes} bytes exceeds the {limit} byte limit.",
        )

    return AttachmentDecision(True)


def build_storage_name(
    log_id: int,
    original_name: str,
    now: datetime | None = None,
) -> str:
    """
    Collision-resistant file name: ``{log_id}-{epoch_ms}-{random}{ext}``.

    The extension of the original name is preserved as-is.
    """
    now = now or datetime.now(timezone.utc)
    epoch_ms = int(now.timestamp() * 1000)
    suffix = random.randint(0, 10**9)
    extension = PurePath(original_name or "").suffix
    return f"{log_id}-{epoch_ms}-{suffix}{extension}"


class AttachmentStorage:
    """
    Stores accepted uploads on the local filesystem.

    Layout: ``<root>/photos/<name>`` and ``<root>/documents/<name>``. The
    returned path is relative to the root, e.g. ``photos/7-1709280000000-42.jpg``.
    """

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def save(
        self,
        kind: AttachmentKind,
        log_id: int,
        data: bytes,
        content_type: str | None,
        original_name: str,
    ) -> str:
        """
        Validate and write one file. Raises AttachmentRejectedError before
        anything touches the disk when the gate rejects the file.
        """
        decision = validate_upload(kind, content_type, len(data))
        if not decision.accepted:
            logger.info(
                "Rejected %s upload for log %s: %s",
                kind.value,
                log_id,
                decision.reason,
            )
            raise AttachmentRejectedError(decision.reason or "File rejected.")

        subdirectory = _SUBDIRECTORIES[kind]
        target_dir = self._root / subdirectory
        target_dir.mkdir(parents=True, exist_ok=True)

        name = build_storage_name(log_id, original_name)
        (target_dir / name).write_bytes(data)

        return f"{subdirectory}/{name}"

    def discard(self, relative_path: str) -> None:
        """
        Remove a previously saved file; used when recording it on the log fails.
        """
        (self._root / relative_path).unlink(missing_ok=True)


def get_attachment_storage() -> AttachmentStorage:
    """
    Storage rooted at the configured UPLOAD_DIR.
    """
    return AttachmentStorage(get_settings().UPLOAD_DIR)
