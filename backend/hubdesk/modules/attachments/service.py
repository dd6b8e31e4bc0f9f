"""Attachment metadata plus blob storage.

Limits (image/PDF type, size per file, count per complaint) are checked
before any store call. Rows are immutable once written.
"""
from __future__ import annotations

import logging
import os
import uuid
from typing import Optional, Protocol

from flask import current_app

from ... import policy, storage
from ...errors import NotFoundError, StorageError, ValidationError
from ...extensions import db
from ...models.attachment import Attachment
from ...models.complaint import Complaint
from ...policy import Caller
from ..complaints.service import commit, get_parent

log = logging.getLogger(__name__)


class FileLike(Protocol):
    filename: Optional[str]
    mimetype: Optional[str]

    def read(self) -> bytes: ...


def max_bytes() -> int:
    return int(current_app.config["MAX_ATTACHMENT_BYTES"])


def max_per_complaint() -> int:
    return int(current_app.config["MAX_ATTACHMENTS_PER_COMPLAINT"])


def allowed_extensions() -> frozenset[str]:
    return frozenset(current_app.config["ATTACHMENT_ALLOWED_EXTENSIONS"])


def allowed_type(filename: Optional[str], mimetype: Optional[str]) -> bool:
    """Images and PDFs only, by MIME type or by file extension."""
    mime = (mimetype or "").split(";", 1)[0].strip().lower()
    if mime.startswith("image/") or mime == "application/pdf":
        return True
    ext = os.path.splitext(filename or "")[1].lower().lstrip(".")
    return ext in allowed_extensions()


def check_upload(
    file_size: int,
    existing_count: int,
    filename: str | None = None,
    mimetype: str | None = None,
) -> None:
    """Reject a file over the size ceiling, beyond the per-complaint count, or of a type other than image/PDF.

    The type is only checked when a filename or MIME type is given.
    """
    label = filename or "File"
    if (filename or mimetype) and not allowed_type(filename, mimetype):
        log.warning("Rejected %s: type %s not allowed", label, mimetype)
        raise ValidationError(f"{label} is not an image or PDF")
    if file_size > max_bytes():
        log.warning("Rejected %s: %d bytes over limit", label, file_size)
        raise ValidationError(f"{label} is too large. Maximum size is {max_bytes() // (1024 * 1024)}MB.")
    if existing_count >= max_per_complaint():
        log.warning("Rejected %s: complaint already has %d attachments", label, existing_count)
        raise ValidationError(f"At most {max_per_complaint()} attachments per complaint")


def count_for(complaint_id: uuid.UUID) -> int:
    return Attachment.query.filter(Attachment.complaint_id == complaint_id).count()


def store_attachment(
    complaint: Complaint,
    uploader_id: Optional[uuid.UUID],
    file: FileLike,
    data: Optional[bytes] = None,
) -> Attachment:
    """Persist one file for a complaint the caller is already entitled to write to."""
    if data is None:
        data = file.read()
    mime_type = file.mimetype or "application/octet-stream"
    check_upload(len(data), count_for(complaint.id), file.filename, mime_type)

    key = storage.object_key(complaint.id, file.filename)
    storage.put_object(key, data, mime_type)

    attachment = Attachment(
        complaint_id=complaint.id,
        uploader_id=uploader_id,
        file_path=key,
        file_name=file.filename or key.rsplit("/", 1)[-1],
        mime_type=mime_type,
        file_size=len(data),
    )
    db.session.add(attachment)
    try:
        commit()
    except StorageError:
        storage.delete_object(key)
        raise
    log.info("Attachment %s stored for complaint %s (%d bytes)", attachment.id, complaint.id, len(data))
    return attachment


def upload(
    complaint_id: uuid.UUID,
    caller: Caller,
    file: FileLike,
    anonymous: bool = False,
) -> Attachment:
    complaint = get_parent(complaint_id, caller)
    return store_attachment(complaint, None if anonymous else caller.id, file)


def list_for_complaint(complaint_id: uuid.UUID, caller: Caller) -> list[Attachment]:
    complaint = get_parent(complaint_id, caller)
    return (
        Attachment.query
        .filter(Attachment.complaint_id == complaint.id)
        .order_by(Attachment.created_at.asc())
        .all()
    )


def get_attachment(attachment_id: uuid.UUID, caller: Caller) -> Attachment:
    attachment = db.session.get(Attachment, attachment_id)
    if attachment is None or not policy.can_read_sub_resource(caller, attachment.complaint):
        raise NotFoundError("Attachment not found")
    return attachment


def open_attachment(attachment_id: uuid.UUID, caller: Caller) -> tuple[Attachment, str | None]:
    """Resolve a readable attachment to a presigned URL, or None when stored locally."""
    attachment = get_attachment(attachment_id, caller)
    return attachment, storage.presigned_url(attachment.file_path, attachment.file_name)
