from __future__ import annotations

import uuid

from flask import Blueprint, jsonify, redirect, request, send_file

from ... import storage
from ...errors import ValidationError
from ...models.attachment import Attachment
from ...security import require_caller
from . import service

bp = Blueprint("attachments", __name__)

_TRUTHY = {"1", "true", "yes", "on"}


def attachment_to_dict(a: Attachment) -> dict:
    return {
        "id": str(a.id),
        "complaintId": str(a.complaint_id),
        "uploaderId": str(a.uploader_id) if a.uploader_id else None,
        "fileName": a.file_name,
        "mimeType": a.mime_type,
        "fileSize": a.file_size,
        "filePath": a.file_path,
        "createdAt": a.created_at.isoformat() if a.created_at else None,
    }


@bp.get("/complaints/<uuid:complaint_id>/attachments")
def list_attachments(complaint_id: uuid.UUID):
    rows = service.list_for_complaint(complaint_id, require_caller())
    return jsonify({"attachments": [attachment_to_dict(a) for a in rows]})


@bp.post("/complaints/<uuid:complaint_id>/attachments")
def upload_attachment(complaint_id: uuid.UUID):
    """Add one file to an existing complaint.

    Multipart field ``file``; optional ``anonymous`` form flag stores no uploader.
    """
    caller = require_caller()
    file = request.files.get("file")
    if not file or not file.filename:
        raise ValidationError("File is required")
    anonymous = str(request.form.get("anonymous") or "").strip().lower() in _TRUTHY
    attachment = service.upload(complaint_id, caller, file, anonymous=anonymous)
    return jsonify({"attachment": attachment_to_dict(attachment)}), 201


@bp.get("/attachments/<uuid:attachment_id>/content")
def download_attachment(attachment_id: uuid.UUID):
    """Stream (local store) or redirect to a presigned URL (S3). The bucket is private."""
    attachment, url = service.open_attachment(attachment_id, require_caller())
    if url:
        return redirect(url, code=302)
    return send_file(
        storage.local_file(attachment.file_path),
        mimetype=attachment.mime_type,
        as_attachment=True,
        download_name=attachment.file_name,
    )
