from __future__ import annotations

import uuid

from flask import Blueprint, current_app, jsonify, request

from ...errors import StorageError, ValidationError
from ...models.complaint import Complaint
from ...models.profile import Profile
from ...schemas import json_object
from ...security import require_caller
from ..attachments import service as attachments
from ..attachments.routes import attachment_to_dict
from . import service

bp = Blueprint("complaints", __name__, url_prefix="/complaints")

_TRUTHY = {"1", "true", "yes", "on"}


def _as_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in _TRUTHY


def _profile_brief(p: Profile | None) -> dict | None:
    if p is None:
        return None
    return {"id": str(p.id), "name": p.name, "role": p.role}


def _complaint_to_dict(c: Complaint, detail: bool = False) -> dict:
    if c.is_anonymous:
        submitter_name = "Anonymous"
    else:
        submitter_name = c.submitter.name if c.submitter else "Unknown"
    payload = {
        "id": str(c.id),
        "title": c.title,
        "description": c.description,
        "category": c.category,
        "hub": c.hub,
        "room": c.room,
        "priority": c.priority,
        "status": c.status,
        "isAnonymous": bool(c.is_anonymous),
        "userId": str(c.user_id) if c.user_id else None,
        "managerId": str(c.manager_id) if c.manager_id else None,
        "submitter": None if c.is_anonymous else _profile_brief(c.submitter),
        "submitterName": submitter_name,
        "manager": _profile_brief(c.manager),
        "slaDueAt": c.sla_due_at.isoformat() if c.sla_due_at else None,
        "createdAt": c.created_at.isoformat() if c.created_at else None,
        "updatedAt": c.updated_at.isoformat() if c.updated_at else None,
    }
    if detail:
        payload["attachments"] = [attachment_to_dict(a) for a in c.attachments]
    return payload


def _parse_uuid(value, label: str) -> uuid.UUID | None:
    if value in (None, ""):
        return None
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid {label}") from exc


@bp.post("")
def create_complaint():
    """Submit a complaint.

    Accepts application/json or multipart/form-data. Multipart may carry up to
    five files under the ``files`` field. ``isAnonymous`` drops the submitter.
    A storage failure on one file leaves the complaint and the other files in
    place; failures are listed under ``attachmentErrors``.
    """
    caller = require_caller()
    content_type = request.content_type or ""
    if content_type.startswith("multipart/form-data"):
        data = request.form.to_dict()
        files = [f for f in request.files.getlist("files") if f and f.filename]
    else:
        data = json_object()
        files = []
    anonymous = _as_bool(data.get("isAnonymous"))

    # Type, size and count limits for the whole batch, before anything is stored
    blobs = []
    for index, f in enumerate(files):
        body = f.read()
        attachments.check_upload(len(body), index, f.filename, f.mimetype or "application/octet-stream")
        blobs.append((f, body))

    complaint = service.create_complaint(data, caller, anonymous)

    failed: list[dict] = []
    uploader_id = None if anonymous else caller.id
    for f, body in blobs:
        try:
            attachments.store_attachment(complaint, uploader_id, f, body)
        except StorageError as exc:
            current_app.logger.warning("Attachment %s dropped for complaint %s: %s", f.filename, complaint.id, exc.message)
            failed.append({"fileName": f.filename, "error": exc.message})

    return jsonify({"complaint": _complaint_to_dict(complaint, detail=True), "attachmentErrors": failed}), 201


@bp.get("")
def list_complaints():
    """List complaints visible to the caller, newest first.

    Query params: status, priority, hub (each accepts 'all'), q (title/hub search).
    """
    rows = service.list_for_caller(require_caller(), request.args)
    return jsonify({"complaints": [_complaint_to_dict(c) for c in rows]})


@bp.get("/stats")
def complaint_stats():
    return jsonify({"stats": service.complaint_stats(require_caller())})


@bp.get("/hubs")
def list_hubs():
    return jsonify({"hubs": service.list_hubs(require_caller())})


@bp.get("/<uuid:complaint_id>")
def get_complaint(complaint_id: uuid.UUID):
    complaint = service.get_complaint(complaint_id, require_caller())
    return jsonify({"complaint": _complaint_to_dict(complaint, detail=True)})


@bp.patch("/<uuid:complaint_id>/status")
def update_status(complaint_id: uuid.UUID):
    """Body JSON: { status: 'new' | 'acknowledged' | 'in_progress' | 'resolved' | 'closed' }"""
    data = json_object()
    status = (data.get("status") or "").strip().lower() if isinstance(data.get("status"), str) else ""
    complaint = service.update_status(complaint_id, status, require_caller())
    return jsonify({"complaint": _complaint_to_dict(complaint)})


@bp.patch("/<uuid:complaint_id>/assignment")
def assign(complaint_id: uuid.UUID):
    """Body JSON: { managerId: uuid | null }. Null clears the assignment."""
    data = json_object()
    manager_id = _parse_uuid(data.get("managerId"), "managerId")
    complaint = service.assign(complaint_id, manager_id, require_caller())
    return jsonify({"complaint": _complaint_to_dict(complaint)})
