"""Complaint repository.

Every operation takes the resolved ``Caller`` and checks the predicates in
``hubdesk.policy`` before reading or writing. Rows the caller may not read are
reported as missing.
"""
from __future__ import annotations

import logging
import uuid
from collections import Counter
from typing import Any, Mapping, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError

from ... import policy
from ...errors import AuthorizationError, NotFoundError, StorageError, ValidationError
from ...extensions import db
from ...models._types import utcnow
from ...models.complaint import Complaint
from ...models.enums import COMPLAINT_PRIORITIES, COMPLAINT_STATUSES
from ...models.profile import Profile
from ...policy import Caller
from ...schemas import load_or_raise
from ...schemas.complaint import ComplaintDraftSchema
from ..admin.audit import record as audit
from ..events.bus import publish_complaint_event

log = logging.getLogger(__name__)

IN_PROGRESS_STATUSES = ("acknowledged", "in_progress")
RESOLVED_STATUSES = ("resolved", "closed")


def commit() -> None:
    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        log.error("Database write failed: %s", exc)
        raise StorageError("Unable to save changes") from exc


def create_complaint(draft: Mapping[str, Any], submitter: Caller, anonymous: bool = False) -> Complaint:
    data = load_or_raise(ComplaintDraftSchema(), draft)
    complaint = Complaint(
        user_id=None if anonymous else submitter.id,
        is_anonymous=bool(anonymous),
        **data,
    )
    if not policy.can_create_complaint(submitter, complaint):
        raise AuthorizationError("Not allowed to submit this complaint")
    db.session.add(complaint)
    commit()
    log.info("Complaint %s created (hub=%s, anonymous=%s)", complaint.id, complaint.hub, complaint.is_anonymous)
    return complaint


def _visible_query(caller: Caller):
    q = Complaint.query
    if not caller.is_staff:
        if caller.id is None:
            return q.filter(db.false())
        q = q.filter(Complaint.user_id == caller.id)
    return q


def list_for_caller(caller: Caller, filters: Optional[Mapping[str, Any]] = None) -> list[Complaint]:
    """Students see their own complaints, managers and admins see all. Newest first.

    Optional filters: status, priority, hub, q (case-insensitive match on title or hub).
    """
    filters = filters or {}
    q = _visible_query(caller)

    status = (filters.get("status") or "").strip()
    if status and status != "all":
        if status not in COMPLAINT_STATUSES:
            raise ValidationError("Invalid status filter")
        q = q.filter(Complaint.status == status)
    priority = (filters.get("priority") or "").strip()
    if priority and priority != "all":
        if priority not in COMPLAINT_PRIORITIES:
            raise ValidationError("Invalid priority filter")
        q = q.filter(Complaint.priority == priority)
    hub = (filters.get("hub") or "").strip()
    if hub and hub != "all":
        q = q.filter(Complaint.hub == hub)
    text = (filters.get("q") or "").strip().lower()
    if text:
        # Plain substring match: % and _ in the query are literal
        q = q.filter(or_(
            func.lower(Complaint.title).contains(text, autoescape=True),
            func.lower(Complaint.hub).contains(text, autoescape=True),
        ))

    return q.order_by(Complaint.created_at.desc()).all()


def get_complaint(complaint_id: uuid.UUID, caller: Caller) -> Complaint:
    complaint = db.session.get(Complaint, complaint_id)
    if complaint is None or not policy.can_read_complaint(caller, complaint):
        raise NotFoundError("Complaint not found")
    return complaint


def update_status(complaint_id: uuid.UUID, new_status: str, caller: Caller) -> Complaint:
    """Set any status; no transition graph is enforced."""
    if not policy.can_write_complaint_status(caller):
        log.warning("Status change on %s denied for %s (%s)", complaint_id, caller.id, caller.role)
        raise AuthorizationError("Manager or admin role required")
    if new_status not in COMPLAINT_STATUSES:
        raise ValidationError("Invalid status")
    complaint = get_complaint(complaint_id, caller)

    previous = complaint.status
    complaint.status = new_status
    complaint.updated_at = utcnow()
    audit(caller.id, "complaint.status_changed", {
        "complaintId": str(complaint.id),
        "from": previous,
        "to": new_status,
    })
    commit()
    publish_complaint_event(complaint, "complaint.status", caller.id, {"previousStatus": previous})
    return complaint


def assign(complaint_id: uuid.UUID, manager_id: Optional[uuid.UUID], caller: Caller) -> Complaint:
    """Set or clear the assigned manager."""
    if not policy.can_assign_complaint(caller):
        log.warning("Assignment of %s denied for %s (%s)", complaint_id, caller.id, caller.role)
        raise AuthorizationError("Manager or admin role required")
    if manager_id is not None:
        assignee = db.session.get(Profile, manager_id)
        if assignee is None or assignee.role not in policy.STAFF_ROLES:
            raise ValidationError("Assignee must be a manager or admin")
    complaint = get_complaint(complaint_id, caller)

    previous = complaint.manager_id
    complaint.manager_id = manager_id
    complaint.updated_at = utcnow()
    audit(caller.id, "complaint.assigned", {
        "complaintId": str(complaint.id),
        "from": str(previous) if previous else None,
        "to": str(manager_id) if manager_id else None,
    })
    commit()
    publish_complaint_event(
        complaint,
        "complaint.assigned",
        caller.id,
        {"managerId": str(manager_id) if manager_id else None},
    )
    return complaint


def complaint_stats(caller: Caller) -> dict[str, int]:
    counts = Counter(
        status for (status,) in _visible_query(caller).with_entities(Complaint.status).all()
    )
    return {
        "total": sum(counts.values()),
        "new": counts.get("new", 0),
        "inProgress": sum(counts.get(s, 0) for s in IN_PROGRESS_STATUSES),
        "resolved": sum(counts.get(s, 0) for s in RESOLVED_STATUSES),
    }


def list_hubs(caller: Caller) -> list[str]:
    rows = _visible_query(caller).with_entities(Complaint.hub).distinct().all()
    return sorted(hub for (hub,) in rows if hub)


def get_parent(complaint_id: uuid.UUID, caller: Caller) -> Complaint:
    """Load the complaint owning a message or attachment the caller wants."""
    complaint = db.session.get(Complaint, complaint_id)
    if complaint is None or not policy.can_read_sub_resource(caller, complaint):
        raise NotFoundError("Complaint not found")
    return complaint
