from __future__ import annotations

from flask import Blueprint, jsonify, request

from ... import policy
from ...errors import AuthorizationError
from ...models.audit_log import AuditLog
from ...security import require_caller

bp = Blueprint("admin", __name__, url_prefix="/admin")


@bp.before_request
def _require_admin():
    caller = require_caller()
    if not policy.can_read_audit_log(caller):
        raise AuthorizationError("Admin access required")


def _audit_to_dict(a: AuditLog) -> dict:
    actor = a.actor
    return {
        "id": str(a.id),
        "actorId": str(a.actor_id) if a.actor_id else None,
        "actorName": actor.name if actor else None,
        "action": a.action,
        "details": a.details,
        "createdAt": a.created_at.isoformat() if a.created_at else None,
    }


@bp.get("/audit-logs")
def list_audit_logs():
    """Newest first.

    Query params:
      - action: exact action name, e.g. complaint.status_changed
      - limit: int (default 100, max 500)
      - offset: int (default 0)
    """
    try:
        limit = min(max(int(request.args.get("limit", 100)), 1), 500)
    except (TypeError, ValueError):
        limit = 100
    try:
        offset = max(int(request.args.get("offset", 0)), 0)
    except (TypeError, ValueError):
        offset = 0

    q = AuditLog.query
    action = (request.args.get("action") or "").strip()
    if action:
        q = q.filter(AuditLog.action == action)
    total = q.count()
    rows = q.order_by(AuditLog.created_at.desc()).limit(limit).offset(offset).all()
    return jsonify({"auditLogs": [_audit_to_dict(a) for a in rows], "total": total, "limit": limit, "offset": offset})
