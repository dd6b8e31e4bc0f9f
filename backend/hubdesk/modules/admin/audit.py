from __future__ import annotations

import logging
import uuid
from typing import Any, Optional

from ...extensions import db
from ...models.audit_log import AuditLog

log = logging.getLogger(__name__)


def record(actor_id: Optional[uuid.UUID], action: str, details: Optional[dict[str, Any]] = None) -> AuditLog:
    """Append an audit row to the current transaction; the caller commits."""
    entry = AuditLog(actor_id=actor_id, action=action, details=details or {})
    db.session.add(entry)
    log.info("audit %s by %s: %s", action, actor_id, details)
    return entry
