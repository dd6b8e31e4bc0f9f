"""Append-only message threads. There is no edit or delete."""
from __future__ import annotations

import logging
import uuid

from ... import policy
from ...errors import AuthorizationError, ValidationError
from ...extensions import db
from ...models.message import Message
from ...policy import Caller
from ..complaints.service import commit, get_parent
from ..events.bus import publish_complaint_event

log = logging.getLogger(__name__)


def post_message(
    complaint_id: uuid.UUID,
    caller: Caller,
    body: str | None,
    internal: bool = False,
    anonymous: bool = False,
) -> Message:
    """Append a message. The caller needs read access to the complaint.

    ``anonymous`` stores the message without a sender reference.
    """
    text = (body or "").strip()
    if not text:
        raise ValidationError("Message body is required")
    if internal and not policy.can_post_internal_message(caller):
        raise AuthorizationError("Only managers can post internal notes")

    complaint = get_parent(complaint_id, caller)
    msg = Message(
        complaint_id=complaint.id,
        sender_id=None if anonymous else caller.id,
        body=text,
        is_internal=bool(internal),
    )
    db.session.add(msg)
    commit()

    if not msg.is_internal:
        publish_complaint_event(complaint, "message.created", caller.id, {"messageId": str(msg.id)})
    return msg


def list_messages(complaint_id: uuid.UUID, caller: Caller) -> list[Message]:
    """Thread in creation order; internal notes only for managers and admins."""
    complaint = get_parent(complaint_id, caller)
    q = Message.query.filter(Message.complaint_id == complaint.id)
    if not policy.can_read_internal_messages(caller):
        q = q.filter(Message.is_internal.is_(False))
    return q.order_by(Message.created_at.asc()).all()
