from __future__ import annotations

import uuid

from flask import Blueprint, jsonify

from ...models.message import Message
from ...schemas import json_object
from ...security import require_caller
from . import service

bp = Blueprint("messages", __name__, url_prefix="/complaints")


def message_to_dict(m: Message) -> dict:
    sender = m.sender
    return {
        "id": str(m.id),
        "complaintId": str(m.complaint_id),
        "senderId": str(m.sender_id) if m.sender_id else None,
        "senderName": sender.name if sender else "Anonymous",
        "senderRole": sender.role if sender else None,
        "body": m.body,
        "isInternal": bool(m.is_internal),
        "createdAt": m.created_at.isoformat() if m.created_at else None,
    }


@bp.get("/<uuid:complaint_id>/messages")
def list_messages(complaint_id: uuid.UUID):
    rows = service.list_messages(complaint_id, require_caller())
    return jsonify({"messages": [message_to_dict(m) for m in rows]})


@bp.post("/<uuid:complaint_id>/messages")
def post_message(complaint_id: uuid.UUID):
    """Body JSON: { body: str, isInternal?: bool, anonymous?: bool }"""
    caller = require_caller()
    data = json_object()
    msg = service.post_message(
        complaint_id,
        caller,
        data.get("body") if isinstance(data.get("body"), str) else None,
        internal=data.get("isInternal") is True,
        anonymous=data.get("anonymous") is True,
    )
    return jsonify({"message": message_to_dict(msg)}), 201
