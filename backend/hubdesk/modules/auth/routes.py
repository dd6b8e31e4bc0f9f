from flask import g, jsonify, request

from ...schemas import json_object
from ...security import issue_token
from ..profiles.routes import profile_to_dict
from . import bp
from . import service


def _session_payload(profile) -> dict:
    return {"profile": profile_to_dict(profile), "token": issue_token(profile.id)}


@bp.post("/register")
def register():
    """Create an account.

    Body JSON: { email, password (min 8), name, hub?, role? }
    role defaults to 'student'. 'manager' and 'admin' need an admin bearer
    token or the invite code (X-Admin-Invite header or 'invite' field).
    """
    data = json_object()
    invite = (request.headers.get("X-Admin-Invite") or data.get("invite") or "").strip() or None
    profile = service.register(data, inviter=getattr(g, "current_caller", None), invite_code=invite)
    return jsonify(_session_payload(profile)), 201


@bp.post("/login")
def login():
    """Body JSON: { email, password }"""
    profile = service.login(json_object())
    return jsonify(_session_payload(profile))
