import uuid

from flask import Blueprint, jsonify, request

from ...models.profile import Profile
from ...schemas import json_object
from ...security import require_caller
from . import service

bp = Blueprint("profiles", __name__, url_prefix="/profiles")


def profile_to_dict(p: Profile) -> dict:
    return {
        "id": str(p.id),
        "name": p.name,
        "role": p.role,
        "hub": p.hub,
        "phone": p.phone,
        "avatarUrl": p.avatar_url,
        "isVerified": bool(p.is_verified),
        "createdAt": p.created_at.isoformat() if p.created_at else None,
        "updatedAt": p.updated_at.isoformat() if p.updated_at else None,
    }


@bp.get("")
def list_profiles():
    """List profiles. Query param role accepts a comma list, e.g. role=manager,admin."""
    require_caller()
    rows = service.list_profiles(request.args.get("role"))
    return jsonify({"profiles": [profile_to_dict(p) for p in rows]})


@bp.get("/me")
def get_me():
    caller = require_caller()
    return jsonify({"profile": profile_to_dict(service.get_profile(caller.id))})


@bp.patch("/me")
def update_me():
    """Body JSON: any of { name, hub, phone, avatarUrl }"""
    caller = require_caller()
    profile = service.update_own_profile(caller, json_object())
    return jsonify({"profile": profile_to_dict(profile)})


@bp.get("/<uuid:profile_id>")
def get_profile(profile_id: uuid.UUID):
    require_caller()
    return jsonify({"profile": profile_to_dict(service.get_profile(profile_id))})


@bp.patch("/<uuid:profile_id>")
def admin_update(profile_id: uuid.UUID):
    """Admin only. Body JSON: any of { role, isVerified }"""
    caller = require_caller()
    profile = service.admin_update_profile(profile_id, caller, json_object())
    return jsonify({"profile": profile_to_dict(profile)})
