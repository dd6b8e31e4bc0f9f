from __future__ import annotations

import logging
import uuid
from typing import Any, Mapping, Optional

from ... import policy
from ...errors import AuthorizationError, NotFoundError, ValidationError
from ...extensions import db
from ...models._types import utcnow
from ...models.enums import USER_ROLES
from ...models.profile import Profile
from ...policy import Caller
from ...schemas import load_or_raise
from ...schemas.profile import AdminProfileUpdateSchema, ProfileUpdateSchema
from ..admin.audit import record as audit
from ..complaints.service import commit

log = logging.getLogger(__name__)


def ensure_profile(identity_id: uuid.UUID, name: Optional[str] = None, role: str = "student", hub: Optional[str] = None) -> Profile:
    """Create the profile for an identity on first authentication.

    Idempotent: an existing profile is returned untouched.
    """
    profile = db.session.get(Profile, identity_id)
    if profile is not None:
        return profile
    if role not in USER_ROLES:
        raise ValidationError("Invalid role")
    profile = Profile(id=identity_id, name=(name or "").strip() or "User", role=role, hub=hub)
    db.session.add(profile)
    commit()
    log.info("Profile %s created with role %s", identity_id, role)
    return profile


def get_profile(profile_id: uuid.UUID) -> Profile:
    profile = db.session.get(Profile, profile_id)
    if profile is None:
        raise NotFoundError("Profile not found")
    return profile


def list_profiles(role: Optional[str] = None) -> list[Profile]:
    """All profiles are readable by any authenticated caller."""
    q = Profile.query
    if role:
        roles = [r.strip() for r in role.split(",") if r.strip()]
        invalid = [r for r in roles if r not in USER_ROLES]
        if invalid:
            raise ValidationError("Invalid role filter")
        q = q.filter(Profile.role.in_(roles))
    return q.order_by(Profile.name.asc()).all()


def update_own_profile(caller: Caller, changes: Mapping[str, Any]) -> Profile:
    data = load_or_raise(ProfileUpdateSchema(), changes)
    profile = get_profile(caller.id)
    for field, value in data.items():
        setattr(profile, field, value)
    if data:
        profile.updated_at = utcnow()
    commit()
    return profile


def admin_update_profile(profile_id: uuid.UUID, caller: Caller, changes: Mapping[str, Any]) -> Profile:
    """Change role and verification. Admins only."""
    if not policy.can_manage_profiles(caller):
        log.warning("Profile update of %s denied for %s (%s)", profile_id, caller.id, caller.role)
        raise AuthorizationError("Admin access required")
    data = load_or_raise(AdminProfileUpdateSchema(), changes)
    profile = get_profile(profile_id)

    before = {"role": profile.role, "isVerified": bool(profile.is_verified)}
    for field, value in data.items():
        setattr(profile, field, value)
    if data:
        profile.updated_at = utcnow()
        audit(caller.id, "profile.updated_by_admin", {
            "profileId": str(profile.id),
            "before": before,
            "after": {"role": profile.role, "isVerified": bool(profile.is_verified)},
        })
    commit()
    return profile
