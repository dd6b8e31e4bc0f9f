from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from flask import current_app
from werkzeug.security import check_password_hash, generate_password_hash

from ...errors import AuthenticationError, AuthorizationError, ConflictError
from ...extensions import db
from ...models._types import utcnow
from ...models.identity import Identity
from ...models.profile import Profile
from ...policy import Caller
from ...schemas import load_or_raise
from ...schemas.profile import LoginSchema, RegisterSchema
from ..complaints.service import commit
from ..profiles.service import ensure_profile

log = logging.getLogger(__name__)


def _elevated_signup_allowed(inviter: Optional[Caller], invite_code: Optional[str]) -> bool:
    if inviter is not None and inviter.is_admin:
        return True
    expected = current_app.config.get("ADMIN_INVITE_CODE") or ""
    return bool(invite_code and expected and invite_code == expected)


def register(payload: Mapping[str, Any], inviter: Optional[Caller] = None, invite_code: Optional[str] = None) -> Profile:
    """Create an identity and its profile.

    Manager and admin accounts need an admin inviter or the configured invite code.
    """
    data = load_or_raise(RegisterSchema(), payload)
    if data["role"] != "student" and not _elevated_signup_allowed(inviter, invite_code):
        log.warning("Elevated registration as %s refused for %s", data["role"], data["email"])
        raise AuthorizationError(f"{data['role'].capitalize()} registration not permitted")

    if Identity.query.filter_by(email=data["email"]).first():
        raise ConflictError("Email already in use")

    identity = Identity(email=data["email"], password_hash=generate_password_hash(data["password"]))
    db.session.add(identity)
    commit()
    return ensure_profile(identity.id, data["name"], data["role"], data.get("hub"))


def login(payload: Mapping[str, Any]) -> Profile:
    data = load_or_raise(LoginSchema(), payload)
    identity = Identity.query.filter_by(email=data["email"]).first()
    if identity is None or not check_password_hash(identity.password_hash, data["password"]):
        raise AuthenticationError("Invalid email or password")

    identity.last_login_at = utcnow()
    commit()
    # Onboarding step: profiles of identities created out of band appear here
    return ensure_profile(identity.id, data["email"].split("@", 1)[0])
