from __future__ import annotations

import os
import uuid
from typing import Optional

from flask import current_app, g
from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired

from .errors import AuthenticationError


def _serializer() -> URLSafeTimedSerializer:
    secret = current_app.config.get("SECRET_KEY") or os.getenv("SECRET_KEY", "change-me")
    # Salt provides namespace isolation for tokens
    return URLSafeTimedSerializer(secret_key=secret, salt="auth-token")


def issue_token(principal_id: uuid.UUID) -> str:
    """Issue a signed bearer token for an identity.

    Payload is minimal: {"id": str}. The role is always read from the profile
    so that admin role changes take effect without re-login.
    """
    return _serializer().dumps({"id": str(principal_id)})


def verify_token(token: str) -> Optional[uuid.UUID]:
    """Verify a token and return the principal id if valid, else None.

    Max age configurable via AUTH_TOKEN_MAX_AGE seconds (default 30 days).
    """
    max_age = int(current_app.config.get("AUTH_TOKEN_MAX_AGE") or 60 * 60 * 24 * 30)
    try:
        data = _serializer().loads(token, max_age=max_age)
        raw = data.get("id") if isinstance(data, dict) else None
        return uuid.UUID(str(raw)) if raw else None
    except (BadSignature, SignatureExpired, ValueError, TypeError):
        return None


def require_caller():
    """Return the authenticated ``Caller`` for this request or raise 401."""
    caller = getattr(g, "current_caller", None)
    if caller is None or caller.id is None:
        raise AuthenticationError("Authentication required")
    return caller
