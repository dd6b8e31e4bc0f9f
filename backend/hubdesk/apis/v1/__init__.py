import uuid

from flask import Blueprint, Flask, g, request, current_app

from ...extensions import db
from ...models.profile import Profile
from ...policy import Caller
from ...security import verify_token

from ...modules.auth import bp as auth_bp
from ...modules.profiles.routes import bp as profiles_bp
from ...modules.complaints.routes import bp as complaints_bp
from ...modules.messages.routes import bp as messages_bp
from ...modules.attachments.routes import bp as attachments_bp
from ...modules.admin.routes import bp as admin_bp
from ...modules.events.routes import bp as events_bp


def register_api(app: Flask) -> None:
    api_v1 = Blueprint("api_v1", __name__, url_prefix="/api/v1")

    # Auth context loader. A signed bearer token is always accepted; in
    # development (DEBUG=True) an `X-User-Id: <uuid>` header is accepted too
    # to simplify local testing.
    @api_v1.before_request  # type: ignore
    def _load_current_caller():
        pid = None
        auth = request.headers.get("Authorization") or ""
        if auth.lower().startswith("bearer "):
            pid = verify_token(auth[7:].strip())
        elif current_app.config.get("DEBUG"):
            raw = (request.headers.get("X-User-Id") or "").strip()
            if raw:
                try:
                    pid = uuid.UUID(raw)
                except ValueError:
                    pid = None
        profile = db.session.get(Profile, pid) if pid is not None else None
        g.current_profile = profile  # type: ignore[attr-defined]
        g.current_caller = Caller.from_profile(profile) if profile is not None else None  # type: ignore[attr-defined]

    # Mount feature blueprints
    api_v1.register_blueprint(auth_bp)
    api_v1.register_blueprint(profiles_bp)
    api_v1.register_blueprint(complaints_bp)
    api_v1.register_blueprint(messages_bp)
    api_v1.register_blueprint(attachments_bp)
    api_v1.register_blueprint(admin_bp)
    api_v1.register_blueprint(events_bp)

    app.register_blueprint(api_v1)
