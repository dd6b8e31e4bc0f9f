import uuid

from ..extensions import db
from ._types import utcnow


class Identity(db.Model):
    """Authentication principal. The profile row hangs off this one."""

    __tablename__ = "identities"

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    email = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.Text, nullable=False)
    last_login_at = db.Column(db.DateTime(timezone=True))
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    profile = db.relationship(
        "Profile",
        back_populates="identity",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
