from ..extensions import db
from ._types import utcnow
from .enums import user_role_enum


class Profile(db.Model):
    __tablename__ = "profiles"

    id = db.Column(db.Uuid, db.ForeignKey("identities.id", ondelete="CASCADE"), primary_key=True)
    name = db.Column(db.Text, nullable=False)
    role = db.Column(user_role_enum, nullable=False, default="student", server_default="student")
    hub = db.Column(db.Text)
    phone = db.Column(db.Text)
    avatar_url = db.Column(db.Text)
    is_verified = db.Column(db.Boolean, nullable=False, default=False, server_default=db.false())
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    identity = db.relationship("Identity", back_populates="profile")
    complaints = db.relationship(
        "Complaint",
        back_populates="submitter",
        foreign_keys="Complaint.user_id",
        lazy=True,
    )
    assigned_complaints = db.relationship(
        "Complaint",
        back_populates="manager",
        foreign_keys="Complaint.manager_id",
        lazy=True,
    )
    audit_logs = db.relationship(
        "AuditLog",
        back_populates="actor",
        foreign_keys="AuditLog.actor_id",
        lazy=True,
    )
