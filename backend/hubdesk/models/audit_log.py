import uuid

from sqlalchemy import Index
from ..extensions import db
from ._types import JSONType, utcnow


class AuditLog(db.Model):
    __tablename__ = "audit_logs"

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    actor_id = db.Column(db.Uuid, db.ForeignKey("profiles.id", ondelete="SET NULL"))
    action = db.Column(db.Text, nullable=False)
    details = db.Column(JSONType)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    actor = db.relationship("Profile", back_populates="audit_logs", foreign_keys=[actor_id])

    __table_args__ = (Index("idx_audit_created_at", "created_at"),)
