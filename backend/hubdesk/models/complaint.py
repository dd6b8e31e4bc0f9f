import uuid

from sqlalchemy import Index
from ..extensions import db
from ._types import utcnow
from .enums import complaint_category_enum, complaint_priority_enum, complaint_status_enum


class Complaint(db.Model):
    __tablename__ = "complaints"

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    user_id = db.Column(db.Uuid, db.ForeignKey("profiles.id", ondelete="SET NULL"))
    manager_id = db.Column(db.Uuid, db.ForeignKey("profiles.id", ondelete="SET NULL"))
    title = db.Column(db.Text, nullable=False)
    description = db.Column(db.Text, nullable=False)
    category = db.Column(complaint_category_enum, nullable=False)
    hub = db.Column(db.Text, nullable=False)
    room = db.Column(db.Text)
    priority = db.Column(complaint_priority_enum, nullable=False, default="medium", server_default="medium")
    status = db.Column(complaint_status_enum, nullable=False, default="new", server_default="new")
    is_anonymous = db.Column(db.Boolean, nullable=False, default=False, server_default=db.false())
    sla_due_at = db.Column(db.DateTime(timezone=True))
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    submitter = db.relationship("Profile", back_populates="complaints", foreign_keys=[user_id])
    manager = db.relationship("Profile", back_populates="assigned_complaints", foreign_keys=[manager_id])
    attachments = db.relationship(
        "Attachment",
        back_populates="complaint",
        cascade="all, delete-orphan",
        order_by="Attachment.created_at",
    )
    messages = db.relationship(
        "Message",
        back_populates="complaint",
        cascade="all, delete-orphan",
        order_by="Message.created_at",
    )

    __table_args__ = (
        Index("idx_complaints_user", "user_id"),
        Index("idx_complaints_status", "status"),
        Index("idx_complaints_hub", "hub"),
        Index("idx_complaints_created_at", "created_at"),
    )
