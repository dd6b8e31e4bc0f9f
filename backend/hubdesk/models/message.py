import uuid

from sqlalchemy import Index
from ..extensions import db
from ._types import utcnow


class Message(db.Model):
    __tablename__ = "messages"

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    complaint_id = db.Column(db.Uuid, db.ForeignKey("complaints.id", ondelete="CASCADE"), nullable=False)
    sender_id = db.Column(db.Uuid, db.ForeignKey("profiles.id", ondelete="SET NULL"))
    body = db.Column(db.Text, nullable=False)
    # Manager-only notes; hidden from students
    is_internal = db.Column(db.Boolean, nullable=False, default=False, server_default=db.false())
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    complaint = db.relationship("Complaint", back_populates="messages")
    sender = db.relationship("Profile", foreign_keys=[sender_id])

    __table_args__ = (Index("idx_messages_complaint_created", "complaint_id", "created_at"),)
