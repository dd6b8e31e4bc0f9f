import uuid

from sqlalchemy import Index
from ..extensions import db
from ._types import utcnow


class Attachment(db.Model):
    __tablename__ = "attachments"

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    complaint_id = db.Column(db.Uuid, db.ForeignKey("complaints.id", ondelete="CASCADE"), nullable=False)
    uploader_id = db.Column(db.Uuid, db.ForeignKey("profiles.id", ondelete="SET NULL"))
    file_path = db.Column(db.Text, nullable=False)
    file_name = db.Column(db.Text, nullable=False)
    mime_type = db.Column(db.Text, nullable=False)
    file_size = db.Column(db.Integer)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    complaint = db.relationship("Complaint", back_populates="attachments")
    uploader = db.relationship("Profile", foreign_keys=[uploader_id])

    __table_args__ = (Index("idx_attachments_complaint", "complaint_id"),)
