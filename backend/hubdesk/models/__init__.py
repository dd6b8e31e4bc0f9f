# Import every model so metadata is complete for db.create_all() and migrations
from .identity import Identity
from .profile import Profile
from .complaint import Complaint
from .attachment import Attachment
from .message import Message
from .audit_log import AuditLog

__all__ = ["Identity", "Profile", "Complaint", "Attachment", "Message", "AuditLog"]
