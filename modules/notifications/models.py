"""SQLAlchemy models and helpers for in-app notifications."""

import logging

from extensions import db
from models import ROLE_ADMIN, ROLE_MANAGER, User
from utils import isoformat, utcnow

logger = logging.getLogger(__name__)

TYPE_ASSIGNMENT = "Assignment"
TYPE_UPDATE = "Update"
TYPE_ALERT = "Alert"
NOTIFICATION_TYPES = [TYPE_ASSIGNMENT, TYPE_UPDATE, TYPE_ALERT]


class Notification(db.Model):
    __tablename__ = "notifications"

    id = db.Column(db.Integer, primary_key=True)
    recipient_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    message = db.Column(db.String(500), nullable=False)
    type = db.Column(db.String(32), nullable=False, default=TYPE_UPDATE)
    related_request_id = db.Column(db.Integer, db.ForeignKey("maintenance_requests.id", ondelete="SET NULL"))
    read = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    recipient = db.relationship("User")
    related_request = db.relationship("MaintenanceRequest")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "recipient": self.recipient_id,
            "message": self.message,
            "type": self.type,
            "relatedRequest": self.related_request_id,
            "read": self.read,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }


# ---------- Side effects used by the request workflow ----------
# Nothing here commits: notifications ride on the caller's transaction.

def notify(recipient: User, message: str, type_: str = TYPE_UPDATE, request=None) -> Notification:
    if type_ not in NOTIFICATION_TYPES:
        raise ValueError(f"Unknown notification type {type_!r}")
    note = Notification(recipient=recipient, message=message, type=type_, related_request=request)
    db.session.add(note)
    logger.debug("Queued %s notification for user %s", type_, recipient.id)
    return note


def notify_managers(message: str, request=None, exclude: User | None = None,
                    type_: str = TYPE_UPDATE) -> list[Notification]:
    """Notify every Manager and Admin, optionally skipping the actor."""
    recipients = User.query.filter(User.role.in_([ROLE_MANAGER, ROLE_ADMIN])).all()
    return [notify(user, message, type_, request)
            for user in recipients
            if exclude is None or user.id != exclude.id]
