"""SQLAlchemy models for maintenance requests."""

from extensions import db
from utils import isoformat, utcnow

STATUS_NEW = "New"
STATUS_IN_PROGRESS = "In Progress"
STATUS_REPAIRED = "Repaired"
STATUS_SCRAPPED = "Scrapped"
STATUS_CANCELLED = "Cancelled"
REQUEST_STATUSES = [STATUS_NEW, STATUS_IN_PROGRESS, STATUS_REPAIRED, STATUS_SCRAPPED, STATUS_CANCELLED]
OPEN_STATUSES = [STATUS_NEW, STATUS_IN_PROGRESS]

TYPE_CORRECTIVE = "Corrective"
TYPE_PREVENTIVE = "Preventive"
REQUEST_TYPES = [TYPE_CORRECTIVE, TYPE_PREVENTIVE]

PRIORITIES = ["Low", "Normal", "High", "Critical"]

NUMBER_FORMAT = "REQ-{:05d}"


class MaintenanceRequest(db.Model):
    """
    A unit of work against one equipment asset.
    Team and technician are copied from the equipment when the request is
    created and are not re-resolved afterwards.
    """
    __tablename__ = "maintenance_requests"

    id = db.Column(db.Integer, primary_key=True)
    request_number = db.Column(db.String(32), unique=True)
    subject = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False)
    # nullable only so that deleting equipment leaves the request history behind
    equipment_id = db.Column(db.Integer, db.ForeignKey("equipment.id", ondelete="SET NULL"))
    type = db.Column(db.String(32), nullable=False, default=TYPE_CORRECTIVE)
    priority = db.Column(db.String(32), nullable=False, default="Normal")
    status = db.Column(db.String(32), nullable=False, default=STATUS_NEW, index=True)

    requested_by_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"))
    assigned_team_id = db.Column(db.Integer, db.ForeignKey("maintenance_teams.id", ondelete="SET NULL"))
    assigned_technician_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"))

    scheduled_date = db.Column(db.DateTime, index=True)
    start_date = db.Column(db.DateTime)
    completion_date = db.Column(db.DateTime)
    duration = db.Column(db.Float, nullable=False, default=0.0)  # hours
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    equipment = db.relationship("Equipment", back_populates="requests")
    requested_by = db.relationship("User", foreign_keys=[requested_by_id])
    assigned_team = db.relationship("MaintenanceTeam")
    assigned_technician = db.relationship("User", foreign_keys=[assigned_technician_id])
    notes = db.relationship("RequestNote", back_populates="request",
                            cascade="all, delete-orphan",
                            order_by="RequestNote.id")

    def assign_number(self) -> None:
        """Needs a flushed id."""
        self.request_number = NUMBER_FORMAT.format(self.id)

    def to_dict(self, with_notes: bool = False) -> dict:
        data = {
            "id": self.id,
            "requestNumber": self.request_number,
            "subject": self.subject,
            "description": self.description,
            "equipment": self.equipment.to_summary() if self.equipment else None,
            "type": self.type,
            "priority": self.priority,
            "status": self.status,
            "requestedBy": self.requested_by.to_summary() if self.requested_by else None,
            "assignedTeam": self.assigned_team.to_dict(with_members=False) if self.assigned_team else None,
            "assignedTechnician": self.assigned_technician.to_summary() if self.assigned_technician else None,
            "scheduledDate": isoformat(self.scheduled_date),
            "startDate": isoformat(self.start_date),
            "completionDate": isoformat(self.completion_date),
            "duration": self.duration,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }
        if with_notes:
            data["notes"] = [n.to_dict() for n in self.notes]
        return data

    def __repr__(self) -> str:
        return f"<MaintenanceRequest {self.request_number} [{self.status}]>"


class RequestNote(db.Model):
    """Append-only note on a request; owned by the request."""

    __tablename__ = "request_notes"

    id = db.Column(db.Integer, primary_key=True)
    request_id = db.Column(db.Integer, db.ForeignKey("maintenance_requests.id", ondelete="CASCADE"),
                           nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"))
    text = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)

    request = db.relationship("MaintenanceRequest", back_populates="notes")
    user = db.relationship("User")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user": self.user.to_summary() if self.user else None,
            "text": self.text,
            "date": isoformat(self.created_at),
        }
