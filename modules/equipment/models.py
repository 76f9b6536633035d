"""SQLAlchemy models for the equipment inventory."""

from extensions import db
from utils import isoformat, utcnow

STATUS_OPERATIONAL = "Operational"
STATUS_DOWN = "Down"
STATUS_UNDER_MAINTENANCE = "Under Maintenance"
STATUS_SCRAPPED = "Scrapped"
EQUIPMENT_STATUSES = [STATUS_OPERATIONAL, STATUS_DOWN, STATUS_UNDER_MAINTENANCE, STATUS_SCRAPPED]


class Equipment(db.Model):
    __tablename__ = "equipment"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    serial_number = db.Column(db.String(120), unique=True, nullable=False)
    description = db.Column(db.Text)
    category = db.Column(db.String(120))             # Heavy Machinery, Electronics, Vehicles...
    location = db.Column(db.String(120), nullable=False)
    purchase_date = db.Column(db.DateTime)
    warranty_expiration = db.Column(db.DateTime)
    status = db.Column(db.String(32), nullable=False, default=STATUS_OPERATIONAL)
    assigned_department = db.Column(db.String(120))
    assigned_to_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"))  # employee using it
    maintenance_team_id = db.Column(db.Integer, db.ForeignKey("maintenance_teams.id"), nullable=False)
    default_technician_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"))
    image = db.Column(db.String(255))
    created_at = db.Column(db.DateTime, default=utcnow)

    # scrap metadata, only written by the request workflow
    is_scrapped = db.Column(db.Boolean, nullable=False, default=False)
    scrapped_at = db.Column(db.DateTime)
    scrap_reason = db.Column(db.Text)
    scrapped_by_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"))

    maintenance_team = db.relationship("MaintenanceTeam")
    assigned_to = db.relationship("User", foreign_keys=[assigned_to_id])
    default_technician = db.relationship("User", foreign_keys=[default_technician_id])
    scrapped_by = db.relationship("User", foreign_keys=[scrapped_by_id])
    requests = db.relationship("MaintenanceRequest", back_populates="equipment")

    @property
    def is_warranty_active(self) -> bool:
        if self.warranty_expiration is None:
            return False
        return self.warranty_expiration > utcnow()

    def mark_scrapped(self, user, reason: str | None) -> None:
        self.status = STATUS_SCRAPPED
        self.is_scrapped = True
        self.scrapped_at = utcnow()
        self.scrap_reason = reason
        self.scrapped_by = user

    def restore_from_scrap(self) -> None:
        self.status = STATUS_UNDER_MAINTENANCE
        self.is_scrapped = False
        self.scrapped_at = None
        self.scrap_reason = None
        self.scrapped_by = None

    def to_summary(self) -> dict:
        return {"id": self.id, "name": self.name, "serialNumber": self.serial_number,
                "status": self.status}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "serialNumber": self.serial_number,
            "description": self.description,
            "category": self.category,
            "location": self.location,
            "purchaseDate": isoformat(self.purchase_date),
            "warrantyExpiration": isoformat(self.warranty_expiration),
            "isWarrantyActive": self.is_warranty_active,
            "status": self.status,
            "assignedDepartment": self.assigned_department,
            "assignedTo": self.assigned_to.to_summary() if self.assigned_to else None,
            "maintenanceTeam": self.maintenance_team.to_dict(with_members=False) if self.maintenance_team else None,
            "defaultTechnician": self.default_technician.to_summary() if self.default_technician else None,
            "image": self.image,
            "isScrapped": self.is_scrapped,
            "scrappedAt": isoformat(self.scrapped_at),
            "scrapReason": self.scrap_reason,
            "scrappedBy": self.scrapped_by.to_summary() if self.scrapped_by else None,
            "createdAt": isoformat(self.created_at),
        }

    def __repr__(self) -> str:
        return f"<Equipment {self.serial_number}>"
