"""SQLAlchemy models for maintenance teams."""

from extensions import db
from utils import isoformat, utcnow


class MaintenanceTeam(db.Model):
    """A named group of technicians with a specialization (Mechanical, Electrical, IT...)."""

    __tablename__ = "maintenance_teams"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(150), unique=True, nullable=False)
    description = db.Column(db.Text)
    specialization = db.Column(db.String(120))
    created_at = db.Column(db.DateTime, default=utcnow)

    # membership lives on users.team_id
    members = db.relationship("User", back_populates="team", order_by="User.name")

    def to_dict(self, with_members: bool = True) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "specialization": self.specialization,
            "createdAt": isoformat(self.created_at),
        }
        if with_members:
            data["members"] = [m.to_summary() for m in self.members]
        return data

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<MaintenanceTeam {self.name}>"
