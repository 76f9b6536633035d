"""Shared SQLAlchemy models."""

from flask_login import UserMixin
from werkzeug.security import check_password_hash, generate_password_hash

from errors import ValidationError
from extensions import db
from utils import isoformat, utcnow

ROLE_ADMIN = "Admin"
ROLE_MANAGER = "Manager"
ROLE_TECHNICIAN = "Technician"
ROLE_USER = "User"
ROLES = [ROLE_ADMIN, ROLE_MANAGER, ROLE_TECHNICIAN, ROLE_USER]


class User(UserMixin, db.Model):
    """Represents an authenticated application user."""

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(150), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False)
    password = db.Column(db.String(255), nullable=False)  # werkzeug hash
    role = db.Column(db.String(32), nullable=False, default=ROLE_USER)
    team_id = db.Column(db.Integer, db.ForeignKey("maintenance_teams.id", ondelete="SET NULL"))
    avatar = db.Column(db.String(255))
    created_at = db.Column(db.DateTime, default=utcnow)

    team = db.relationship("MaintenanceTeam", back_populates="members")

    def set_password(self, raw: str) -> None:
        if not isinstance(raw, str):
            raise ValidationError("'password' must be a string")
        self.password = generate_password_hash(raw)

    def check_password(self, raw: str) -> bool:
        return isinstance(raw, str) and check_password_hash(self.password, raw)

    @property
    def is_manager_or_admin(self) -> bool:
        return self.role in (ROLE_ADMIN, ROLE_MANAGER)

    def to_summary(self) -> dict:
        return {"id": self.id, "name": self.name, "email": self.email, "avatar": self.avatar}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "team": {"id": self.team.id, "name": self.team.name} if self.team else None,
            "avatar": self.avatar,
            "createdAt": isoformat(self.created_at),
        }

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<User {self.email} ({self.role})>"
