# seed.py
"""Demo data: users for every role, two teams, equipment and a few requests."""
from datetime import timedelta

from extensions import db
from models import User
from modules.equipment.models import STATUS_UNDER_MAINTENANCE, Equipment
from modules.requests.models import MaintenanceRequest
from modules.teams.models import MaintenanceTeam
from utils import utcnow

DEMO_PASSWORD = "123456"


def _user(name, email, role, team=None):
    user = User.query.filter_by(email=email).first()
    if not user:
        user = User(name=name, email=email, role=role, team=team)
        user.set_password(DEMO_PASSWORD)
        db.session.add(user)
        db.session.flush()
    return user


def _team(name, description, specialization):
    team = MaintenanceTeam.query.filter_by(name=name).first()
    if not team:
        team = MaintenanceTeam(name=name, description=description, specialization=specialization)
        db.session.add(team)
        db.session.flush()
    return team


def _equipment(serial, **fields):
    eq = Equipment.query.filter_by(serial_number=serial).first()
    if not eq:
        eq = Equipment(serial_number=serial, **fields)
        db.session.add(eq)
        db.session.flush()
    return eq


def run():
    mechanics = _team("Mechanics", "Handles all mechanical issues", "Mechanical")
    electrical = _team("Electrical", "Handles all electrical components", "Electrical")

    admin = _user("Admin User", "admin@example.com", "Admin")
    _user("Manager Mike", "manager@example.com", "Manager")
    tom = _user("Tech Tom", "tom@example.com", "Technician", mechanics)
    steve = _user("Sparky Steve", "steve@example.com", "Technician", electrical)
    _user("Employee Emma", "emma@example.com", "User")

    press = _equipment(
        "HP-2023-001", name="Hydraulic Press", category="Heavy Machinery", location="Plant A - Bay 3",
        maintenance_team=mechanics, default_technician=tom,
        purchase_date=utcnow() - timedelta(days=400), warranty_expiration=utcnow() + timedelta(days=330),
    )
    panel = _equipment(
        "EP-2022-014", name="Main Electrical Panel", category="Electrical", location="Plant A - Utility Room",
        maintenance_team=electrical, default_technician=steve, status=STATUS_UNDER_MAINTENANCE,
    )
    _equipment(
        "FL-2021-007", name="Forklift", category="Vehicles", location="Warehouse",
        maintenance_team=mechanics, default_technician=tom,
    )

    if not MaintenanceRequest.query.count():
        samples = [
            (press, "Oil leak on main cylinder", "Corrective", "High", None),
            (panel, "Breaker trips under load", "Corrective", "Critical", None),
            (press, "Quarterly inspection", "Preventive", "Normal", utcnow() + timedelta(days=7)),
        ]
        for eq, subject, req_type, priority, scheduled in samples:
            req = MaintenanceRequest(
                subject=subject, description=subject, equipment=eq, type=req_type, priority=priority,
                scheduled_date=scheduled, requested_by=admin,
                assigned_team=eq.maintenance_team, assigned_technician=eq.default_technician,
            )
            db.session.add(req)
            db.session.flush()
            req.assign_number()

    db.session.commit()
    print(f"Seed OK: users (password '{DEMO_PASSWORD}'), Mechanics/Electrical teams, equipment, requests.")


if __name__ == "__main__":
    from app import create_app

    with create_app().app_context():
        run()
