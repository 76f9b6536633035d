# tests/conftest.py
import os
import sys
from types import SimpleNamespace

import pytest

# so that `import app` works when running from the repo root
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from app import create_app  # noqa: E402
from config import TestConfig  # noqa: E402
from extensions import db  # noqa: E402
from models import User  # noqa: E402
from modules.equipment.models import Equipment  # noqa: E402
from modules.requests.models import MaintenanceRequest  # noqa: E402
from modules.teams.models import MaintenanceTeam  # noqa: E402

PASSWORD = "secret123"


@pytest.fixture()
def app(tmp_path):
    class _Config(TestConfig):
        UPLOAD_FOLDER = str(tmp_path / "uploads")

    app = create_app(_Config)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


def _authenticate(client, user_id: int) -> None:
    with client.session_transaction() as s:
        s["_user_id"] = str(user_id)
        s["_fresh"] = True


@pytest.fixture()
def login_as(app):
    """Return a fresh test client with a session for the given user id."""
    def _login(user_id: int):
        c = app.test_client()
        _authenticate(c, user_id)
        return c
    return _login


def _add_user(name, email, role, team=None):
    user = User(name=name, email=email, role=role, team=team)
    user.set_password(PASSWORD)
    db.session.add(user)
    return user


@pytest.fixture()
def world(app):
    """Two teams, one user per role, and equipment owned by Mechanics with Tom as default technician."""
    with app.app_context():
        mechanics = MaintenanceTeam(name="Mechanics", specialization="Mechanical")
        electrical = MaintenanceTeam(name="Electrical", specialization="Electrical")
        db.session.add_all([mechanics, electrical])

        admin = _add_user("Admin User", "admin@example.com", "Admin")
        manager = _add_user("Manager Mike", "manager@example.com", "Manager")
        tom = _add_user("Tech Tom", "tom@example.com", "Technician", mechanics)
        steve = _add_user("Sparky Steve", "steve@example.com", "Technician", electrical)
        emma = _add_user("Employee Emma", "emma@example.com", "User")

        press = Equipment(name="Hydraulic Press", serial_number="HP-001", location="Bay 3",
                          category="Heavy Machinery", maintenance_team=mechanics, default_technician=tom)
        db.session.add(press)
        db.session.commit()

        return SimpleNamespace(
            mechanics=mechanics.id, electrical=electrical.id,
            admin=admin.id, manager=manager.id, tom=tom.id, steve=steve.id, emma=emma.id,
            press=press.id,
        )


@pytest.fixture()
def make_request(app, world):
    """Insert a request directly, bypassing the API."""
    def _make(status="New", equipment_id=None, technician_id=None, team_id=None, duration=0.0,
              requested_by=None, **extra):
        with app.app_context():
            equipment = db.session.get(Equipment, equipment_id or world.press)
            req = MaintenanceRequest(
                subject=extra.pop("subject", "Oil leak"),
                description=extra.pop("description", "Leaking from the main cylinder"),
                equipment=equipment,
                status=status,
                duration=duration,
                requested_by_id=requested_by or world.emma,
                assigned_team_id=team_id or equipment.maintenance_team_id,
                assigned_technician_id=technician_id if technician_id is not None else world.tom,
                **extra,
            )
            db.session.add(req)
            db.session.flush()
            req.assign_number()
            db.session.commit()
            return req.id
    return _make
