from extensions import db
from models import User
from modules.equipment.models import Equipment
from modules.notifications.models import Notification
from modules.requests.models import MaintenanceRequest


def test_admin_lists_users(app, world, login_as):
    resp = login_as(world.admin).get("/api/users")

    assert resp.status_code == 200
    users = resp.get_json()
    assert len(users) == 5
    assert all("password" not in u for u in users)


def test_non_admin_cannot_manage_users(app, world, login_as):
    client = login_as(world.manager)
    assert client.get("/api/users").status_code == 403
    assert client.post("/api/users", json={"name": "X", "email": "x@example.com", "password": "pw"}).status_code == 403


def test_admin_creates_technician_in_team(app, world, login_as):
    resp = login_as(world.admin).post("/api/users", json={
        "name": "Mia", "email": "Mia@Example.com", "password": "pw", "role": "Technician",
        "team": world.electrical})

    assert resp.status_code == 201
    body = resp.get_json()
    assert body["email"] == "mia@example.com"
    assert body["role"] == "Technician"
    assert body["team"]["name"] == "Electrical"


def test_create_rejects_unknown_role_and_duplicate_email(app, world, login_as):
    client = login_as(world.admin)
    bad_role = client.post("/api/users", json={"name": "X", "email": "x@example.com", "password": "pw",
                                               "role": "Root"})
    assert bad_role.status_code == 400

    dup = client.post("/api/users", json={"name": "X", "email": "tom@example.com", "password": "pw"})
    assert dup.status_code == 400


def test_admin_moves_user_between_teams(app, world, login_as):
    resp = login_as(world.admin).put(f"/api/users/{world.tom}", json={"team": world.electrical})

    assert resp.status_code == 200
    assert resp.get_json()["team"]["id"] == world.electrical

    resp = login_as(world.admin).put(f"/api/users/{world.tom}", json={"team": None})
    assert resp.get_json()["team"] is None


def test_admin_cannot_delete_self(app, world, login_as):
    assert login_as(world.admin).delete(f"/api/users/{world.admin}").status_code == 400


def test_delete_detaches_references(app, world, login_as, make_request):
    rid = make_request(requested_by=world.emma)
    with app.app_context():
        db.session.add(Notification(recipient_id=world.tom, message="hi"))
        db.session.commit()

    resp = login_as(world.admin).delete(f"/api/users/{world.tom}")

    assert resp.status_code == 200
    with app.app_context():
        assert db.session.get(User, world.tom) is None
        assert db.session.get(MaintenanceRequest, rid).assigned_technician_id is None
        assert db.session.get(Equipment, world.press).default_technician_id is None
        assert Notification.query.filter_by(recipient_id=world.tom).count() == 0


def test_history_visible_to_self_and_managers(app, world, login_as, make_request):
    rid = make_request(requested_by=world.emma)

    own = login_as(world.emma).get(f"/api/users/{world.emma}/history")
    assert own.status_code == 200
    assert [r["id"] for r in own.get_json()] == [rid]

    assert login_as(world.manager).get(f"/api/users/{world.tom}/history").get_json()[0]["id"] == rid
    assert login_as(world.emma).get(f"/api/users/{world.tom}/history").status_code == 403
