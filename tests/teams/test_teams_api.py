from extensions import db
from models import User
from modules.requests.models import MaintenanceRequest
from modules.teams.models import MaintenanceTeam


def test_list_teams_with_members(app, world, login_as):
    teams = login_as(world.emma).get("/api/teams").get_json()

    assert [t["name"] for t in teams] == ["Electrical", "Mechanics"]
    mechanics = teams[1]
    assert [m["id"] for m in mechanics["members"]] == [world.tom]


def test_manager_creates_team_with_members(app, world, login_as):
    resp = login_as(world.manager).post(
        "/api/teams", json={"name": "IT Support", "specialization": "IT", "members": [world.steve]})

    assert resp.status_code == 201
    assert [m["id"] for m in resp.get_json()["members"]] == [world.steve]
    with app.app_context():
        assert db.session.get(User, world.steve).team.name == "IT Support"


def test_duplicate_team_name_rejected(app, world, login_as):
    resp = login_as(world.manager).post("/api/teams", json={"name": "Mechanics"})
    assert resp.status_code == 400


def test_technician_cannot_create_team(app, world, login_as):
    assert login_as(world.tom).post("/api/teams", json={"name": "Night Shift"}).status_code == 403


def test_update_replaces_membership(app, world, login_as):
    resp = login_as(world.manager).put(
        f"/api/teams/{world.mechanics}", json={"description": "Presses and lathes", "members": [world.steve]})

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["description"] == "Presses and lathes"
    assert [m["id"] for m in body["members"]] == [world.steve]
    with app.app_context():
        assert db.session.get(User, world.tom).team_id is None


def test_update_with_unknown_member_is_404(app, world, login_as):
    resp = login_as(world.manager).put(f"/api/teams/{world.mechanics}", json={"members": [4242]})
    assert resp.status_code == 404


def test_delete_blocked_while_equipment_assigned(app, world, login_as):
    resp = login_as(world.admin).delete(f"/api/teams/{world.mechanics}")
    assert resp.status_code == 400


def test_admin_deletes_team_and_releases_members(app, world, login_as):
    assert login_as(world.manager).delete(f"/api/teams/{world.electrical}").status_code == 403

    resp = login_as(world.admin).delete(f"/api/teams/{world.electrical}")

    assert resp.status_code == 200
    with app.app_context():
        assert db.session.get(MaintenanceTeam, world.electrical) is None
        assert db.session.get(User, world.steve).team_id is None


def test_my_team_members(app, world, login_as):
    members = login_as(world.tom).get("/api/teams/mine/members").get_json()
    assert [m["id"] for m in members] == [world.tom]

    assert login_as(world.emma).get("/api/teams/mine/members").get_json() == []


def test_delete_detaches_requests_from_team(app, world, login_as, make_request):
    rid = make_request(team_id=world.electrical)

    assert login_as(world.admin).delete(f"/api/teams/{world.electrical}").status_code == 200
    replacement = login_as(world.admin).post("/api/teams", json={"name": "Night Shift"}).get_json()

    with app.app_context():
        assert db.session.get(MaintenanceRequest, rid).assigned_team_id is None
    # a team reusing the freed id inherits nothing
    assert login_as(world.admin).get(f"/api/requests?team={replacement['id']}").get_json() == []


def test_non_string_name_rejected(app, world, login_as):
    resp = login_as(world.manager).post("/api/teams", json={"name": 42})
    assert resp.status_code == 400
