from datetime import datetime

import pytest

from extensions import db
from modules.equipment.models import Equipment


@pytest.fixture()
def repaired(app, world, make_request):
    with app.app_context():
        panel = Equipment(name="Panel", serial_number="EP-1", location="Utility",
                          maintenance_team_id=world.electrical, default_technician_id=world.steve)
        db.session.add(panel)
        db.session.commit()
        panel_id = panel.id

    make_request(status="Repaired", duration=2, completion_date=datetime(2026, 3, 1))
    make_request(status="Repaired", duration=4, completion_date=datetime(2026, 3, 20))
    make_request(status="Repaired", duration=1.5, equipment_id=panel_id, technician_id=world.steve,
                 completion_date=datetime(2026, 4, 2))
    # not repaired: never counted
    make_request(status="In Progress", duration=10)
    return panel_id


def test_hours_grouped_by_technician(app, world, login_as, repaired):
    resp = login_as(world.manager).get("/api/requests/analytics/hours")

    assert resp.status_code == 200
    assert resp.get_json() == [
        {"technicianId": world.tom, "name": "Tech Tom", "hours": 6.0, "count": 2},
        {"technicianId": world.steve, "name": "Sparky Steve", "hours": 1.5, "count": 1},
    ]


def test_summary_totals(app, world, login_as, repaired):
    resp = login_as(world.admin).get("/api/requests/analytics/summary")
    assert resp.get_json() == {"totalRequests": 3, "totalHours": 7.5, "avgHours": 2.5}


def test_filters_by_team_and_date(app, world, login_as, repaired):
    client = login_as(world.manager)

    by_team = client.get(f"/api/requests/analytics/summary?team={world.electrical}").get_json()
    assert by_team["totalRequests"] == 1

    march = client.get("/api/requests/analytics/summary?start=2026-03-01&end=2026-03-31").get_json()
    assert march == {"totalRequests": 2, "totalHours": 6.0, "avgHours": 3.0}


def test_technician_only_sees_own_totals(app, world, login_as, repaired):
    client = login_as(world.steve)

    hours = client.get(f"/api/requests/analytics/hours?technician={world.tom}").get_json()
    assert [row["technicianId"] for row in hours] == [world.steve]

    summary = client.get("/api/requests/analytics/summary").get_json()
    assert summary["totalRequests"] == 1
    assert summary["totalHours"] == 1.5


def test_empty_summary(app, world, login_as):
    resp = login_as(world.manager).get("/api/requests/analytics/summary")
    assert resp.get_json() == {"totalRequests": 0, "totalHours": 0.0, "avgHours": 0}


def test_plain_users_have_no_analytics(app, world, login_as):
    assert login_as(world.emma).get("/api/requests/analytics/hours").status_code == 403
