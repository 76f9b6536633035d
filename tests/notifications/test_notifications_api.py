from extensions import db
from modules.notifications.models import Notification


def _seed(app, recipient_id, count):
    with app.app_context():
        for i in range(count):
            db.session.add(Notification(recipient_id=recipient_id, message=f"note {i}"))
        db.session.commit()
        return [n.id for n in Notification.query.filter_by(recipient_id=recipient_id).order_by(Notification.id)]


def test_lists_latest_twenty_for_caller(app, world, login_as):
    ids = _seed(app, world.manager, 25)
    _seed(app, world.admin, 2)

    items = login_as(world.manager).get("/api/notifications").get_json()

    assert len(items) == 20
    assert items[0]["id"] == ids[-1]
    assert {n["recipient"] for n in items} == {world.manager}


def test_mark_selected_as_read(app, world, login_as):
    ids = _seed(app, world.manager, 3)

    resp = login_as(world.manager).put("/api/notifications/read", json={"ids": ids[:2]})

    assert resp.status_code == 200
    with app.app_context():
        read = {n.id: n.read for n in Notification.query.all()}
    assert read == {ids[0]: True, ids[1]: True, ids[2]: False}


def test_mark_all_read_only_touches_own(app, world, login_as):
    _seed(app, world.manager, 2)
    admin_ids = _seed(app, world.admin, 1)

    login_as(world.manager).put("/api/notifications/read", json={})

    with app.app_context():
        assert Notification.query.filter_by(recipient_id=world.manager, read=False).count() == 0
        assert db.session.get(Notification, admin_ids[0]).read is False


def test_cannot_mark_someone_elses(app, world, login_as):
    admin_ids = _seed(app, world.admin, 1)
    login_as(world.manager).put("/api/notifications/read", json={"ids": admin_ids})

    with app.app_context():
        assert db.session.get(Notification, admin_ids[0]).read is False


def test_assignment_creates_notification(app, world, login_as, make_request):
    rid = make_request()
    login_as(world.admin).put(f"/api/requests/{rid}", json={"assignedTechnician": world.steve})

    items = login_as(world.steve).get("/api/notifications").get_json()
    assert len(items) == 1
    assert items[0]["type"] == "Assignment"
    assert items[0]["relatedRequest"] == rid
