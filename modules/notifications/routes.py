"""HTTP routes for notifications."""

from flask import jsonify
from flask_login import current_user, login_required

from errors import ValidationError
from extensions import db
from modules.notifications.models import Notification
from utils import parse_id, request_payload

from . import bp

RECENT_LIMIT = 20


@bp.route("", methods=["GET"])
@login_required
def list_notifications():
    items = (Notification.query
             .filter_by(recipient_id=current_user.id)
             .order_by(Notification.created_at.desc(), Notification.id.desc())
             .limit(RECENT_LIMIT)
             .all())
    return jsonify([n.to_dict() for n in items])


@bp.route("/read", methods=["PUT"])
@login_required
def mark_read():
    ids = request_payload().get("ids")
    query = Notification.query.filter_by(recipient_id=current_user.id)
    if ids:
        if not isinstance(ids, list):
            raise ValidationError("'ids' must be a list")
        query = query.filter(Notification.id.in_([parse_id(i, "ids") for i in ids]))
    else:
        query = query.filter_by(read=False)

    for note in query.all():
        note.read = True
    db.session.commit()
    return jsonify(message="Notifications marked as read")
