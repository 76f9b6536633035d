"""HTTP routes for maintenance requests."""

import logging
from datetime import timedelta

from flask import jsonify, request
from flask_login import current_user, login_required
from sqlalchemy import or_

from errors import AuthorizationError, ValidationError
from extensions import db
from models import ROLE_ADMIN, ROLE_MANAGER, ROLE_TECHNICIAN
from modules.notifications.models import Notification
from modules.requests import analytics
from modules.requests.models import MaintenanceRequest, RequestNote
from modules.requests.workflow import create_request, update_request
from permissions import can_view_request, has_role, is_technician, require_role
from utils import clean_text, get_or_404, parse_datetime, parse_id, request_payload

from . import bp

logger = logging.getLogger(__name__)


# ---------- helpers ----------
def _visible_to(query, user):
    """Scope a request query to what ``user`` may see."""
    if has_role(user, ROLE_ADMIN, ROLE_MANAGER):
        return query
    if is_technician(user):
        clauses = [MaintenanceRequest.assigned_technician_id == user.id,
                   MaintenanceRequest.requested_by_id == user.id]
        if user.team_id is not None:
            clauses.append(MaintenanceRequest.assigned_team_id == user.team_id)
        return query.filter(or_(*clauses))
    return query.filter(MaintenanceRequest.requested_by_id == user.id)


def _date_range():
    """``start``/``end`` query args; a bare date as ``end`` covers that whole day."""
    start = parse_datetime(request.args.get("start"), "start")
    raw_end = request.args.get("end")
    end = parse_datetime(raw_end, "end")
    if end is not None and len(raw_end.strip()) == 10:
        end = end + timedelta(days=1) - timedelta(microseconds=1)
    if start is not None and end is not None and start > end:
        raise ValidationError("'start' must not be after 'end'")
    return start, end


def _load_visible(request_id: int) -> MaintenanceRequest:
    req = get_or_404(MaintenanceRequest, request_id, "Request")
    if not can_view_request(current_user, req):
        raise AuthorizationError("Not authorized to view this request")
    return req


# ---------- CRUD ----------
@bp.route("", methods=["GET"])
@login_required
def list_requests():
    query = _visible_to(MaintenanceRequest.query, current_user)
    args = request.args
    if args.get("status"):
        query = query.filter(MaintenanceRequest.status == args["status"])
    if args.get("type"):
        query = query.filter(MaintenanceRequest.type == args["type"])
    if args.get("equipment"):
        query = query.filter(MaintenanceRequest.equipment_id == parse_id(args["equipment"], "equipment"))
    if args.get("team"):
        query = query.filter(MaintenanceRequest.assigned_team_id == parse_id(args["team"], "team"))
    if args.get("technician"):
        query = query.filter(MaintenanceRequest.assigned_technician_id == parse_id(args["technician"], "technician"))
    items = query.order_by(MaintenanceRequest.created_at.desc(), MaintenanceRequest.id.desc()).all()
    return jsonify([r.to_dict() for r in items])


@bp.route("/<int:request_id>", methods=["GET"])
@login_required
def get_request(request_id: int):
    return jsonify(_load_visible(request_id).to_dict(with_notes=True))


@bp.route("", methods=["POST"])
@login_required
def create():
    req = create_request(current_user, request_payload())
    db.session.commit()
    return jsonify(req.to_dict()), 201


@bp.route("/<int:request_id>", methods=["PUT"])
@require_role(ROLE_ADMIN, ROLE_MANAGER, ROLE_TECHNICIAN)
def update(request_id: int):
    req = get_or_404(MaintenanceRequest, request_id, "Request")
    update_request(current_user, req, request_payload())
    # request, equipment and notifications in one transaction
    db.session.commit()
    return jsonify(req.to_dict(with_notes=True))


@bp.route("/<int:request_id>", methods=["DELETE"])
@require_role(ROLE_ADMIN)
def delete(request_id: int):
    req = get_or_404(MaintenanceRequest, request_id, "Request")
    Notification.query.filter_by(related_request_id=req.id).update({"related_request_id": None})
    db.session.delete(req)
    db.session.commit()
    logger.info("Request %s deleted by user %s", req.request_number, current_user.id)
    return jsonify(message="Request removed")


@bp.route("/<int:request_id>/notes", methods=["POST"])
@login_required
def add_note(request_id: int):
    req = _load_visible(request_id)
    text = clean_text(request_payload().get("text"), "text")
    if not text:
        raise ValidationError("Note text is required")
    req.notes.append(RequestNote(text=text, user=current_user))
    db.session.commit()
    return jsonify([n.to_dict() for n in req.notes]), 201


# ---------- calendar ----------
@bp.route("/calendar/scheduled", methods=["GET"])
@login_required
def scheduled():
    start, end = _date_range()
    query = _visible_to(MaintenanceRequest.query, current_user).filter(
        MaintenanceRequest.scheduled_date.isnot(None))
    if start is not None:
        query = query.filter(MaintenanceRequest.scheduled_date >= start)
    if end is not None:
        query = query.filter(MaintenanceRequest.scheduled_date <= end)
    items = query.order_by(MaintenanceRequest.scheduled_date.asc()).all()
    return jsonify([r.to_dict() for r in items])


# ---------- analytics ----------
def _analytics_filters() -> dict:
    start, end = _date_range()
    if is_technician(current_user):
        # technicians only ever see their own totals
        return {"team_id": None, "technician_id": current_user.id, "start": start, "end": end}
    return {
        "team_id": parse_id(request.args.get("team"), "team"),
        "technician_id": parse_id(request.args.get("technician"), "technician"),
        "start": start,
        "end": end,
    }


@bp.route("/analytics/hours", methods=["GET"])
@require_role(ROLE_ADMIN, ROLE_MANAGER, ROLE_TECHNICIAN)
def analytics_hours():
    return jsonify(analytics.hours_by_technician(**_analytics_filters()))


@bp.route("/analytics/summary", methods=["GET"])
@require_role(ROLE_ADMIN, ROLE_MANAGER, ROLE_TECHNICIAN)
def analytics_summary():
    return jsonify(analytics.summary(**_analytics_filters()))
