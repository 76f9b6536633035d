"""Admin user management and per-user activity history."""

import logging

from flask import jsonify
from flask_login import current_user, login_required
from sqlalchemy import or_

from errors import AuthorizationError, ValidationError
from extensions import db
from models import ROLE_ADMIN, ROLES, User
from modules.equipment.models import Equipment
from modules.notifications.models import Notification
from modules.requests.models import MaintenanceRequest, RequestNote
from modules.teams.models import MaintenanceTeam
from permissions import can_view_history, require_role
from utils import clean_text, get_or_404, parse_id, request_payload, require_fields

from . import bp

logger = logging.getLogger(__name__)


def _validated_role(role) -> str:
    if role not in ROLES:
        raise ValidationError(f"Invalid role '{role}'")
    return role


def _team_or_none(raw):
    team_id = parse_id(raw, "team")
    return get_or_404(MaintenanceTeam, team_id, "Team") if team_id is not None else None


@bp.route("/<int:user_id>/history", methods=["GET"])
@login_required
def user_history(user_id: int):
    if not can_view_history(current_user, user_id):
        raise AuthorizationError("Not authorized to view this history")
    get_or_404(User, user_id, "User")
    requests = (MaintenanceRequest.query
                .filter(or_(MaintenanceRequest.requested_by_id == user_id,
                            MaintenanceRequest.assigned_technician_id == user_id))
                .order_by(MaintenanceRequest.created_at.desc(), MaintenanceRequest.id.desc())
                .all())
    return jsonify([r.to_dict() for r in requests])


@bp.route("", methods=["GET"])
@require_role(ROLE_ADMIN)
def list_users():
    users = User.query.order_by(User.name.asc()).all()
    return jsonify([u.to_dict() for u in users])


@bp.route("", methods=["POST"])
@require_role(ROLE_ADMIN)
def create_user():
    data = request_payload()
    require_fields(data, "name", "email", "password")
    email = clean_text(data["email"], "email").lower()
    if User.query.filter_by(email=email).first():
        raise ValidationError("User already exists")

    user = User(
        name=clean_text(data["name"], "name"),
        email=email,
        role=_validated_role(data.get("role") or "User"),
        team=_team_or_none(data.get("team")),
    )
    user.set_password(data["password"])
    db.session.add(user)
    db.session.commit()
    logger.info("User %s (%s) created by admin %s", user.id, user.role, current_user.id)
    return jsonify(user.to_dict()), 201


@bp.route("/<int:user_id>", methods=["PUT"])
@require_role(ROLE_ADMIN)
def update_user(user_id: int):
    user = get_or_404(User, user_id, "User")
    data = request_payload()

    if data.get("name"):
        user.name = clean_text(data["name"], "name")
    if data.get("email"):
        email = clean_text(data["email"], "email").lower()
        clash = User.query.filter_by(email=email).first()
        if clash is not None and clash.id != user.id:
            raise ValidationError("User already exists")
        user.email = email
    if data.get("role"):
        user.role = _validated_role(data["role"])
    if "team" in data:
        # moving teams drops the old membership
        user.team = _team_or_none(data.get("team"))
    if data.get("password"):
        user.set_password(data["password"])

    db.session.commit()
    return jsonify(user.to_dict())


@bp.route("/<int:user_id>", methods=["DELETE"])
@require_role(ROLE_ADMIN)
def delete_user(user_id: int):
    user = get_or_404(User, user_id, "User")
    if user.id == current_user.id:
        raise ValidationError("You cannot delete your own account")

    # SQLite does not enforce ON DELETE, so detach references explicitly
    Notification.query.filter_by(recipient_id=user.id).delete()
    for column in (MaintenanceRequest.requested_by_id, MaintenanceRequest.assigned_technician_id):
        MaintenanceRequest.query.filter(column == user.id).update({column: None})
    for column in (Equipment.default_technician_id, Equipment.assigned_to_id, Equipment.scrapped_by_id):
        Equipment.query.filter(column == user.id).update({column: None})
    RequestNote.query.filter_by(user_id=user.id).update({"user_id": None})

    db.session.delete(user)
    db.session.commit()
    logger.info("User %s deleted by admin %s", user_id, current_user.id)
    return jsonify(message="User removed")
