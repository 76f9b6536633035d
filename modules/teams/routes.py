"""HTTP routes for maintenance teams."""

import logging

from flask import jsonify
from flask_login import current_user, login_required

from errors import NotFoundError, ValidationError
from extensions import db
from models import User
from modules.equipment.models import Equipment
from modules.requests.models import MaintenanceRequest
from modules.teams.models import MaintenanceTeam
from permissions import require_role
from utils import clean_text, get_or_404, parse_id, request_payload, require_fields

from . import bp

logger = logging.getLogger(__name__)


def _resolve_members(raw_ids) -> list[User]:
    if raw_ids is None:
        return []
    if not isinstance(raw_ids, list):
        raise ValidationError("'members' must be a list of user ids")
    members = []
    for raw in raw_ids:
        user = db.session.get(User, parse_id(raw, "members"))
        if user is None:
            raise NotFoundError(f"User {raw} not found")
        members.append(user)
    return members


def _ensure_unique_name(name: str, team_id: int | None = None) -> None:
    existing = MaintenanceTeam.query.filter_by(name=name).first()
    if existing is not None and existing.id != team_id:
        raise ValidationError(f"Team '{name}' already exists")


@bp.route("", methods=["GET"])
@login_required
def list_teams():
    teams = MaintenanceTeam.query.order_by(MaintenanceTeam.name.asc()).all()
    return jsonify([t.to_dict() for t in teams])


@bp.route("", methods=["POST"])
@require_role("Admin", "Manager")
def create_team():
    data = request_payload()
    require_fields(data, "name")
    name = clean_text(data["name"], "name")
    _ensure_unique_name(name)

    team = MaintenanceTeam(
        name=name,
        description=clean_text(data.get("description"), "description") or None,
        specialization=clean_text(data.get("specialization"), "specialization") or None,
    )
    db.session.add(team)
    for member in _resolve_members(data.get("members")):
        member.team = team
    db.session.commit()
    logger.info("Team '%s' created by user %s", team.name, current_user.id)
    return jsonify(team.to_dict()), 201


@bp.route("/<int:team_id>", methods=["PUT"])
@require_role("Admin", "Manager")
def update_team(team_id: int):
    team = get_or_404(MaintenanceTeam, team_id, "Team")
    data = request_payload()

    if "name" in data:
        name = clean_text(data.get("name"), "name")
        if not name:
            raise ValidationError("Team name cannot be empty")
        _ensure_unique_name(name, team.id)
        team.name = name
    for field in ("description", "specialization"):
        if field in data:
            setattr(team, field, clean_text(data.get(field), field) or None)

    if "members" in data:
        new_members = _resolve_members(data.get("members"))
        for old in list(team.members):
            if old not in new_members:
                old.team = None
        for member in new_members:
            member.team = team

    db.session.commit()
    return jsonify(team.to_dict())


@bp.route("/<int:team_id>", methods=["DELETE"])
@require_role("Admin")
def delete_team(team_id: int):
    team = get_or_404(MaintenanceTeam, team_id, "Team")
    if Equipment.query.filter_by(maintenance_team_id=team.id).count():
        raise ValidationError("Team still has equipment assigned; reassign it first")

    # SQLite does not enforce ON DELETE, so detach requests explicitly
    MaintenanceRequest.query.filter_by(assigned_team_id=team.id).update({"assigned_team_id": None})
    for member in list(team.members):
        member.team = None
    db.session.delete(team)
    db.session.commit()
    logger.info("Team %s deleted by user %s", team_id, current_user.id)
    return jsonify(message="Team removed")


@bp.route("/mine/members", methods=["GET"])
@login_required
def my_team_members():
    if current_user.team is None:
        return jsonify([])
    return jsonify([m.to_dict() for m in current_user.team.members])
