"""HTTP routes for the equipment inventory."""

import logging

from flask import current_app, jsonify, request
from flask_login import current_user, login_required
from sqlalchemy import or_

from errors import ValidationError
from extensions import db
from models import ROLE_TECHNICIAN, User
from modules.equipment.models import EQUIPMENT_STATUSES, STATUS_SCRAPPED, Equipment
from modules.requests.models import OPEN_STATUSES, MaintenanceRequest
from modules.teams.models import MaintenanceTeam
from permissions import require_role
from utils import (clean_text, get_or_404, handle_file_upload, parse_datetime, parse_id,
                   request_payload, require_fields)

from . import bp

logger = logging.getLogger(__name__)

TEXT_FIELDS = {
    "name": "name",
    "description": "description",
    "category": "category",
    "location": "location",
    "assignedDepartment": "assigned_department",
}
DATE_FIELDS = {
    "purchaseDate": "purchase_date",
    "warrantyExpiration": "warranty_expiration",
}


def _apply_fields(eq: Equipment, data: dict) -> None:
    """Copy validated payload fields onto ``eq``; only keys present in ``data`` are touched."""
    for key, attr in TEXT_FIELDS.items():
        if key in data:
            setattr(eq, attr, clean_text(data.get(key), key) or None)
    for key, attr in DATE_FIELDS.items():
        if key in data:
            setattr(eq, attr, parse_datetime(data.get(key), key))

    if "serialNumber" in data:
        serial = clean_text(data.get("serialNumber"), "serialNumber")
        if not serial:
            raise ValidationError("Serial number cannot be empty")
        clash = Equipment.query.filter_by(serial_number=serial).first()
        if clash is not None and clash.id != eq.id:
            raise ValidationError(f"Serial number '{serial}' is already registered")
        eq.serial_number = serial

    if "status" in data:
        status = data.get("status") or eq.status
        if status not in EQUIPMENT_STATUSES:
            raise ValidationError(f"Invalid equipment status '{status}'")
        if status != eq.status and STATUS_SCRAPPED in (status, eq.status):
            raise ValidationError("Equipment is scrapped and restored only through its maintenance requests")
        eq.status = status

    if "maintenanceTeam" in data:
        team_id = parse_id(data.get("maintenanceTeam"), "maintenanceTeam")
        if team_id is None:
            raise ValidationError("Maintenance team is required")
        eq.maintenance_team = get_or_404(MaintenanceTeam, team_id, "Maintenance team")

    if "defaultTechnician" in data:
        tech_id = parse_id(data.get("defaultTechnician"), "defaultTechnician")
        tech = get_or_404(User, tech_id, "Technician") if tech_id is not None else None
        if tech is not None and tech.role != ROLE_TECHNICIAN:
            raise ValidationError(f"User {tech.id} is not a technician")
        eq.default_technician = tech

    if "assignedTo" in data:
        user_id = parse_id(data.get("assignedTo"), "assignedTo")
        eq.assigned_to = get_or_404(User, user_id, "User") if user_id is not None else None


@bp.route("", methods=["GET"])
@login_required
def list_equipment():
    q = request.args.get("q", "").strip()
    query = Equipment.query
    if q:
        like = f"%{q}%"
        query = query.filter(or_(
            Equipment.name.ilike(like),
            Equipment.serial_number.ilike(like),
            Equipment.category.ilike(like),
        ))
    status = request.args.get("status")
    if status:
        query = query.filter(Equipment.status == status)
    team = request.args.get("team")
    if team:
        query = query.filter(Equipment.maintenance_team_id == parse_id(team, "team"))
    items = query.order_by(Equipment.name.asc()).all()
    return jsonify([eq.to_dict() for eq in items])


@bp.route("/<int:equipment_id>", methods=["GET"])
@login_required
def get_equipment(equipment_id: int):
    eq = get_or_404(Equipment, equipment_id, "Equipment")
    open_count = (MaintenanceRequest.query
                  .filter(MaintenanceRequest.equipment_id == eq.id,
                          MaintenanceRequest.status.in_(OPEN_STATUSES))
                  .count())
    data = eq.to_dict()
    data["openRequestsCount"] = open_count
    return jsonify(data)


@bp.route("", methods=["POST"])
@require_role("Admin", "Manager")
def create_equipment():
    data = request_payload()
    require_fields(data, "name", "serialNumber", "location", "maintenanceTeam")
    if data.get("status") == STATUS_SCRAPPED:
        raise ValidationError("New equipment cannot be registered as scrapped")

    eq = Equipment()
    _apply_fields(eq, data)
    eq.image = handle_file_upload(request.files.get("image"), current_app.config["UPLOAD_FOLDER"])

    db.session.add(eq)
    db.session.commit()
    logger.info("Equipment %s (%s) created by user %s", eq.id, eq.serial_number, current_user.id)
    return jsonify(eq.to_dict()), 201


@bp.route("/<int:equipment_id>", methods=["PUT"])
@require_role("Admin", "Manager")
def update_equipment(equipment_id: int):
    eq = get_or_404(Equipment, equipment_id, "Equipment")
    data = request_payload()
    for key in ("name", "location"):
        if key in data and not clean_text(data.get(key), key):
            raise ValidationError(f"'{key}' cannot be empty")

    _apply_fields(eq, data)
    image = handle_file_upload(request.files.get("image"), current_app.config["UPLOAD_FOLDER"])
    if image:
        eq.image = image

    db.session.commit()
    return jsonify(eq.to_dict())


@bp.route("/<int:equipment_id>", methods=["DELETE"])
@require_role("Admin")
def delete_equipment(equipment_id: int):
    eq = get_or_404(Equipment, equipment_id, "Equipment")
    # requests keep their history; the link is nulled by the relationship
    db.session.delete(eq)
    db.session.commit()
    logger.info("Equipment %s deleted by user %s", equipment_id, current_user.id)
    return jsonify(message="Equipment removed")
