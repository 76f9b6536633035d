# -*- coding: utf-8 -*-
"""
Maintenance request lifecycle.

Statuses: New, In Progress, Repaired, Scrapped, Cancelled.

Transitions:
- New -> In Progress           Technician (own/team request), Manager, Admin
- In Progress -> Repaired      Technician (own/team request), Manager, Admin; duration > 0;
                               equipment becomes Operational
- any -> Scrapped              Manager, Admin; equipment is scrapped with metadata
- Scrapped -> any              Manager only; equipment goes back to Under Maintenance
- anything else                Manager, Admin

While equipment is scrapped, its other requests can only be scrapped or
cancelled; the equipment comes back only through the scrapped request.

Technicians only ever move forward (the two moves above), and their moves
notify every Manager/Admin. Their work log (duration, start and completion
dates) is closed once the request leaves New/In Progress.

Reassignment by a Manager/Admin re-derives the team from the technician and
syncs the equipment's default technician.

Nothing in this module commits. The route commits once, so the request,
its equipment and the notifications land together or not at all.
"""
import logging

from errors import AuthorizationError, NotFoundError, ValidationError
from extensions import db
from models import ROLE_ADMIN, ROLE_MANAGER, ROLE_TECHNICIAN, User
from modules.equipment.models import STATUS_OPERATIONAL, STATUS_SCRAPPED as EQUIPMENT_SCRAPPED, Equipment
from modules.notifications.models import TYPE_ASSIGNMENT, notify, notify_managers
from modules.requests.models import (
    OPEN_STATUSES,
    PRIORITIES,
    REQUEST_STATUSES,
    REQUEST_TYPES,
    STATUS_CANCELLED,
    STATUS_IN_PROGRESS,
    STATUS_NEW,
    STATUS_REPAIRED,
    STATUS_SCRAPPED,
    MaintenanceRequest,
)
from modules.teams.models import MaintenanceTeam
from permissions import (can_reassign, can_scrap, can_unscrap, can_work_request, has_role,
                         is_technician)
from utils import clean_text, get_or_404, parse_datetime, parse_float, parse_id, require_fields, utcnow

logger = logging.getLogger(__name__)

TECHNICIAN_MOVES = {
    (STATUS_NEW, STATUS_IN_PROGRESS),
    (STATUS_IN_PROGRESS, STATUS_REPAIRED),
}
# payload keys only Managers/Admins may send
MANAGER_FIELDS = {"subject", "description", "type", "priority", "scheduledDate", "assignedTeam", "scrapReason"}
# work log fields a technician may only touch while the request is open
WORK_LOG_FIELDS = {"duration", "startDate", "completionDate"}

DATE_FIELDS = {
    "scheduledDate": "scheduled_date",
    "startDate": "start_date",
    "completionDate": "completion_date",
}


# ---------- Creation ----------

def create_request(actor: User, data: dict) -> MaintenanceRequest:
    """New request against non-scrapped equipment; team/technician copied from it."""
    require_fields(data, "subject", "description", "equipment")
    equipment = get_or_404(Equipment, parse_id(data.get("equipment"), "equipment"), "Equipment")
    if equipment.is_scrapped or equipment.status == EQUIPMENT_SCRAPPED:
        raise ValidationError(f"Equipment '{equipment.name}' is scrapped; new requests are not accepted")

    req_type = data.get("type") or REQUEST_TYPES[0]
    if req_type not in REQUEST_TYPES:
        raise ValidationError(f"Invalid request type '{req_type}'")
    priority = data.get("priority") or "Normal"
    if priority not in PRIORITIES:
        raise ValidationError(f"Invalid priority '{priority}'")

    req = MaintenanceRequest(
        subject=clean_text(data["subject"], "subject"),
        description=clean_text(data["description"], "description"),
        equipment=equipment,
        type=req_type,
        priority=priority,
        status=STATUS_NEW,
        scheduled_date=parse_datetime(data.get("scheduledDate"), "scheduledDate"),
        requested_by=actor,
        assigned_team=equipment.maintenance_team,
        assigned_technician=equipment.default_technician,
    )
    db.session.add(req)
    db.session.flush()
    req.assign_number()
    logger.info("Request %s created by user %s for equipment %s", req.request_number, actor.id, equipment.id)
    return req


# ---------- Updates ----------

def check_transition(actor: User, req: MaintenanceRequest, new_status: str) -> None:
    """Raise if ``actor`` may not move ``req`` to ``new_status``."""
    if new_status not in REQUEST_STATUSES:
        raise ValidationError(f"Invalid status '{new_status}'")
    current = req.status

    # equipment scrapped through another request: siblings can only be scrapped or cancelled
    equipment = req.equipment
    if (equipment is not None and equipment.is_scrapped and current != STATUS_SCRAPPED
            and new_status not in (STATUS_SCRAPPED, STATUS_CANCELLED)):
        raise ValidationError(f"Equipment '{equipment.name}' is scrapped; restore it through its scrapped request first")

    if current == STATUS_SCRAPPED and not can_unscrap(actor):
        raise AuthorizationError("Only a Manager can restore a scrapped request")
    if new_status == STATUS_SCRAPPED and not can_scrap(actor):
        raise AuthorizationError("Only a Manager or Admin can scrap a request")

    if is_technician(actor):
        if (current, new_status) not in TECHNICIAN_MOVES:
            raise AuthorizationError(f"Technicians cannot move a request from {current} to {new_status}")
        if not can_work_request(actor, req):
            raise AuthorizationError("Request is not assigned to you or your team")
    elif not has_role(actor, ROLE_ADMIN, ROLE_MANAGER):
        raise AuthorizationError("Not authorized to change request status")


def _linked_equipment(req: MaintenanceRequest) -> Equipment:
    equipment = req.equipment
    if equipment is None:
        logger.error("Request %s has no equipment linked (equipment_id=%s)", req.request_number, req.equipment_id)
        raise NotFoundError(f"Equipment linked to request {req.request_number} not found; data integrity error")
    return equipment


def apply_transition(actor: User, req: MaintenanceRequest, new_status: str, scrap_reason: str | None = None) -> None:
    """Move ``req`` to ``new_status`` with its equipment side effects. Assumes check_transition passed."""
    previous = req.status

    if previous == STATUS_SCRAPPED:
        _linked_equipment(req).restore_from_scrap()
        logger.info("Equipment %s restored from scrap via %s", req.equipment_id, req.request_number)

    if new_status == STATUS_IN_PROGRESS and req.start_date is None:
        req.start_date = utcnow()
    elif new_status == STATUS_REPAIRED:
        if req.equipment is None:
            logger.warning("Request %s repaired without linked equipment", req.request_number)
        elif not req.equipment.is_scrapped:
            req.equipment.status = STATUS_OPERATIONAL
        if req.completion_date is None:
            req.completion_date = utcnow()
    elif new_status == STATUS_SCRAPPED:
        equipment = _linked_equipment(req)
        equipment.mark_scrapped(actor, scrap_reason or f"Scrapped via request {req.request_number}")
        logger.info("Equipment %s scrapped via %s by user %s", equipment.id, req.request_number, actor.id)

    req.status = new_status
    logger.info("Request %s: %s -> %s by user %s (%s)", req.request_number, previous, new_status,
                actor.id, actor.role)

    if is_technician(actor):
        notify_managers(
            f"{actor.name} moved {req.request_number} '{req.subject}' from {previous} to {new_status}",
            request=req,
            exclude=actor,
        )


def assign_technician(actor: User, req: MaintenanceRequest, technician_id: int | None) -> None:
    if is_technician(actor):
        if technician_id != actor.id:
            raise AuthorizationError("Technicians can only assign requests to themselves")
        if actor.team_id is None or actor.team_id != req.assigned_team_id:
            raise AuthorizationError("You can only pick up requests of your own team")
        req.assigned_technician = actor
        return

    if not can_reassign(actor):
        raise AuthorizationError("Not authorized to assign technicians")

    if technician_id is None:
        req.assigned_technician = None
        return

    technician = get_or_404(User, technician_id, "Technician")
    if technician.role != ROLE_TECHNICIAN:
        raise ValidationError(f"User {technician.id} is not a technician")
    if technician.id == req.assigned_technician_id:
        return

    req.assigned_technician = technician
    if technician.team_id is not None and technician.team_id != req.assigned_team_id:
        req.assigned_team = technician.team
    if req.equipment is not None:
        req.equipment.default_technician = technician

    if technician.id != actor.id:
        notify(technician, f"You have been assigned to {req.request_number}: {req.subject}",
               TYPE_ASSIGNMENT, req)
    logger.info("Request %s reassigned to technician %s by user %s", req.request_number, technician.id, actor.id)


def update_request(actor: User, req: MaintenanceRequest, data: dict) -> MaintenanceRequest:
    """
    Apply a PUT payload: field edits, (re)assignment and a status move.
    Everything is validated before the first side effect.
    """
    if is_technician(actor):
        forbidden = sorted(k for k in data if k in MANAGER_FIELDS)
        if forbidden:
            raise AuthorizationError("Technicians cannot change: " + ", ".join(forbidden))
        if req.status not in OPEN_STATUSES and WORK_LOG_FIELDS.intersection(data):
            raise AuthorizationError(f"Request {req.request_number} is {req.status}; its work log is closed")
        if not can_work_request(actor, req) and "assignedTechnician" not in data:
            raise AuthorizationError("Request is not assigned to you or your team")
    elif not has_role(actor, ROLE_ADMIN, ROLE_MANAGER):
        raise AuthorizationError("Not authorized to update requests")

    # -- parse
    duration = None
    if "duration" in data:
        duration = parse_float(data.get("duration"), "duration")
        if duration is None or duration < 0:
            raise ValidationError("Duration must be a non-negative number of hours")

    for key in ("type", "priority"):
        allowed = REQUEST_TYPES if key == "type" else PRIORITIES
        if key in data and data.get(key) not in allowed:
            raise ValidationError(f"Invalid {key} '{data.get(key)}'")
    for key in ("subject", "description"):
        if key in data and not clean_text(data.get(key), key):
            raise ValidationError(f"'{key}' cannot be empty")
    dates = {attr: parse_datetime(data.get(key), key) for key, attr in DATE_FIELDS.items() if key in data}

    new_status = data.get("status")
    status_change = new_status is not None and new_status != req.status
    if new_status is not None and new_status not in REQUEST_STATUSES:
        raise ValidationError(f"Invalid status '{new_status}'")
    if status_change:
        check_transition(actor, req, new_status)
        if new_status == STATUS_REPAIRED:
            effective = duration if duration is not None else req.duration
            if not effective or effective <= 0:
                raise ValidationError("A positive duration (hours) is required to mark a request as Repaired")

    # -- apply
    if "assignedTechnician" in data:
        assign_technician(actor, req, parse_id(data.get("assignedTechnician"), "assignedTechnician"))
    if "assignedTeam" in data:
        team_id = parse_id(data.get("assignedTeam"), "assignedTeam")
        req.assigned_team = get_or_404(MaintenanceTeam, team_id, "Team") if team_id is not None else None

    for key in ("subject", "description"):
        if key in data:
            setattr(req, key, clean_text(data[key], key))
    for key in ("type", "priority"):
        if key in data:
            setattr(req, key, data[key])
    for attr, value in dates.items():
        setattr(req, attr, value)
    if duration is not None:
        req.duration = duration

    if status_change:
        apply_transition(actor, req, new_status, scrap_reason=(data.get("scrapReason") or None))

    return req
