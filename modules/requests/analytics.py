"""Read-only aggregates over repaired requests."""

from sqlalchemy import func

from extensions import db
from models import User
from modules.requests.models import STATUS_REPAIRED, MaintenanceRequest


def _repaired_query(query, team_id=None, technician_id=None, start=None, end=None):
    query = query.filter(MaintenanceRequest.status == STATUS_REPAIRED)
    if team_id is not None:
        query = query.filter(MaintenanceRequest.assigned_team_id == team_id)
    if technician_id is not None:
        query = query.filter(MaintenanceRequest.assigned_technician_id == technician_id)
    if start is not None:
        query = query.filter(MaintenanceRequest.completion_date >= start)
    if end is not None:
        query = query.filter(MaintenanceRequest.completion_date <= end)
    return query


def hours_by_technician(team_id=None, technician_id=None, start=None, end=None) -> list[dict]:
    """Total repair hours per technician, largest first."""
    hours = func.coalesce(func.sum(MaintenanceRequest.duration), 0.0)
    query = (db.session.query(User.id, User.name, hours.label("hours"),
                              func.count(MaintenanceRequest.id).label("count"))
             .select_from(MaintenanceRequest)
             .join(User, User.id == MaintenanceRequest.assigned_technician_id))
    query = _repaired_query(query, team_id, technician_id, start, end)
    rows = query.group_by(User.id, User.name).order_by(hours.desc(), User.name.asc()).all()
    return [
        {"technicianId": row.id, "name": row.name, "hours": round(float(row.hours), 2), "count": row.count}
        for row in rows
    ]


def summary(team_id=None, technician_id=None, start=None, end=None) -> dict:
    query = db.session.query(func.count(MaintenanceRequest.id),
                             func.coalesce(func.sum(MaintenanceRequest.duration), 0.0))
    total_requests, total_hours = _repaired_query(query, team_id, technician_id, start, end).one()
    total_hours = float(total_hours or 0.0)
    return {
        "totalRequests": total_requests,
        "totalHours": round(total_hours, 2),
        "avgHours": round(total_hours / total_requests, 2) if total_requests else 0,
    }
