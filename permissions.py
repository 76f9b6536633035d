# permissions.py
"""
Role-based access control for the API.
- role_required([...]) is the main route decorator.
- require_role(*roles) is the same thing with positional roles.
- can_* helpers answer per-object questions used by the request routes.

Roles:
- User        raise requests, add notes, read what they raised
- Technician  work requests of their team (forward moves only)
- Manager     everything on requests, including scrap/un-scrap and reassignment
- Admin       everything except un-scrapping, plus user management and hard deletes

Authorization is always decided here on the server; whatever the client
hides in its menus is cosmetic.
"""

import logging
from functools import wraps
from typing import Iterable, Set

from flask_login import current_user, login_required

from errors import AuthorizationError
from models import ROLE_ADMIN, ROLE_MANAGER, ROLE_TECHNICIAN, ROLE_USER

logger = logging.getLogger(__name__)


def role_required(allowed_roles: Iterable[str]):
    """
    Restrict a view to the given roles.
    Example:
        @role_required(["Admin", "Manager"])
        def view(): ...

    - anonymous callers get 401 from the login manager
    - authenticated callers without the role get 403
    """
    if isinstance(allowed_roles, str):
        allowed: Set[str] = {allowed_roles}
    else:
        allowed = set(allowed_roles or [])

    def decorator(view_func):
        @wraps(view_func)
        @login_required
        def wrapped(*args, **kwargs):
            role = getattr(current_user, "role", None)
            if role in allowed:
                return view_func(*args, **kwargs)
            logger.warning("User %s (%s) denied access to %s", getattr(current_user, "id", None),
                           role, view_func.__name__)
            raise AuthorizationError(f"Role '{role}' is not authorized for this action")

        return wrapped
    return decorator


def require_role(*roles: str):
    """Same as role_required(list(roles))."""
    return role_required(list(roles))


# ------------------------------ shortcuts ------------------------------ #
def has_role(user, *roles: str) -> bool:
    return bool(user is not None and getattr(user, "role", None) in roles)


def is_admin(user) -> bool:
    return has_role(user, ROLE_ADMIN)


def is_manager(user) -> bool:
    return has_role(user, ROLE_MANAGER)


def is_technician(user) -> bool:
    return has_role(user, ROLE_TECHNICIAN)


def is_plain_user(user) -> bool:
    return has_role(user, ROLE_USER)


# ------------------------------ requests ------------------------------- #
def can_view_request(user, req) -> bool:
    """Admins/Managers see all; technicians their team's or their own; users what they raised."""
    if has_role(user, ROLE_ADMIN, ROLE_MANAGER):
        return True
    if is_technician(user):
        return (req.assigned_technician_id == user.id
                or (user.team_id is not None and req.assigned_team_id == user.team_id)
                or req.requested_by_id == user.id)
    return req.requested_by_id == user.id


def can_work_request(user, req) -> bool:
    """A technician may act on a request assigned to them or to their team."""
    return (req.assigned_technician_id == user.id
            or (user.team_id is not None and req.assigned_team_id == user.team_id))


def can_scrap(user) -> bool:
    return has_role(user, ROLE_ADMIN, ROLE_MANAGER)


def can_unscrap(user) -> bool:
    return is_manager(user)


def can_reassign(user) -> bool:
    return has_role(user, ROLE_ADMIN, ROLE_MANAGER)


def can_view_history(user, user_id: int) -> bool:
    return has_role(user, ROLE_ADMIN, ROLE_MANAGER) or user.id == user_id
