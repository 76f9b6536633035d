"""Notifications module package."""

from flask import Blueprint

bp = Blueprint("notifications", __name__, url_prefix="/api/notifications")

from . import models  # noqa: E402  pylint: disable=wrong-import-position
from . import routes  # noqa: E402  pylint: disable=wrong-import-position

__all__ = ["bp", "models", "routes"]
