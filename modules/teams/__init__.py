"""Maintenance teams module package."""

from flask import Blueprint

bp = Blueprint("teams", __name__, url_prefix="/api/teams")

from . import models  # noqa: E402  pylint: disable=wrong-import-position
from . import routes  # noqa: E402  pylint: disable=wrong-import-position

__all__ = ["bp", "models", "routes"]
