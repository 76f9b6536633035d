"""Registration, login and the caller's own profile."""

import logging

from flask import current_app, jsonify, request
from flask_login import current_user, login_required, login_user, logout_user

from errors import AuthenticationError, ValidationError, error_response
from extensions import db, login_manager
from models import ROLE_USER, User
from utils import clean_text, handle_file_upload, request_payload, require_fields

from . import bp

logger = logging.getLogger(__name__)


@login_manager.user_loader
def load_user(user_id: str | None) -> User | None:
    """Resolve a ``User`` instance for Flask-Login sessions."""
    if not user_id:
        return None
    return db.session.get(User, int(user_id))


@login_manager.unauthorized_handler
def unauthorized():
    return error_response("Not authorized, please log in", 401)


def _normalise_email(raw) -> str:
    email = clean_text(raw, "email").lower()
    if "@" not in email:
        raise ValidationError("A valid email is required")
    return email


def _ensure_email_free(email: str, user_id: int | None = None) -> None:
    existing = User.query.filter_by(email=email).first()
    if existing is not None and existing.id != user_id:
        raise ValidationError("User already exists")


@bp.route("/register", methods=["POST"])
def register():
    data = request_payload()
    require_fields(data, "name", "email", "password")
    email = _normalise_email(data["email"])
    _ensure_email_free(email)

    # self-registration never grants elevated roles
    user = User(name=clean_text(data["name"], "name"), email=email, role=ROLE_USER)
    user.set_password(data["password"])
    db.session.add(user)
    db.session.commit()

    login_user(user)
    logger.info("User %s registered", user.id)
    return jsonify(user.to_dict()), 201


@bp.route("/login", methods=["POST"])
def login():
    data = request_payload()
    require_fields(data, "email", "password")
    user = User.query.filter_by(email=clean_text(data["email"], "email").lower()).first()
    if user is None or not user.check_password(data["password"]):
        logger.warning("Failed login for %s", data.get("email"))
        raise AuthenticationError("Invalid email or password")
    login_user(user, remember=bool(data.get("remember")))
    logger.info("User %s logged in", user.id)
    return jsonify(user.to_dict())


@bp.route("/logout", methods=["POST"])
@login_required
def logout():
    logout_user()
    return jsonify(message="Logged out")


@bp.route("/me", methods=["GET"])
@login_required
def me():
    return jsonify(current_user.to_dict())


@bp.route("/profile", methods=["PUT"])
@login_required
def update_profile():
    data = request_payload()
    user = current_user

    if "name" in data:
        name = clean_text(data.get("name"), "name")
        if not name:
            raise ValidationError("Name cannot be empty")
        user.name = name
    if data.get("email"):
        email = _normalise_email(data["email"])
        _ensure_email_free(email, user.id)
        user.email = email
    if data.get("password"):
        user.set_password(data["password"])

    avatar = handle_file_upload(request.files.get("avatar"), current_app.config["UPLOAD_FOLDER"])
    if avatar:
        user.avatar = avatar

    db.session.commit()
    return jsonify(user.to_dict())
