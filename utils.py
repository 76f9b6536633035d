import math
import os
import uuid
from datetime import datetime, timezone

from flask import request
from werkzeug.utils import secure_filename

from errors import NotFoundError, ValidationError
from extensions import db

ALLOWED_EXTENSIONS = {'png', 'jpg', 'jpeg', 'gif', 'webp'}


def utcnow() -> datetime:
    """Naive UTC timestamp, the form stored in the database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def allowed_file(filename):
    """Check if the file has an allowed extension."""
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in ALLOWED_EXTENSIONS


def handle_file_upload(file, upload_folder):
    """Save an uploaded image and return its public URL, or None if no file was sent."""
    if not file or not file.filename:
        return None
    if not allowed_file(file.filename):
        raise ValidationError('Invalid file format. Allowed: ' + ', '.join(sorted(ALLOWED_EXTENSIONS)))
    filename = f"{uuid.uuid4().hex[:12]}_{secure_filename(file.filename)}"
    os.makedirs(upload_folder, exist_ok=True)
    file.save(os.path.join(upload_folder, filename))
    return f"/uploads/{filename}"


def request_payload() -> dict:
    """JSON body or form fields, whichever the client sent."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def isoformat(value):
    return value.isoformat() if value is not None else None


def parse_datetime(value, field: str):
    """Parse an ISO date/datetime string into a naive UTC datetime."""
    if value in (None, ''):
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).strip().replace('Z', '+00:00'))
        except ValueError:
            raise ValidationError(f"Invalid date for '{field}': {value}")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_float(value, field: str):
    if value in (None, ''):
        return None
    try:
        number = float(str(value).replace(',', '.'))
    except (TypeError, ValueError):
        raise ValidationError(f"'{field}' must be a number")
    if not math.isfinite(number):
        raise ValidationError(f"'{field}' must be a finite number")
    return number


def parse_id(value, field: str):
    """Reference ids arrive as ints or numeric strings; blank means 'unset'."""
    if value in (None, ''):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid id for '{field}': {value}")


def clean_text(value, field: str) -> str:
    """Stripped string value; missing means empty, anything but a string is rejected."""
    if value is None:
        return ''
    if not isinstance(value, str):
        raise ValidationError(f"'{field}' must be a string")
    return value.strip()


def require_fields(data: dict, *fields: str) -> None:
    missing = [f for f in fields if data.get(f) in (None, '') or (isinstance(data.get(f), str) and not data.get(f).strip())]
    if missing:
        raise ValidationError('Missing required field(s): ' + ', '.join(missing))


def get_or_404(model, object_id, label: str | None = None):
    obj = db.session.get(model, object_id) if object_id is not None else None
    if obj is None:
        raise NotFoundError(f"{label or model.__name__} not found")
    return obj
