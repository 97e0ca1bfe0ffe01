from __future__ import annotations

import logging
from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from enum import Enum
from functools import wraps

from flask import jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    IneligibleError,
    InvalidSeatError,
    InvalidTokenError,
    NotFoundError,
    SeatTakenError,
    TokenIssuanceError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_STATUS = (
    (SeatTakenError, 409),
    (NotFoundError, 404),
    (IneligibleError, 403),
    (AuthorizationError, 403),
    (AuthenticationError, 401),
    (InvalidSeatError, 400),
    (InvalidTokenError, 400),
    (ValidationError, 400),
    (TokenIssuanceError, 500),
)


def status_for(err: DomainError) -> int:
    for exc_type, status in _STATUS:
        if isinstance(err, exc_type):
            return status
    return 400


def json_error(message: str, status: int):
    return jsonify({"error": message}), status


def json_errors(view):
    """Turn domain errors into ``{"error": ...}`` responses; log anything else."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except TokenIssuanceError as e:
            logger.critical("Token issuance failed on %s %s: %s", request.method, request.path, e)
            return json_error(str(e), 500)
        except DomainError as e:
            return json_error(str(e), status_for(e))
        except Exception:
            logger.exception("Unhandled error on %s %s", request.method, request.path)
            return json_error("Server error. Please try again.", 500)

    return wrapper


def body() -> dict:
    """JSON body, falling back to form fields."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def as_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in {"1", "true", "yes", "on"}


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return json_error("Unauthorized", 401)
        return view(*args, **kwargs)

    return wrapper


def _role_required(role: Role, message: str):
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return json_error("Unauthorized", 401)
            if session.get("role") != role.value:
                return json_error(message, 403)
            return view(*args, **kwargs)

        return wrapper

    return decorator


admin_required = _role_required(Role.ADMIN, "Admin only")
student_required = _role_required(Role.STUDENT, "Student only")


def serialize(obj):
    """dataclasses/dates -> JSON-ready values (ISO dates, enum values)."""
    if is_dataclass(obj) and not isinstance(obj, type):
        return {k: serialize(v) for k, v in asdict(obj).items()}
    if isinstance(obj, dict):
        return {k: serialize(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [serialize(v) for v in obj]
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    return obj
