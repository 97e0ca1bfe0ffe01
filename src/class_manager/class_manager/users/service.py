from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import require_id, require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, NotFoundError
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    user_id: int
    username: str
    role: Role
    student_id: Optional[int] = None
    name: Optional[str] = None
    grade: Optional[str] = None


class AuthService:
    """Use case: authenticate admin/student logins."""

    def __init__(self, users: UserRepository, *, default_student_password: str):
        self._users = users
        self._default_student_password = default_student_password

    def authenticate(self, username: str, password: str, role: Optional[Role] = None) -> SessionUser:
        username = require_non_empty(username, "Username")
        user = self._users.get_by_username(username)
        if not user or not user.is_active:
            raise AuthenticationError("Invalid credentials")
        if role is not None and user.role != role:
            raise AuthenticationError("Role does not match this user")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False
        if not ok:
            raise AuthenticationError("Invalid credentials")

        return SessionUser(
            user_id=user.user_id,
            username=user.username,
            role=user.role,
            student_id=user.student_id,
            name=user.student_name if user.role == Role.STUDENT else user.username,
            grade=user.grade,
        )

    def reset_student_password(self, student_id) -> None:
        student_id = require_id(student_id, "student_id")
        if not self._users.set_student_password(student_id, generate_password_hash(self._default_student_password)):
            raise NotFoundError("Login not found")
        logger.info("Password reset to default for student %s", student_id)
