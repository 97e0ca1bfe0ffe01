from __future__ import annotations

from typing import Optional, Protocol

from .model import User


class UserRepository(Protocol):
    def get_by_username(self, username: str) -> Optional[User]:
        raise NotImplementedError

    def set_student_password(self, student_id: int, password_hash: str) -> bool:
        raise NotImplementedError
