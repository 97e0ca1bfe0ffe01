from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: a login account.

    Student accounts carry the linked student's name and grade so the
    session can be built without a second lookup.
    """

    user_id: int
    username: str
    password_hash: str
    role: Role
    student_id: Optional[int] = None
    student_name: Optional[str] = None
    grade: Optional[str] = None
    is_active: bool = True
