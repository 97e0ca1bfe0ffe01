from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Student:
    """Domain entity: a student and their current identity token."""

    student_id: int
    name: str
    phone: str
    grade: str
    qr_token: str
    is_free: bool = False
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class StudentListRow:
    """Read-model for the admin student table."""

    student_id: int
    name: str
    phone: str
    grade: str
    is_free: bool
    classes: str
    created_at: Optional[datetime] = None
