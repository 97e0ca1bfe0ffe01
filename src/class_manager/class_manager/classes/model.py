from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ClassGroup:
    """A fee-bearing class; its name is the cohort/grade label."""

    class_id: int
    name: str
    monthly_fee: int


@dataclass(frozen=True)
class EnrolledStudent:
    student_id: int
    name: str
    phone: str
    grade: str
    is_free: bool
