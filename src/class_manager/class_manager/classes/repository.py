from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import ClassGroup, EnrolledStudent


class ClassRepository(Protocol):
    def list_all(self) -> Sequence[ClassGroup]:
        raise NotImplementedError

    def get_by_id(self, class_id: int) -> Optional[ClassGroup]:
        raise NotImplementedError

    def get_by_name(self, name: str) -> Optional[ClassGroup]:
        raise NotImplementedError

    def update_fee(self, class_id: int, monthly_fee: int) -> bool:
        raise NotImplementedError

    def enroll(self, *, student_id: int, class_id: int) -> bool:
        """Idempotent; returns False when the enrollment already existed."""

        raise NotImplementedError

    def unenroll(self, *, student_id: int, class_id: int) -> bool:
        raise NotImplementedError

    def is_enrolled(self, *, student_id: int, class_id: int) -> bool:
        raise NotImplementedError

    def list_students(self, class_id: int) -> Sequence[EnrolledStudent]:
        raise NotImplementedError
