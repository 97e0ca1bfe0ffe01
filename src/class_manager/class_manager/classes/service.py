from __future__ import annotations

import logging
from typing import Sequence

from ..common.validators import require_id, require_non_negative_amount
from ..core.exceptions import NotFoundError
from ..students.repository import StudentRepository
from .model import ClassGroup, EnrolledStudent
from .repository import ClassRepository

logger = logging.getLogger(__name__)


class ClassService:
    """Use cases: class fees and enrollments (admin)."""

    def __init__(self, classes: ClassRepository, students: StudentRepository):
        self._classes = classes
        self._students = students

    def list_classes(self) -> Sequence[ClassGroup]:
        return self._classes.list_all()

    def get_class(self, class_id: int) -> ClassGroup:
        cls = self._classes.get_by_id(require_id(class_id, "class_id"))
        if not cls:
            raise NotFoundError("Class not found")
        return cls

    def class_for_grade(self, grade: str) -> ClassGroup:
        cls = self._classes.get_by_name(grade)
        if not cls:
            raise NotFoundError(f"Class not configured for {grade}")
        return cls

    def update_fee(self, class_id: int, monthly_fee) -> ClassGroup:
        class_id = require_id(class_id, "class_id")
        fee = require_non_negative_amount(monthly_fee, "monthly fee")
        if not self._classes.update_fee(class_id, fee):
            raise NotFoundError("Class not found")
        logger.info("Monthly fee for class %s set to %s", class_id, fee)
        return self.get_class(class_id)

    def _require_pair(self, student_id, class_id) -> tuple[int, int]:
        student_id = require_id(student_id, "student_id")
        class_id = require_id(class_id, "class_id")
        if not self._students.get_by_id(student_id):
            raise NotFoundError("Student not found")
        self.get_class(class_id)
        return student_id, class_id

    def enroll(self, *, student_id, class_id) -> bool:
        student_id, class_id = self._require_pair(student_id, class_id)
        return self._classes.enroll(student_id=student_id, class_id=class_id)

    def unenroll(self, *, student_id, class_id) -> bool:
        return self._classes.unenroll(
            student_id=require_id(student_id, "student_id"),
            class_id=require_id(class_id, "class_id"),
        )

    def class_students(self, class_id) -> Sequence[EnrolledStudent]:
        cls = self.get_class(class_id)
        return self._classes.list_students(cls.class_id)
