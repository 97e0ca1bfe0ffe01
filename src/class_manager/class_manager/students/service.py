from __future__ import annotations

import logging
from typing import Optional, Sequence

from werkzeug.security import generate_password_hash

from ..classes.repository import ClassRepository
from ..common.validators import require_id, require_non_empty
from ..core.catalog import Catalog
from ..core.constants import UQ_STUDENT_PHONE, UQ_USERNAME
from ..core.exceptions import DuplicateKeyError, NotFoundError, ValidationError
from ..tokens.service import IdentityTokenService
from .model import Student, StudentListRow
from .repository import StudentRepository

logger = logging.getLogger(__name__)

_PHONE_KEYS = (UQ_STUDENT_PHONE, UQ_USERNAME)


class StudentService:
    """Use cases: manage students (admin).

    Creating a student issues its QR token, enrolls it in its cohort class and
    opens a student login (username = phone, default password).
    """

    def __init__(
        self,
        students: StudentRepository,
        classes: ClassRepository,
        tokens: IdentityTokenService,
        catalog: Catalog,
        *,
        default_password: str,
    ):
        self._students = students
        self._classes = classes
        self._tokens = tokens
        self._catalog = catalog
        self._default_password = default_password

    def _validate_grade(self, grade: str) -> str:
        grade = require_non_empty(grade, "Grade")
        if not self._catalog.has_grade(grade):
            raise ValidationError("Invalid grade")
        return grade

    def _class_id_for(self, grade: str) -> int:
        cls = self._classes.get_by_name(grade)
        if not cls:
            raise NotFoundError(f"Class not configured for {grade}")
        return cls.class_id

    def list_students(self) -> Sequence[StudentListRow]:
        return self._students.list_all()

    def get_student(self, student_id) -> Student:
        student = self._students.get_by_id(require_id(student_id, "student_id"))
        if not student:
            raise NotFoundError("Student not found")
        return student

    def find_by_phone(self, phone: str) -> Optional[Student]:
        return self._students.get_by_phone((phone or "").strip())

    def create_student(self, *, name: str, phone: str, grade: str, is_free: bool = False) -> Student:
        name = require_non_empty(name, "Name")
        phone = require_non_empty(phone, "Phone")
        grade = self._validate_grade(grade)
        class_id = self._class_id_for(grade)
        password_hash = generate_password_hash(self._default_password)

        def _insert(token: str) -> int:
            return self._students.create(
                name=name,
                phone=phone,
                grade=grade,
                qr_token=token,
                is_free=bool(is_free),
                class_id=class_id,
                password_hash=password_hash,
            )

        try:
            student_id = self._tokens.issue_with(_insert)
        except DuplicateKeyError as e:
            if e.key in _PHONE_KEYS:
                raise ValidationError("Phone already exists") from e
            raise

        logger.info("Student %s created (%s)", student_id, grade)
        return self.get_student(student_id)

    def update_student(self, student_id, *, name: str, phone: str, grade: str, is_free: bool = False) -> Student:
        student_id = require_id(student_id, "student_id")
        name = require_non_empty(name, "Name")
        phone = require_non_empty(phone, "Phone")
        grade = self._validate_grade(grade)

        try:
            found = self._students.update(
                student_id=student_id,
                name=name,
                phone=phone,
                grade=grade,
                is_free=bool(is_free),
                class_id=self._class_id_for(grade),
                release_bookings=not self._catalog.can_book(grade),
            )
        except DuplicateKeyError as e:
            if e.key in _PHONE_KEYS:
                raise ValidationError("Phone already exists") from e
            raise
        if not found:
            raise NotFoundError("Student not found")
        logger.info("Student %s updated, grade %s", student_id, grade)
        return self.get_student(student_id)

    def delete_student(self, student_id) -> None:
        student_id = require_id(student_id, "student_id")
        if not self._students.delete(student_id):
            raise NotFoundError("Student not found")
        logger.info("Student %s deleted with payments, attendance and bookings", student_id)

    def current_token(self, student_id) -> str:
        return self._tokens.issue(require_id(student_id, "student_id"))

    def rotate_token(self, student_id) -> str:
        return self._tokens.rotate(require_id(student_id, "student_id"))
