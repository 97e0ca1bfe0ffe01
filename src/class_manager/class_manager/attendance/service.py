from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..classes.model import ClassGroup
from ..classes.repository import ClassRepository
from ..common.datetime_utils import month_key, today_local
from ..common.validators import require_id
from ..core.exceptions import NotFoundError, ValidationError
from ..payments.service import PaymentService
from ..students.model import Student
from ..students.repository import StudentRepository
from ..tokens.service import IdentityTokenService
from .model import ReconcileResult, RosterRow
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """Scan reconciliation and manual attendance.

    A scan resolves the token to a student, marks attendance for the student's
    class on that day (idempotent) and reports the month's payment state. The
    attendance insert and the payment read are independent statements.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        students: StudentRepository,
        classes: ClassRepository,
        payments: PaymentService,
        tokens: IdentityTokenService,
    ):
        self._attendance = attendance
        self._students = students
        self._classes = classes
        self._payments = payments
        self._tokens = tokens

    def _resolve_class(self, student: Student, class_id: Optional[int]) -> ClassGroup:
        if class_id is not None:
            cls = self._classes.get_by_id(int(class_id))
            if not cls:
                raise NotFoundError("Class not found")
            return cls
        cls = self._classes.get_by_name(student.grade)
        if not cls:
            raise NotFoundError(f"Class not configured for {student.grade}")
        return cls

    def reconcile(self, student_id: int, on: date, *, class_id: Optional[int] = None) -> ReconcileResult:
        student = self._students.get_by_id(int(student_id))
        if not student:
            raise NotFoundError("Student not found")
        cls = self._resolve_class(student, class_id)

        inserted = self._attendance.mark(student_id=student.student_id, class_id=cls.class_id, on=on)

        month = month_key(on)
        status = self._payments.status_for(
            student_id=student.student_id,
            class_id=cls.class_id,
            month=month,
            monthly_fee=cls.monthly_fee,
            fee_exempt=student.is_free,
        )

        logger.info(
            "Attendance %s: student=%s class=%s date=%s paid=%s",
            "marked" if inserted else "already marked",
            student.student_id,
            cls.class_id,
            on,
            status.paid,
        )
        return ReconcileResult(
            student_id=student.student_id,
            student_name=student.name,
            class_id=cls.class_id,
            class_name=cls.name,
            date=on,
            month=month,
            attendance_marked=inserted,
            paid=status.paid,
            fee_exempt=status.fee_exempt,
            amount_due=status.amount_due,
        )

    def scan(self, token: str, *, on: Optional[date] = None) -> ReconcileResult:
        student_id = self._tokens.verify(token)
        return self.reconcile(student_id, on or today_local())

    def mark_manual(
        self,
        *,
        student_id=None,
        phone: Optional[str] = None,
        class_id=None,
        on: Optional[date] = None,
    ) -> ReconcileResult:
        """Admin fallback when a card is not at hand: find the student by id or phone."""
        if student_id not in (None, ""):
            student = self._students.get_by_id(require_id(student_id, "student_id"))
        elif phone and phone.strip():
            student = self._students.get_by_phone(phone.strip())
        else:
            raise ValidationError("student_id or phone required")
        if not student:
            raise NotFoundError("Student not found")

        resolved_class = require_id(class_id, "class_id") if class_id not in (None, "") else None
        return self.reconcile(student.student_id, on or today_local(), class_id=resolved_class)

    def set_presence(self, *, student_id, class_id, on: date, present: bool) -> bool:
        """Toggle from the roster; returns whether anything changed."""
        student_id = require_id(student_id, "student_id")
        class_id = require_id(class_id, "class_id")
        if present:
            if not self._students.get_by_id(student_id):
                raise NotFoundError("Student not found")
            if not self._classes.get_by_id(class_id):
                raise NotFoundError("Class not found")
            return self._attendance.mark(student_id=student_id, class_id=class_id, on=on)
        return self._attendance.unmark(student_id=student_id, class_id=class_id, on=on)

    def roster(self, *, class_id, on: date) -> Sequence[RosterRow]:
        class_id = require_id(class_id, "class_id")
        if not self._classes.get_by_id(class_id):
            raise NotFoundError("Class not found")
        return self._attendance.roster(class_id=class_id, on=on)

    def count_for_date(self, on: date) -> int:
        return self._attendance.count_for_date(on)
