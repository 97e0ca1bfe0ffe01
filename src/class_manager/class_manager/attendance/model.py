from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class RosterRow:
    """Read-model: an enrolled student and whether they were present on a date."""

    student_id: int
    name: str
    phone: str
    grade: str
    is_free: bool
    present: bool


@dataclass(frozen=True)
class ReconcileResult:
    """Outcome of a scan/manual mark for one student-class-day.

    ``attendance_marked`` is True only for the call that created the row;
    repeats report ``attendance_was_already_marked`` instead of failing.
    """

    student_id: int
    student_name: str
    class_id: int
    class_name: str
    date: date
    month: str
    attendance_marked: bool
    paid: bool
    fee_exempt: bool
    amount_due: int

    @property
    def attendance_was_already_marked(self) -> bool:
        return not self.attendance_marked

    def to_dict(self) -> dict:
        return {
            "studentId": self.student_id,
            "studentName": self.student_name,
            "classId": self.class_id,
            "className": self.class_name,
            "date": self.date.isoformat(),
            "month": self.month,
            "attendanceMarked": self.attendance_marked,
            "alreadyMarked": self.attendance_was_already_marked,
            "paid": self.paid,
            "feeExempt": self.fee_exempt,
            "amountDue": self.amount_due,
        }
