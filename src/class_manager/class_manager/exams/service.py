from __future__ import annotations

import logging
from typing import Sequence

from ..common.validators import require_id
from ..core.catalog import Catalog
from ..core.constants import SEAT_POSITIONS_PER_BENCH
from ..core.exceptions import IneligibleError, InvalidSeatError, NotFoundError, SeatTakenError
from ..students.repository import StudentRepository
from .model import Booking, SeatLayout, SlotSummary, StudentBooking
from .repository import ExamRepository

logger = logging.getLogger(__name__)


def _seat_coordinate(value, field_name: str) -> int:
    if isinstance(value, bool):
        raise InvalidSeatError(f"Invalid {field_name}")
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise InvalidSeatError(f"Invalid {field_name}")


class SeatAllocationService:
    """Exam seat booking.

    Each (slot, student) is either unbooked or holds exactly one
    (bench, position). Booking again in the same slot moves the student;
    the move is one store transaction and the seat's unique key decides
    races (first committed writer wins, the loser keeps their old seat).
    """

    def __init__(self, exams: ExamRepository, students: StudentRepository, catalog: Catalog):
        self._exams = exams
        self._students = students
        self._catalog = catalog

    def list_slots(self) -> Sequence[SlotSummary]:
        return self._exams.list_slots()

    def book(self, student_id, slot_id, bench, position) -> Booking:
        student = self._students.get_by_id(require_id(student_id, "student_id"))
        if not student:
            raise NotFoundError("Student not found")
        if not self._catalog.can_book(student.grade):
            allowed = "/".join(sorted(self._catalog.booking_cohorts)) or "no"
            raise IneligibleError(f"Only {allowed} students can book exam seats")

        slot = self._exams.get_slot(require_id(slot_id, "slot_id"))
        if not slot:
            raise NotFoundError("Exam slot not found")

        bench = _seat_coordinate(bench, "bench")
        position = _seat_coordinate(position, "position")
        if not 1 <= bench <= slot.capacity:
            raise InvalidSeatError(f"Bench must be between 1 and {slot.capacity}")
        if not 1 <= position <= SEAT_POSITIONS_PER_BENCH:
            raise InvalidSeatError(f"Seat position must be between 1 and {SEAT_POSITIONS_PER_BENCH}")

        try:
            booking = self._exams.move_booking(
                slot_id=slot.slot_id,
                student_id=student.student_id,
                bench=bench,
                position=position,
            )
        except SeatTakenError:
            logger.warning(
                "Seat race lost: student=%s slot=%s bench=%s position=%s",
                student.student_id,
                slot.slot_id,
                bench,
                position,
            )
            raise

        logger.info(
            "Seat booked: student=%s slot=%s bench=%s position=%s",
            student.student_id,
            slot.slot_id,
            bench,
            position,
        )
        return booking

    def cancel(self, student_id, slot_id) -> bool:
        removed = self._exams.cancel(
            slot_id=require_id(slot_id, "slot_id"),
            student_id=require_id(student_id, "student_id"),
        )
        if removed:
            logger.info("Seat released: student=%s slot=%s", student_id, slot_id)
        return removed

    def cancel_all(self, student_id) -> int:
        """Release every booking the student holds (student dashboard 'cancel')."""
        count = 0
        for sb in self.bookings_for(student_id):
            if self._exams.cancel(slot_id=sb.booking.slot_id, student_id=sb.booking.student_id):
                count += 1
        return count

    def layout(self, slot_id) -> SeatLayout:
        layout = self._exams.layout(require_id(slot_id, "slot_id"))
        if not layout:
            raise NotFoundError("Exam slot not found")
        return layout

    def bookings_for(self, student_id) -> Sequence[StudentBooking]:
        return self._exams.bookings_for_student(require_id(student_id, "student_id"))

    def admin_release(self, booking_id) -> None:
        booking_id = require_id(booking_id, "booking_id")
        if not self._exams.release(booking_id):
            raise NotFoundError("Booking not found")
        logger.info("Booking %s released by admin", booking_id)
