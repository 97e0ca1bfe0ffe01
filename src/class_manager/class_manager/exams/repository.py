from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Booking, ExamSlot, SeatLayout, SlotSummary, StudentBooking


class ExamRepository(Protocol):
    def list_slots(self) -> Sequence[SlotSummary]:
        raise NotImplementedError

    def get_slot(self, slot_id: int) -> Optional[ExamSlot]:
        raise NotImplementedError

    def move_booking(self, *, slot_id: int, student_id: int, bench: int, position: int) -> Booking:
        """Release the student's seat in the slot and take the new one, atomically.

        Raises `SeatTakenError` (and keeps the previous seat) when the target
        seat is held by someone else.
        """

        raise NotImplementedError

    def cancel(self, *, slot_id: int, student_id: int) -> bool:
        raise NotImplementedError

    def layout(self, slot_id: int) -> Optional[SeatLayout]:
        """Slot plus all its bookings, read from one snapshot."""

        raise NotImplementedError

    def bookings_for_student(self, student_id: int) -> Sequence[StudentBooking]:
        raise NotImplementedError

    def release(self, booking_id: int) -> bool:
        raise NotImplementedError
