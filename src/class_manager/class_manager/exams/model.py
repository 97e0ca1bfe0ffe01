from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.constants import SEAT_POSITIONS_PER_BENCH


@dataclass(frozen=True)
class ExamSlot:
    """A fixed exam session with ``capacity`` benches of four seats each."""

    slot_id: int
    label: str
    start_time: datetime
    end_time: datetime
    capacity: int


@dataclass(frozen=True)
class SlotSummary:
    slot: ExamSlot
    booked_count: int

    @property
    def seats_total(self) -> int:
        return self.slot.capacity * SEAT_POSITIONS_PER_BENCH


@dataclass(frozen=True)
class Booking:
    booking_id: int
    slot_id: int
    bench: int
    position: int
    student_id: int
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class LayoutEntry:
    bench: int
    position: int
    student_id: int
    display_name: str
    cohort: str
    booking_id: int = 0
    phone: str = ""


@dataclass(frozen=True)
class SeatLayout:
    slot: ExamSlot
    bookings: tuple[LayoutEntry, ...] = field(default_factory=tuple)
    positions_per_bench: int = SEAT_POSITIONS_PER_BENCH

    @property
    def capacity(self) -> int:
        return self.slot.capacity

    def occupant(self, bench: int, position: int) -> Optional[LayoutEntry]:
        for e in self.bookings:
            if e.bench == bench and e.position == position:
                return e
        return None


@dataclass(frozen=True)
class StudentBooking:
    booking: Booking
    label: str
