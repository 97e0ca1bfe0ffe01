from __future__ import annotations

from datetime import date
from typing import Protocol, Sequence

from .model import RosterRow


class AttendanceRepository(Protocol):
    def mark(self, *, student_id: int, class_id: int, on: date) -> bool:
        """Insert the (student, class, date) row.

        Returns False when the row already exists; a concurrent duplicate is
        resolved by the unique key and is not an error.
        """

        raise NotImplementedError

    def unmark(self, *, student_id: int, class_id: int, on: date) -> bool:
        raise NotImplementedError

    def roster(self, *, class_id: int, on: date) -> Sequence[RosterRow]:
        raise NotImplementedError

    def count_for_date(self, on: date) -> int:
        raise NotImplementedError
