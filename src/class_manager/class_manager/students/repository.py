from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Student, StudentListRow


class StudentRepository(Protocol):
    """Repository interface for students.

    Writes that hit a unique index (phone, qr_token, login username) raise
    `DuplicateKeyError` carrying the index name.
    """

    def get_by_id(self, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def get_by_phone(self, phone: str) -> Optional[Student]:
        raise NotImplementedError

    def get_by_token(self, qr_token: str) -> Optional[Student]:
        raise NotImplementedError

    def list_all(self) -> Sequence[StudentListRow]:
        raise NotImplementedError

    def create(
        self,
        *,
        name: str,
        phone: str,
        grade: str,
        qr_token: str,
        is_free: bool,
        class_id: int,
        password_hash: str,
    ) -> int:
        """Insert the student, its cohort enrollment and its login in one transaction."""

        raise NotImplementedError

    def update(
        self,
        *,
        student_id: int,
        name: str,
        phone: str,
        grade: str,
        is_free: bool,
        class_id: int,
        release_bookings: bool = False,
    ) -> bool:
        """Rewrite the student. On a grade change the old grade's enrollment is
        swapped for `class_id`, and `release_bookings` drops every exam booking,
        all in one transaction.
        """

        raise NotImplementedError

    def delete(self, student_id: int) -> bool:
        raise NotImplementedError

    def replace_token(self, student_id: int, qr_token: str) -> bool:
        """Swap the student's token in a single statement."""

        raise NotImplementedError
