from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import FinanceRow, Payment, PaymentExportRow, UnpaidRow


class PaymentRepository(Protocol):
    def get(self, *, student_id: int, class_id: int, month: str) -> Optional[Payment]:
        raise NotImplementedError

    def upsert(self, *, student_id: int, class_id: int, month: str, amount: int, method: str) -> None:
        """Insert or replace amount/method as one conditional write."""

        raise NotImplementedError

    def list_unpaid(self, *, month: str, class_name: Optional[str] = None) -> Sequence[UnpaidRow]:
        raise NotImplementedError

    def finance(self, *, month: str) -> Sequence[FinanceRow]:
        raise NotImplementedError

    def export_rows(self, *, month: Optional[str] = None) -> Sequence[PaymentExportRow]:
        raise NotImplementedError
