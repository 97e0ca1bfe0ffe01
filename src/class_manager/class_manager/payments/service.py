from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence

from ..classes.repository import ClassRepository
from ..common.datetime_utils import month_key, require_month, today_local
from ..common.validators import require_id, require_positive_amount
from ..core.enums import PaymentMethod
from ..core.exceptions import NotFoundError, ValidationError
from ..students.repository import StudentRepository
from .model import FinanceRow, Payment, PaymentExportRow, UnpaidRow
from .repository import PaymentRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FinanceReport:
    month: str
    rows: Sequence[FinanceRow]
    total: int


@dataclass(frozen=True)
class PaymentStatus:
    paid: bool
    fee_exempt: bool
    amount_due: int
    payment: Optional[Payment] = None


class PaymentService:
    """Use cases: monthly payments, unpaid list and finance summary."""

    def __init__(self, payments: PaymentRepository, students: StudentRepository, classes: ClassRepository):
        self._payments = payments
        self._students = students
        self._classes = classes

    def _month_or_current(self, month: Optional[str], today: Optional[date]) -> str:
        if month:
            return require_month(month)
        return month_key(today or today_local())

    def record_payment(
        self,
        *,
        student_id,
        class_id,
        amount,
        month: Optional[str] = None,
        method: Optional[str] = None,
        today: Optional[date] = None,
    ) -> Payment:
        student_id = require_id(student_id, "student_id")
        class_id = require_id(class_id, "class_id")
        month = self._month_or_current(month, today)
        amount = require_positive_amount(amount, "Amount")
        method = (method or PaymentMethod.CASH.value).strip().lower()
        try:
            method = PaymentMethod(method).value
        except ValueError:
            raise ValidationError("Invalid payment method")

        if not self._students.get_by_id(student_id):
            raise NotFoundError("Student not found")
        if not self._classes.get_by_id(class_id):
            raise NotFoundError("Class not found")

        self._payments.upsert(student_id=student_id, class_id=class_id, month=month, amount=amount, method=method)
        logger.info("Payment recorded: student=%s class=%s month=%s amount=%s", student_id, class_id, month, amount)

        payment = self._payments.get(student_id=student_id, class_id=class_id, month=month)
        if payment is None:
            # Student or class was deleted between the write and the read-back.
            raise NotFoundError("Payment not found")
        return payment

    def status_for(self, *, student_id: int, class_id: int, month: str, monthly_fee: int, fee_exempt: bool) -> PaymentStatus:
        payment = self._payments.get(student_id=student_id, class_id=class_id, month=month)
        paid = payment is not None
        amount_due = 0 if (paid or fee_exempt) else int(monthly_fee)
        return PaymentStatus(paid=paid, fee_exempt=fee_exempt, amount_due=amount_due, payment=payment)

    def unpaid(self, *, month: Optional[str] = None, grade: Optional[str] = None, today: Optional[date] = None):
        month = self._month_or_current(month, today)
        rows: Sequence[UnpaidRow] = self._payments.list_unpaid(month=month, class_name=(grade or None))
        return month, rows

    def finance(self, *, month: Optional[str] = None, today: Optional[date] = None) -> FinanceReport:
        month = self._month_or_current(month, today)
        rows = self._payments.finance(month=month)
        return FinanceReport(month=month, rows=rows, total=sum(r.total for r in rows))

    def export_rows(self, *, month: Optional[str] = None) -> Sequence[PaymentExportRow]:
        return self._payments.export_rows(month=require_month(month) if month else None)
