from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Payment:
    """One payment per (student, class, month); re-paying replaces amount/method."""

    payment_id: int
    student_id: int
    class_id: int
    month: str
    amount: int
    method: str
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class UnpaidRow:
    student_id: int
    student_name: str
    phone: str
    grade: str
    class_id: int
    class_name: str
    monthly_fee: int


@dataclass(frozen=True)
class FinanceRow:
    class_id: int
    class_name: str
    payments: int
    total: int


@dataclass(frozen=True)
class PaymentExportRow:
    month: str
    student_name: str
    phone: str
    class_name: str
    amount: int
    method: str
    created_at: Optional[datetime] = None
