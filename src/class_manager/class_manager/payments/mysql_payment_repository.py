from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import FinanceRow, Payment, PaymentExportRow, UnpaidRow
from .repository import PaymentRepository


class MySQLPaymentRepository(PaymentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, *, student_id: int, class_id: int, month: str) -> Optional[Payment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT payment_id, student_id, class_id, month, amount, method, created_at
                FROM payments
                WHERE student_id=%s AND class_id=%s AND month=%s
                """,
                (int(student_id), int(class_id), month),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Payment(
                payment_id=int(r["payment_id"]),
                student_id=int(r["student_id"]),
                class_id=int(r["class_id"]),
                month=r["month"],
                amount=int(r["amount"]),
                method=r["method"],
                created_at=r.get("created_at"),
            )

    def upsert(self, *, student_id: int, class_id: int, month: str, amount: int, method: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO payments(student_id, class_id, month, amount, method)
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    amount = VALUES(amount),
                    method = VALUES(method),
                    created_at = CURRENT_TIMESTAMP
                """,
                (int(student_id), int(class_id), month, int(amount), method),
            )

    def list_unpaid(self, *, month: str, class_name: Optional[str] = None) -> Sequence[UnpaidRow]:
        clauses = ["s.is_free = 0", "p.payment_id IS NULL"]
        params: list[object] = [month]
        if class_name:
            clauses.append("c.name=%s")
            params.append(class_name)
        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT s.student_id, s.name AS student_name, s.phone, s.grade,
                       c.class_id, c.name AS class_name, c.monthly_fee
                FROM enrollments e
                JOIN students s ON s.student_id = e.student_id
                JOIN classes c ON c.class_id = e.class_id
                LEFT JOIN payments p
                  ON p.student_id = e.student_id AND p.class_id = e.class_id AND p.month = %s
                WHERE {where}
                ORDER BY c.class_id, s.name
                """,
                tuple(params),
            )
            return [
                UnpaidRow(
                    student_id=int(r["student_id"]),
                    student_name=r["student_name"],
                    phone=r["phone"],
                    grade=r["grade"],
                    class_id=int(r["class_id"]),
                    class_name=r["class_name"],
                    monthly_fee=int(r["monthly_fee"]),
                )
                for r in fetchall(cur)
            ]

    def finance(self, *, month: str) -> Sequence[FinanceRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT c.class_id, c.name AS class_name,
                       COUNT(p.payment_id) AS payments,
                       COALESCE(SUM(p.amount), 0) AS total
                FROM classes c
                LEFT JOIN payments p ON p.class_id = c.class_id AND p.month = %s
                GROUP BY c.class_id, c.name
                ORDER BY c.class_id
                """,
                (month,),
            )
            return [
                FinanceRow(
                    class_id=int(r["class_id"]),
                    class_name=r["class_name"],
                    payments=int(r["payments"]),
                    total=int(r["total"]),
                )
                for r in fetchall(cur)
            ]

    def export_rows(self, *, month: Optional[str] = None) -> Sequence[PaymentExportRow]:
        where = "WHERE p.month=%s" if month else ""
        params = (month,) if month else ()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT p.month, s.name AS student_name, s.phone, c.name AS class_name,
                       p.amount, p.method, p.created_at
                FROM payments p
                JOIN students s ON s.student_id = p.student_id
                JOIN classes c ON c.class_id = p.class_id
                {where}
                ORDER BY p.month DESC, c.name, s.name
                """,
                params,
            )
            return [
                PaymentExportRow(
                    month=r["month"],
                    student_name=r["student_name"],
                    phone=r["phone"],
                    class_name=r["class_name"],
                    amount=int(r["amount"]),
                    method=r["method"],
                    created_at=r.get("created_at"),
                )
                for r in fetchall(cur)
            ]
