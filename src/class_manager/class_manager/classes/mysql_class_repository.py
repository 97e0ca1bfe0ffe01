from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import ClassGroup, EnrolledStudent
from .repository import ClassRepository


def _to_class(r: dict) -> ClassGroup:
    return ClassGroup(class_id=int(r["class_id"]), name=r["name"], monthly_fee=int(r["monthly_fee"]))


class MySQLClassRepository(ClassRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[ClassGroup]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT class_id, name, monthly_fee FROM classes ORDER BY class_id")
            return [_to_class(r) for r in fetchall(cur)]

    def get_by_id(self, class_id: int) -> Optional[ClassGroup]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT class_id, name, monthly_fee FROM classes WHERE class_id=%s", (int(class_id),))
            r = fetchone(cur)
            return _to_class(r) if r else None

    def get_by_name(self, name: str) -> Optional[ClassGroup]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT class_id, name, monthly_fee FROM classes WHERE name=%s", (name,))
            r = fetchone(cur)
            return _to_class(r) if r else None

    def update_fee(self, class_id: int, monthly_fee: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE classes SET monthly_fee=%s WHERE class_id=%s",
                (int(monthly_fee), int(class_id)),
            )
            cur.execute("SELECT 1 AS found FROM classes WHERE class_id=%s", (int(class_id),))
            return fetchone(cur) is not None

    def enroll(self, *, student_id: int, class_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO enrollments(student_id, class_id) VALUES(%s,%s)
                ON DUPLICATE KEY UPDATE class_id = class_id
                """,
                (int(student_id), int(class_id)),
            )
            # 1 = inserted, 0 = already there (ON DUPLICATE KEY no-op)
            return cur.rowcount == 1

    def unenroll(self, *, student_id: int, class_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM enrollments WHERE student_id=%s AND class_id=%s",
                (int(student_id), int(class_id)),
            )
            return cur.rowcount > 0

    def is_enrolled(self, *, student_id: int, class_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS found FROM enrollments WHERE student_id=%s AND class_id=%s",
                (int(student_id), int(class_id)),
            )
            return fetchone(cur) is not None

    def list_students(self, class_id: int) -> Sequence[EnrolledStudent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT s.student_id, s.name, s.phone, s.grade, s.is_free
                FROM enrollments e
                JOIN students s ON s.student_id = e.student_id
                WHERE e.class_id=%s
                ORDER BY s.name
                """,
                (int(class_id),),
            )
            return [
                EnrolledStudent(
                    student_id=int(r["student_id"]),
                    name=r["name"],
                    phone=r["phone"],
                    grade=r["grade"],
                    is_free=bool(r.get("is_free")),
                )
                for r in fetchall(cur)
            ]
