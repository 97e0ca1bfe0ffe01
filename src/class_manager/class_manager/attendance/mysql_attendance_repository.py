from __future__ import annotations

import logging
from datetime import date
from typing import Sequence

import mysql.connector

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import RosterRow
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def mark(self, *, student_id: int, class_id: int, on: date) -> bool:
        # Plain INSERT (not INSERT IGNORE) so FK failures still surface.
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "INSERT INTO attendance(student_id, class_id, date) VALUES(%s,%s,%s)",
                    (int(student_id), int(class_id), on),
                )
                return True
        except mysql.connector.IntegrityError as e:
            if not is_duplicate_key(e):
                raise
            logger.debug("Attendance already marked: student=%s class=%s date=%s", student_id, class_id, on)
            return False

    def unmark(self, *, student_id: int, class_id: int, on: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM attendance WHERE student_id=%s AND class_id=%s AND date=%s",
                (int(student_id), int(class_id), on),
            )
            return cur.rowcount > 0

    def roster(self, *, class_id: int, on: date) -> Sequence[RosterRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT s.student_id, s.name, s.phone, s.grade, s.is_free,
                       CASE WHEN a.attendance_id IS NULL THEN 0 ELSE 1 END AS present
                FROM enrollments e
                JOIN students s ON s.student_id = e.student_id
                LEFT JOIN attendance a
                  ON a.student_id = s.student_id AND a.class_id = e.class_id AND a.date = %s
                WHERE e.class_id = %s
                ORDER BY s.name
                """,
                (on, int(class_id)),
            )
            return [
                RosterRow(
                    student_id=int(r["student_id"]),
                    name=r["name"],
                    phone=r["phone"],
                    grade=r["grade"],
                    is_free=bool(r.get("is_free")),
                    present=bool(r["present"]),
                )
                for r in fetchall(cur)
            ]

    def count_for_date(self, on: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS c FROM attendance WHERE date=%s", (on,))
            r = fetchone(cur)
            return int(r["c"]) if r else 0
