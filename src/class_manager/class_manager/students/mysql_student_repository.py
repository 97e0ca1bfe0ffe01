from __future__ import annotations

from typing import Optional, Sequence

import mysql.connector

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_duplicate_key_error, db_cursor, fetchall, fetchone, is_duplicate_key
from .model import Student, StudentListRow
from .repository import StudentRepository

_STUDENT_COLUMNS = "student_id, name, phone, grade, qr_token, is_free, created_at"


def _to_student(r: dict) -> Student:
    return Student(
        student_id=int(r["student_id"]),
        name=r["name"],
        phone=r["phone"],
        grade=r["grade"],
        qr_token=r["qr_token"],
        is_free=bool(r.get("is_free")),
        created_at=r.get("created_at"),
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_one(self, where: str, value) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_STUDENT_COLUMNS} FROM students WHERE {where}=%s", (value,))
            r = fetchone(cur)
            return _to_student(r) if r else None

    def get_by_id(self, student_id: int) -> Optional[Student]:
        return self._get_one("student_id", int(student_id))

    def get_by_phone(self, phone: str) -> Optional[Student]:
        return self._get_one("phone", phone)

    def get_by_token(self, qr_token: str) -> Optional[Student]:
        return self._get_one("qr_token", qr_token)

    def list_all(self) -> Sequence[StudentListRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT s.student_id, s.name, s.phone, s.grade, s.is_free, s.created_at,
                       (
                         SELECT GROUP_CONCAT(c.name ORDER BY c.name SEPARATOR ', ')
                         FROM enrollments e
                         JOIN classes c ON c.class_id = e.class_id
                         WHERE e.student_id = s.student_id
                       ) AS classes
                FROM students s
                ORDER BY s.created_at DESC, s.student_id DESC
                """
            )
            return [
                StudentListRow(
                    student_id=int(r["student_id"]),
                    name=r["name"],
                    phone=r["phone"],
                    grade=r["grade"],
                    is_free=bool(r.get("is_free")),
                    classes=r.get("classes") or "",
                    created_at=r.get("created_at"),
                )
                for r in fetchall(cur)
            ]

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
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO students(name, phone, grade, qr_token, is_free)
                    VALUES(%s,%s,%s,%s,%s)
                    """,
                    (name, phone, grade, qr_token, int(bool(is_free))),
                )
                student_id = int(cur.lastrowid)
                cur.execute(
                    "INSERT INTO enrollments(student_id, class_id) VALUES(%s,%s)",
                    (student_id, int(class_id)),
                )
                cur.execute(
                    """
                    INSERT INTO users(username, password_hash, role, student_id)
                    VALUES(%s,%s,%s,%s)
                    """,
                    (phone, password_hash, Role.STUDENT.value, student_id),
                )
                return student_id
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise as_duplicate_key_error(e) from e
            raise

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
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute("SELECT grade FROM students WHERE student_id=%s FOR UPDATE", (int(student_id),))
                current = fetchone(cur)
                if not current:
                    return False
                cur.execute(
                    "UPDATE students SET name=%s, phone=%s, grade=%s, is_free=%s WHERE student_id=%s",
                    (name, phone, grade, int(bool(is_free)), int(student_id)),
                )
                cur.execute(
                    "UPDATE users SET username=%s WHERE student_id=%s AND role=%s",
                    (phone, int(student_id), Role.STUDENT.value),
                )
                if current["grade"] != grade:
                    # One fee-bearing cohort class per student.
                    cur.execute(
                        """
                        DELETE e FROM enrollments e
                        JOIN classes c ON c.class_id = e.class_id
                        WHERE e.student_id=%s AND c.name=%s AND e.class_id <> %s
                        """,
                        (int(student_id), current["grade"], int(class_id)),
                    )
                cur.execute(
                    """
                    INSERT INTO enrollments(student_id, class_id) VALUES(%s,%s)
                    ON DUPLICATE KEY UPDATE class_id = class_id
                    """,
                    (int(student_id), int(class_id)),
                )
                if release_bookings:
                    cur.execute("DELETE FROM exam_bookings WHERE student_id=%s", (int(student_id),))
                return True
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise as_duplicate_key_error(e) from e
            raise

    def delete(self, student_id: int) -> bool:
        # payments, attendance, enrollments, bookings and the login cascade.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM students WHERE student_id=%s", (int(student_id),))
            return cur.rowcount > 0

    def replace_token(self, student_id: int, qr_token: str) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "UPDATE students SET qr_token=%s WHERE student_id=%s",
                    (qr_token, int(student_id)),
                )
                return cur.rowcount > 0
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise as_duplicate_key_error(e) from e
            raise
