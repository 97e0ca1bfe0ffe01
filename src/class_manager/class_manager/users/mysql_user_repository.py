from __future__ import annotations

from typing import Optional

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import User
from .repository import UserRepository


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_username(self, username: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT u.user_id, u.username, u.password_hash, u.role, u.student_id, u.is_active,
                       s.name AS student_name, s.grade
                FROM users u
                LEFT JOIN students s ON s.student_id = u.student_id
                WHERE u.username=%s
                """,
                (username,),
            )
            row = fetchone(cur)
            if not row:
                return None
            return User(
                user_id=int(row["user_id"]),
                username=row["username"],
                password_hash=row["password_hash"],
                role=Role(row["role"]),
                student_id=row.get("student_id"),
                student_name=row.get("student_name"),
                grade=row.get("grade"),
                is_active=bool(row.get("is_active", True)),
            )

    def set_student_password(self, student_id: int, password_hash: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET password_hash=%s WHERE student_id=%s AND role=%s",
                (password_hash, int(student_id), Role.STUDENT.value),
            )
            return cur.rowcount > 0
