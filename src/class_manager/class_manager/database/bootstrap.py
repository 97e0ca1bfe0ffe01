from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

import mysql.connector
from werkzeug.security import generate_password_hash

from ..core.catalog import Catalog
from ..core.enums import Role

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DBTarget:
    host: str
    port: int
    user: str
    password: str
    database: str


def _as_target(db_config: dict) -> DBTarget:
    return DBTarget(
        host=str(db_config.get("host", "localhost")),
        port=int(db_config.get("port", 3306)),
        user=str(db_config.get("user", "root")),
        password=str(db_config.get("password", "")),
        database=str(db_config.get("database", "class_manager_db")),
    )


def _connect(target: DBTarget, *, with_database: bool = True):
    kwargs = dict(
        host=target.host,
        port=target.port,
        user=target.user,
        password=target.password,
        use_pure=True,
    )
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_comments(sql: str) -> str:
    return re.sub(r"(?m)^\s*--.*$", "", sql)


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema files (handles ';' inside quotes).
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(db_config: dict) -> None:
    target = _as_target(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    target = _as_target(db_config)
    ensure_database_exists(db_config)

    sql = _strip_comments(_strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8")))

    conn = _connect(target)
    try:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()
    logger.info("Schema applied to %s@%s/%s", target.user, target.host, target.database)


def seed_catalog(db_config: dict, catalog: Catalog) -> None:
    """Insert cohorts (as classes) and exam slots that are not there yet.

    Existing rows are left alone so admin fee edits survive restarts.
    """
    target = _as_target(db_config)
    conn = _connect(target)
    try:
        cur = conn.cursor()
        for cohort in catalog.cohorts:
            cur.execute(
                """
                INSERT INTO classes(name, monthly_fee) VALUES(%s, %s)
                ON DUPLICATE KEY UPDATE name = name
                """,
                (cohort.name, cohort.monthly_fee),
            )
        for slot in catalog.exam_slots:
            cur.execute(
                """
                INSERT INTO exam_slots(label, start_time, end_time, capacity) VALUES(%s, %s, %s, %s)
                ON DUPLICATE KEY UPDATE label = label
                """,
                (slot.label, slot.start_time, slot.end_time, slot.capacity),
            )
        conn.commit()
    finally:
        conn.close()
    logger.info("Catalog seeded: %d classes, %d exam slots", len(catalog.cohorts), len(catalog.exam_slots))


def ensure_admin_user(db_config: dict, *, username: str = "admin", password: str) -> None:
    target = _as_target(db_config)
    conn = _connect(target)
    try:
        cur = conn.cursor(dictionary=True)
        cur.execute("SELECT user_id FROM users WHERE role=%s LIMIT 1", (Role.ADMIN.value,))
        if cur.fetchone():
            return
        cur.execute(
            "INSERT INTO users(username, password_hash, role) VALUES(%s, %s, %s)",
            (username, generate_password_hash(password), Role.ADMIN.value),
        )
        conn.commit()
        logger.info("Created default admin account %r", username)
    finally:
        conn.close()


DEMO_STUDENTS = (
    {"name": "Nadun Perera", "phone": "0711111111", "grade": "Grade 7"},
    {"name": "Sithmi Kariyawasam", "phone": "0722222222", "grade": "Grade 8"},
    {"name": "Nimal Fernando", "phone": "0733333333", "grade": "Grade 6"},
)


def ensure_demo_students(student_service) -> int:
    """Create the demo students through the service layer (tokens, logins, enrollment)."""
    created = 0
    for s in DEMO_STUDENTS:
        if student_service.find_by_phone(s["phone"]):
            continue
        student_service.create_student(name=s["name"], phone=s["phone"], grade=s["grade"])
        created += 1
    return created


def list_tables(db_config: dict) -> list[str]:
    target = _as_target(db_config)
    conn = _connect(target)
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
