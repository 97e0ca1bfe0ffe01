from __future__ import annotations

import re
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import DuplicateKeyError
from .connection import DatabaseConnection

# "Duplicate entry '1-3-2' for key 'exam_bookings.uq_exam_bookings_seat'" (8.0)
# "Duplicate entry '1-3-2' for key 'uq_exam_bookings_seat'" (5.7 / MariaDB)
_DUP_KEY_RE = re.compile(r"for key '(?:[^'.]+\.)?([^']+)'")


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """One connection, one transaction: commit on success, rollback on any error."""
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def is_duplicate_key(err: Exception) -> bool:
    return isinstance(err, mysql.connector.IntegrityError) and getattr(err, "errno", None) == errorcode.ER_DUP_ENTRY


def duplicate_key_name(err: Exception) -> str:
    """Name of the unique index a duplicate-key error refers to ('' if unknown)."""
    msg = getattr(err, "msg", None) or str(err)
    m = _DUP_KEY_RE.search(msg)
    return m.group(1) if m else ""


def as_duplicate_key_error(err: Exception) -> DuplicateKeyError:
    return DuplicateKeyError(duplicate_key_name(err), str(getattr(err, "msg", "") or err))
