from __future__ import annotations

import logging
from typing import Optional, Sequence

import mysql.connector
from mysql.connector import errorcode

from ..core.constants import SEAT_MOVE_MAX_ATTEMPTS, UQ_BOOKING_STUDENT
from ..core.exceptions import SeatTakenError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, duplicate_key_name, fetchall, fetchone, is_duplicate_key
from .model import Booking, ExamSlot, LayoutEntry, SeatLayout, SlotSummary, StudentBooking
from .repository import ExamRepository

logger = logging.getLogger(__name__)

_RETRYABLE_ERRNOS = (errorcode.ER_LOCK_DEADLOCK, errorcode.ER_LOCK_WAIT_TIMEOUT)


def _to_slot(r: dict) -> ExamSlot:
    return ExamSlot(
        slot_id=int(r["slot_id"]),
        label=r["label"],
        start_time=r["start_time"],
        end_time=r["end_time"],
        capacity=int(r["capacity"]),
    )


class MySQLExamRepository(ExamRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_slots(self) -> Sequence[SlotSummary]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT es.slot_id, es.label, es.start_time, es.end_time, es.capacity,
                       (SELECT COUNT(*) FROM exam_bookings eb WHERE eb.slot_id = es.slot_id) AS booked_count
                FROM exam_slots es
                ORDER BY es.slot_id
                """
            )
            return [SlotSummary(slot=_to_slot(r), booked_count=int(r["booked_count"])) for r in fetchall(cur)]

    def get_slot(self, slot_id: int) -> Optional[ExamSlot]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT slot_id, label, start_time, end_time, capacity FROM exam_slots WHERE slot_id=%s",
                (int(slot_id),),
            )
            r = fetchone(cur)
            return _to_slot(r) if r else None

    def move_booking(self, *, slot_id: int, student_id: int, bench: int, position: int) -> Booking:
        for attempt in range(1, SEAT_MOVE_MAX_ATTEMPTS + 1):
            try:
                with db_cursor(self._conn_factory) as (_, cur):
                    cur.execute(
                        "DELETE FROM exam_bookings WHERE slot_id=%s AND student_id=%s",
                        (int(slot_id), int(student_id)),
                    )
                    cur.execute(
                        """
                        INSERT INTO exam_bookings(slot_id, bench, position, student_id)
                        VALUES(%s,%s,%s,%s)
                        """,
                        (int(slot_id), int(bench), int(position), int(student_id)),
                    )
                    booking_id = int(cur.lastrowid)
            except mysql.connector.IntegrityError as e:
                if not is_duplicate_key(e):
                    raise
                # db_cursor rolled back, so the DELETE above never happened.
                if duplicate_key_name(e) == UQ_BOOKING_STUDENT:
                    raise SeatTakenError("Your booking changed in another session, refresh and try again") from e
                raise SeatTakenError() from e
            except mysql.connector.Error as e:
                # Two first-time bookers in one slot share the DELETE's gap lock.
                if e.errno not in _RETRYABLE_ERRNOS:
                    raise
                logger.warning(
                    "Seat move rolled back (errno %s), attempt %s/%s: slot=%s student=%s",
                    e.errno,
                    attempt,
                    SEAT_MOVE_MAX_ATTEMPTS,
                    slot_id,
                    student_id,
                )
                continue

            return Booking(
                booking_id=booking_id,
                slot_id=int(slot_id),
                bench=int(bench),
                position=int(position),
                student_id=int(student_id),
            )

        logger.warning("Seat move gave up after %s attempts: slot=%s student=%s", SEAT_MOVE_MAX_ATTEMPTS, slot_id, student_id)
        raise SeatTakenError("Seat is busy, please try again")

    def cancel(self, *, slot_id: int, student_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM exam_bookings WHERE slot_id=%s AND student_id=%s",
                (int(slot_id), int(student_id)),
            )
            return cur.rowcount > 0

    def layout(self, slot_id: int) -> Optional[SeatLayout]:
        # One statement, so the slot and its seats come from the same snapshot.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT es.slot_id, es.label, es.start_time, es.end_time, es.capacity,
                       eb.booking_id, eb.bench, eb.position, eb.student_id,
                       s.name, s.grade, s.phone
                FROM exam_slots es
                LEFT JOIN exam_bookings eb ON eb.slot_id = es.slot_id
                LEFT JOIN students s ON s.student_id = eb.student_id
                WHERE es.slot_id=%s
                ORDER BY eb.bench, eb.position
                """,
                (int(slot_id),),
            )
            rows = fetchall(cur)
        if not rows:
            return None
        entries = tuple(
            LayoutEntry(
                bench=int(r["bench"]),
                position=int(r["position"]),
                student_id=int(r["student_id"]),
                display_name=r["name"],
                cohort=r["grade"],
                booking_id=int(r["booking_id"]),
                phone=r.get("phone") or "",
            )
            for r in rows
            if r.get("booking_id") is not None
        )
        return SeatLayout(slot=_to_slot(rows[0]), bookings=entries)

    def bookings_for_student(self, student_id: int) -> Sequence[StudentBooking]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT eb.booking_id, eb.slot_id, eb.bench, eb.position, eb.student_id, eb.created_at, es.label
                FROM exam_bookings eb
                JOIN exam_slots es ON es.slot_id = eb.slot_id
                WHERE eb.student_id=%s
                ORDER BY eb.slot_id
                """,
                (int(student_id),),
            )
            return [
                StudentBooking(
                    booking=Booking(
                        booking_id=int(r["booking_id"]),
                        slot_id=int(r["slot_id"]),
                        bench=int(r["bench"]),
                        position=int(r["position"]),
                        student_id=int(r["student_id"]),
                        created_at=r.get("created_at"),
                    ),
                    label=r["label"],
                )
                for r in fetchall(cur)
            ]

    def release(self, booking_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM exam_bookings WHERE booking_id=%s", (int(booking_id),))
            return cur.rowcount > 0
