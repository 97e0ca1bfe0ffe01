from __future__ import annotations

import threading
from datetime import datetime
from types import SimpleNamespace
from typing import Optional

import pytest

from src.class_manager.class_manager.attendance.model import RosterRow
from src.class_manager.class_manager.attendance.service import AttendanceService
from src.class_manager.class_manager.classes.model import ClassGroup, EnrolledStudent
from src.class_manager.class_manager.classes.service import ClassService
from src.class_manager.class_manager.core.catalog import load_catalog
from src.class_manager.class_manager.core.constants import (
    UQ_BOOKING_SEAT,
    UQ_STUDENT_PHONE,
    UQ_STUDENT_TOKEN,
    UQ_USERNAME,
)
from src.class_manager.class_manager.core.enums import Role
from src.class_manager.class_manager.core.exceptions import DuplicateKeyError, SeatTakenError
from src.class_manager.class_manager.exams.model import (
    Booking,
    ExamSlot,
    LayoutEntry,
    SeatLayout,
    SlotSummary,
    StudentBooking,
)
from src.class_manager.class_manager.exams.service import SeatAllocationService
from src.class_manager.class_manager.payments.model import FinanceRow, Payment, PaymentExportRow, UnpaidRow
from src.class_manager.class_manager.payments.service import PaymentService
from src.class_manager.class_manager.students.model import Student, StudentListRow
from src.class_manager.class_manager.students.service import StudentService
from src.class_manager.class_manager.tokens.service import IdentityTokenService
from src.class_manager.class_manager.users.model import User
from src.class_manager.class_manager.users.service import AuthService


class FakeDB:
    """Shared in-memory tables; unique keys raise DuplicateKeyError like MySQL."""

    def __init__(self):
        self.lock = threading.Lock()
        self.students: dict[int, Student] = {}
        self.classes: dict[int, ClassGroup] = {}
        self.enrollments: set[tuple[int, int]] = set()
        self.payments: dict[tuple[int, int, str], Payment] = {}
        self.attendance: set[tuple[int, int, object]] = set()
        self.slots: dict[int, ExamSlot] = {}
        self.bookings: dict[int, Booking] = {}
        self.users: dict[int, User] = {}
        self._ids: dict[str, int] = {}

    def next_id(self, table: str) -> int:
        self._ids[table] = self._ids.get(table, 0) + 1
        return self._ids[table]

    def delete_student(self, student_id: int) -> None:
        self.students.pop(student_id, None)
        self.enrollments = {e for e in self.enrollments if e[0] != student_id}
        self.payments = {k: v for k, v in self.payments.items() if k[0] != student_id}
        self.attendance = {a for a in self.attendance if a[0] != student_id}
        self.bookings = {k: b for k, b in self.bookings.items() if b.student_id != student_id}
        self.users = {k: u for k, u in self.users.items() if u.student_id != student_id}


class FakeStudents:
    def __init__(self, db: FakeDB):
        self._db = db

    def get_by_id(self, student_id: int) -> Optional[Student]:
        return self._db.students.get(int(student_id))

    def get_by_phone(self, phone: str) -> Optional[Student]:
        return next((s for s in self._db.students.values() if s.phone == phone), None)

    def get_by_token(self, qr_token: str) -> Optional[Student]:
        return next((s for s in self._db.students.values() if s.qr_token == qr_token), None)

    def list_all(self):
        rows = []
        for s in sorted(self._db.students.values(), key=lambda s: s.student_id, reverse=True):
            names = sorted(self._db.classes[c].name for (sid, c) in self._db.enrollments if sid == s.student_id)
            rows.append(
                StudentListRow(
                    student_id=s.student_id,
                    name=s.name,
                    phone=s.phone,
                    grade=s.grade,
                    is_free=s.is_free,
                    classes=", ".join(names),
                    created_at=s.created_at,
                )
            )
        return rows

    def _check_unique(self, *, student_id: int, phone: str, qr_token: Optional[str]) -> None:
        for s in self._db.students.values():
            if s.student_id == student_id:
                continue
            if s.phone == phone:
                raise DuplicateKeyError(UQ_STUDENT_PHONE)
            if qr_token and s.qr_token == qr_token:
                raise DuplicateKeyError(UQ_STUDENT_TOKEN)
        for u in self._db.users.values():
            if u.username == phone and u.student_id != student_id:
                raise DuplicateKeyError(UQ_USERNAME)

    def create(self, *, name, phone, grade, qr_token, is_free, class_id, password_hash) -> int:
        self._check_unique(student_id=0, phone=phone, qr_token=qr_token)
        student_id = self._db.next_id("students")
        self._db.students[student_id] = Student(
            student_id=student_id,
            name=name,
            phone=phone,
            grade=grade,
            qr_token=qr_token,
            is_free=is_free,
            created_at=datetime(2025, 1, 1, 9, 0, 0),
        )
        self._db.enrollments.add((student_id, class_id))
        user_id = self._db.next_id("users")
        self._db.users[user_id] = User(
            user_id=user_id,
            username=phone,
            password_hash=password_hash,
            role=Role.STUDENT,
            student_id=student_id,
            student_name=name,
            grade=grade,
        )
        return student_id

    def update(self, *, student_id, name, phone, grade, is_free, class_id, release_bookings=False) -> bool:
        current = self._db.students.get(student_id)
        if not current:
            return False
        self._check_unique(student_id=student_id, phone=phone, qr_token=None)
        self._db.students[student_id] = Student(
            student_id=student_id,
            name=name,
            phone=phone,
            grade=grade,
            qr_token=current.qr_token,
            is_free=is_free,
            created_at=current.created_at,
        )
        if current.grade != grade:
            self._db.enrollments = {
                (sid, cid)
                for (sid, cid) in self._db.enrollments
                if not (sid == student_id and cid != class_id and self._db.classes[cid].name == current.grade)
            }
        self._db.enrollments.add((student_id, class_id))
        if release_bookings:
            self._db.bookings = {k: b for k, b in self._db.bookings.items() if b.student_id != student_id}
        return True

    def delete(self, student_id: int) -> bool:
        if student_id not in self._db.students:
            return False
        self._db.delete_student(student_id)
        return True

    def replace_token(self, student_id: int, qr_token: str) -> bool:
        current = self._db.students.get(student_id)
        if not current:
            return False
        self._check_unique(student_id=student_id, phone=current.phone, qr_token=qr_token)
        self._db.students[student_id] = Student(
            student_id=current.student_id,
            name=current.name,
            phone=current.phone,
            grade=current.grade,
            qr_token=qr_token,
            is_free=current.is_free,
            created_at=current.created_at,
        )
        return True


class FakeClasses:
    def __init__(self, db: FakeDB):
        self._db = db

    def add(self, name: str, monthly_fee: int) -> ClassGroup:
        class_id = self._db.next_id("classes")
        cls = ClassGroup(class_id=class_id, name=name, monthly_fee=monthly_fee)
        self._db.classes[class_id] = cls
        return cls

    def list_all(self):
        return sorted(self._db.classes.values(), key=lambda c: c.name)

    def get_by_id(self, class_id: int) -> Optional[ClassGroup]:
        return self._db.classes.get(int(class_id))

    def get_by_name(self, name: str) -> Optional[ClassGroup]:
        return next((c for c in self._db.classes.values() if c.name == name), None)

    def update_fee(self, class_id: int, monthly_fee: int) -> bool:
        cls = self._db.classes.get(class_id)
        if not cls:
            return False
        self._db.classes[class_id] = ClassGroup(class_id=class_id, name=cls.name, monthly_fee=monthly_fee)
        return True

    def enroll(self, *, student_id: int, class_id: int) -> bool:
        if (student_id, class_id) in self._db.enrollments:
            return False
        self._db.enrollments.add((student_id, class_id))
        return True

    def unenroll(self, *, student_id: int, class_id: int) -> bool:
        if (student_id, class_id) not in self._db.enrollments:
            return False
        self._db.enrollments.discard((student_id, class_id))
        return True

    def is_enrolled(self, *, student_id: int, class_id: int) -> bool:
        return (student_id, class_id) in self._db.enrollments

    def list_students(self, class_id: int):
        return [
            EnrolledStudent(student_id=s.student_id, name=s.name, phone=s.phone, grade=s.grade, is_free=s.is_free)
            for s in sorted(self._db.students.values(), key=lambda s: s.name)
            if (s.student_id, class_id) in self._db.enrollments
        ]


class FakeAttendance:
    def __init__(self, db: FakeDB):
        self._db = db

    def mark(self, *, student_id: int, class_id: int, on) -> bool:
        with self._db.lock:
            key = (student_id, class_id, on)
            if key in self._db.attendance:
                return False
            self._db.attendance.add(key)
            return True

    def unmark(self, *, student_id: int, class_id: int, on) -> bool:
        key = (student_id, class_id, on)
        if key not in self._db.attendance:
            return False
        self._db.attendance.discard(key)
        return True

    def roster(self, *, class_id: int, on):
        return [
            RosterRow(
                student_id=s.student_id,
                name=s.name,
                phone=s.phone,
                grade=s.grade,
                is_free=s.is_free,
                present=(s.student_id, class_id, on) in self._db.attendance,
            )
            for s in sorted(self._db.students.values(), key=lambda s: s.name)
            if (s.student_id, class_id) in self._db.enrollments
        ]

    def count_for_date(self, on) -> int:
        return sum(1 for a in self._db.attendance if a[2] == on)


class FakePayments:
    def __init__(self, db: FakeDB):
        self._db = db

    def get(self, *, student_id: int, class_id: int, month: str) -> Optional[Payment]:
        return self._db.payments.get((student_id, class_id, month))

    def upsert(self, *, student_id: int, class_id: int, month: str, amount: int, method: str) -> None:
        key = (student_id, class_id, month)
        current = self._db.payments.get(key)
        payment_id = current.payment_id if current else self._db.next_id("payments")
        self._db.payments[key] = Payment(
            payment_id=payment_id,
            student_id=student_id,
            class_id=class_id,
            month=month,
            amount=amount,
            method=method,
        )

    def list_unpaid(self, *, month: str, class_name: Optional[str] = None):
        rows = []
        for (student_id, class_id) in sorted(self._db.enrollments):
            s = self._db.students[student_id]
            c = self._db.classes[class_id]
            if s.is_free or (class_name and c.name != class_name):
                continue
            if (student_id, class_id, month) in self._db.payments:
                continue
            rows.append(
                UnpaidRow(
                    student_id=s.student_id,
                    student_name=s.name,
                    phone=s.phone,
                    grade=s.grade,
                    class_id=c.class_id,
                    class_name=c.name,
                    monthly_fee=c.monthly_fee,
                )
            )
        return rows

    def finance(self, *, month: str):
        rows = []
        for c in sorted(self._db.classes.values(), key=lambda c: c.name):
            paid = [p for p in self._db.payments.values() if p.class_id == c.class_id and p.month == month]
            rows.append(FinanceRow(class_id=c.class_id, class_name=c.name, payments=len(paid), total=sum(p.amount for p in paid)))
        return rows

    def export_rows(self, *, month: Optional[str] = None):
        return [
            PaymentExportRow(
                month=p.month,
                student_name=self._db.students[p.student_id].name,
                phone=self._db.students[p.student_id].phone,
                class_name=self._db.classes[p.class_id].name,
                amount=p.amount,
                method=p.method,
            )
            for p in self._db.payments.values()
            if month is None or p.month == month
        ]


class FakeExams:
    """Bookings table; the lock stands in for the store transaction."""

    def __init__(self, db: FakeDB):
        self._db = db

    def add_slot(self, label: str, capacity: int) -> ExamSlot:
        slot_id = self._db.next_id("exam_slots")
        slot = ExamSlot(
            slot_id=slot_id,
            label=label,
            start_time=datetime(2025, 12, 5, 14, 0),
            end_time=datetime(2025, 12, 5, 17, 0),
            capacity=capacity,
        )
        self._db.slots[slot_id] = slot
        return slot

    def list_slots(self):
        return [
            SlotSummary(slot=s, booked_count=sum(1 for b in self._db.bookings.values() if b.slot_id == s.slot_id))
            for s in self._db.slots.values()
        ]

    def get_slot(self, slot_id: int) -> Optional[ExamSlot]:
        return self._db.slots.get(int(slot_id))

    def move_booking(self, *, slot_id: int, student_id: int, bench: int, position: int) -> Booking:
        with self._db.lock:
            for b in self._db.bookings.values():
                if (b.slot_id, b.bench, b.position) == (slot_id, bench, position) and b.student_id != student_id:
                    # nothing written: the student's previous seat stays
                    raise SeatTakenError() from DuplicateKeyError(UQ_BOOKING_SEAT)
            self._db.bookings = {
                k: b for k, b in self._db.bookings.items() if not (b.slot_id == slot_id and b.student_id == student_id)
            }
            booking_id = self._db.next_id("exam_bookings")
            booking = Booking(booking_id=booking_id, slot_id=slot_id, bench=bench, position=position, student_id=student_id)
            self._db.bookings[booking_id] = booking
            return booking

    def cancel(self, *, slot_id: int, student_id: int) -> bool:
        with self._db.lock:
            before = len(self._db.bookings)
            self._db.bookings = {
                k: b for k, b in self._db.bookings.items() if not (b.slot_id == slot_id and b.student_id == student_id)
            }
            return len(self._db.bookings) < before

    def layout(self, slot_id: int) -> Optional[SeatLayout]:
        slot = self._db.slots.get(slot_id)
        if not slot:
            return None
        entries = []
        for b in sorted(self._db.bookings.values(), key=lambda b: (b.bench, b.position)):
            if b.slot_id != slot_id:
                continue
            s = self._db.students[b.student_id]
            entries.append(
                LayoutEntry(
                    bench=b.bench,
                    position=b.position,
                    student_id=b.student_id,
                    display_name=s.name,
                    cohort=s.grade,
                    booking_id=b.booking_id,
                    phone=s.phone,
                )
            )
        return SeatLayout(slot=slot, bookings=tuple(entries))

    def bookings_for_student(self, student_id: int):
        return [
            StudentBooking(booking=b, label=self._db.slots[b.slot_id].label)
            for b in sorted(self._db.bookings.values(), key=lambda b: b.slot_id)
            if b.student_id == student_id
        ]

    def release(self, booking_id: int) -> bool:
        with self._db.lock:
            return self._db.bookings.pop(int(booking_id), None) is not None


class FakeUsers:
    def __init__(self, db: FakeDB):
        self._db = db

    def add(self, user: User) -> User:
        self._db.users[user.user_id] = user
        return user

    def get_by_username(self, username: str) -> Optional[User]:
        return next((u for u in self._db.users.values() if u.username == username), None)

    def set_student_password(self, student_id: int, password_hash: str) -> bool:
        for user_id, u in self._db.users.items():
            if u.student_id == student_id:
                self._db.users[user_id] = User(
                    user_id=u.user_id,
                    username=u.username,
                    password_hash=password_hash,
                    role=u.role,
                    student_id=u.student_id,
                    student_name=u.student_name,
                    grade=u.grade,
                    is_active=u.is_active,
                )
                return True
        return False


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 1, 10, 16, 0, 0)


@pytest.fixture
def catalog():
    return load_catalog(
        cohorts=[
            {"name": "Grade 6", "monthly_fee": 2000},
            {"name": "Grade 7", "monthly_fee": 2000},
            {"name": "Grade 8", "monthly_fee": 2000},
            {"name": "O/L", "monthly_fee": 2500},
        ],
        exam_slots=[
            {"label": "S1", "start_time": "2025-12-05T14:00:00", "end_time": "2025-12-05T17:00:00", "capacity": 25},
            {"label": "S2", "start_time": "2025-12-05T17:30:00", "end_time": "2025-12-05T20:30:00", "capacity": 24},
        ],
        booking_cohorts=["Grade 7", "Grade 8"],
    )


@pytest.fixture
def app_env(catalog):
    """Services wired over in-memory repos, with the catalog's classes and slots seeded."""
    db = FakeDB()
    students = FakeStudents(db)
    classes = FakeClasses(db)
    attendance = FakeAttendance(db)
    payments = FakePayments(db)
    exams = FakeExams(db)
    users = FakeUsers(db)

    for c in catalog.cohorts:
        classes.add(c.name, c.monthly_fee)
    for s in catalog.exam_slots:
        exams.add_slot(s.label, s.capacity)

    tokens = IdentityTokenService(students)
    payment_service = PaymentService(payments, students, classes)
    return SimpleNamespace(
        db=db,
        catalog=catalog,
        students_repo=students,
        classes_repo=classes,
        attendance_repo=attendance,
        payments_repo=payments,
        exams_repo=exams,
        users_repo=users,
        tokens=tokens,
        students=StudentService(students, classes, tokens, catalog, default_password="1234"),
        classes=ClassService(classes, students),
        payments=payment_service,
        attendance=AttendanceService(attendance, students, classes, payment_service, tokens),
        seats=SeatAllocationService(exams, students, catalog),
        auth=AuthService(users, default_student_password="1234"),
    )
