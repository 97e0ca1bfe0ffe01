from __future__ import annotations

from dataclasses import dataclass

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .classes.mysql_class_repository import MySQLClassRepository
from .classes.service import ClassService
from .core.catalog import Catalog
from .core.constants import DEFAULT_TOKEN_MAX_ATTEMPTS
from .database.connection import DBConfig, DatabaseConnection
from .exams.mysql_exam_repository import MySQLExamRepository
from .exams.service import SeatAllocationService
from .payments.mysql_payment_repository import MySQLPaymentRepository
from .payments.service import PaymentService
from .students.mysql_student_repository import MySQLStudentRepository
from .students.service import StudentService
from .tokens.service import IdentityTokenService
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AuthService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection
    catalog: Catalog

    students_repo: MySQLStudentRepository
    classes_repo: MySQLClassRepository
    attendance_repo: MySQLAttendanceRepository
    payments_repo: MySQLPaymentRepository
    exams_repo: MySQLExamRepository
    users_repo: MySQLUserRepository

    token_service: IdentityTokenService
    auth_service: AuthService
    student_service: StudentService
    class_service: ClassService
    payment_service: PaymentService
    attendance_service: AttendanceService
    seat_service: SeatAllocationService


def build_container(
    *,
    db_config: dict,
    catalog: Catalog,
    default_student_password: str,
    token_max_attempts: int = DEFAULT_TOKEN_MAX_ATTEMPTS,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    students_repo = MySQLStudentRepository(conn)
    classes_repo = MySQLClassRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    payments_repo = MySQLPaymentRepository(conn)
    exams_repo = MySQLExamRepository(conn)
    users_repo = MySQLUserRepository(conn)

    token_service = IdentityTokenService(students_repo, max_attempts=token_max_attempts)
    auth_service = AuthService(users_repo, default_student_password=default_student_password)
    student_service = StudentService(
        students_repo,
        classes_repo,
        token_service,
        catalog,
        default_password=default_student_password,
    )
    class_service = ClassService(classes_repo, students_repo)
    payment_service = PaymentService(payments_repo, students_repo, classes_repo)
    attendance_service = AttendanceService(
        attendance_repo,
        students_repo,
        classes_repo,
        payment_service,
        token_service,
    )
    seat_service = SeatAllocationService(exams_repo, students_repo, catalog)

    return Container(
        conn=conn,
        catalog=catalog,
        students_repo=students_repo,
        classes_repo=classes_repo,
        attendance_repo=attendance_repo,
        payments_repo=payments_repo,
        exams_repo=exams_repo,
        users_repo=users_repo,
        token_service=token_service,
        auth_service=auth_service,
        student_service=student_service,
        class_service=class_service,
        payment_service=payment_service,
        attendance_service=attendance_service,
        seat_service=seat_service,
    )
