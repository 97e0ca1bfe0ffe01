from __future__ import annotations

from datetime import date

import pytest
from werkzeug.security import check_password_hash

from src.class_manager.class_manager.core.exceptions import NotFoundError, ValidationError


def test_create_student_issues_token_enrolls_and_opens_login(app_env):
    student = app_env.students.create_student(name=" Nadun Perera ", phone="0711111111", grade="Grade 7")

    assert student.name == "Nadun Perera"
    assert app_env.tokens.verify(student.qr_token) == student.student_id

    g7 = app_env.classes.class_for_grade("Grade 7")
    assert app_env.classes_repo.is_enrolled(student_id=student.student_id, class_id=g7.class_id)

    user = app_env.users_repo.get_by_username("0711111111")
    assert user.student_id == student.student_id
    assert check_password_hash(user.password_hash, "1234")


def test_duplicate_phone_is_rejected(app_env):
    app_env.students.create_student(name="A", phone="0711111111", grade="Grade 7")

    with pytest.raises(ValidationError, match="Phone already exists"):
        app_env.students.create_student(name="B", phone="0711111111", grade="Grade 8")


@pytest.mark.parametrize("grade", ["", "Grade 12", "grade 7"])
def test_unknown_grade_is_rejected(app_env, grade):
    with pytest.raises(ValidationError):
        app_env.students.create_student(name="A", phone="0711111111", grade=grade)


def test_required_fields(app_env):
    with pytest.raises(ValidationError):
        app_env.students.create_student(name="", phone="0711111111", grade="Grade 7")
    with pytest.raises(ValidationError):
        app_env.students.create_student(name="A", phone="  ", grade="Grade 7")


def test_update_changes_grade_and_keeps_token(app_env):
    student = app_env.students.create_student(name="A", phone="0711111111", grade="Grade 7")

    updated = app_env.students.update_student(student.student_id, name="A", phone="0711111111", grade="Grade 8", is_free=True)

    assert updated.grade == "Grade 8"
    assert updated.is_free is True
    assert updated.qr_token == student.qr_token


def test_grade_change_moves_the_enrollment(app_env):
    student = app_env.students.create_student(name="A", phone="0711111111", grade="Grade 7")
    g7 = app_env.classes.class_for_grade("Grade 7")

    app_env.students.update_student(student.student_id, name="A", phone="0711111111", grade="Grade 8")

    unpaid = app_env.payments.unpaid(month="2025-01")
    assert [row.class_name for row in unpaid] == ["Grade 8"]
    assert app_env.students.list_students()[0].classes == "Grade 8"
    assert app_env.attendance.roster(class_id=g7.class_id, on=date(2025, 1, 10)) == []


def test_grade_change_keeps_extra_enrollments(app_env):
    student = app_env.students.create_student(name="A", phone="0711111111", grade="Grade 7")
    ol = app_env.classes.class_for_grade("O/L")
    app_env.classes.enroll(student_id=student.student_id, class_id=ol.class_id)

    app_env.students.update_student(student.student_id, name="A", phone="0711111111", grade="Grade 8")

    assert app_env.students.list_students()[0].classes == "Grade 8, O/L"


def test_grade_change_out_of_booking_cohorts_releases_seats(app_env):
    student = app_env.students.create_student(name="A", phone="0711111111", grade="Grade 7")
    s1 = app_env.seats.list_slots()[0].slot
    app_env.seats.book(student.student_id, s1.slot_id, 3, 2)

    app_env.students.update_student(student.student_id, name="A", phone="0711111111", grade="Grade 6")

    assert app_env.seats.bookings_for(student.student_id) == []
    assert app_env.seats.layout(s1.slot_id).occupant(3, 2) is None


def test_grade_change_within_booking_cohorts_keeps_seats(app_env):
    student = app_env.students.create_student(name="A", phone="0711111111", grade="Grade 7")
    s1 = app_env.seats.list_slots()[0].slot
    app_env.seats.book(student.student_id, s1.slot_id, 3, 2)

    app_env.students.update_student(student.student_id, name="A", phone="0711111111", grade="Grade 8")

    assert [sb.booking.bench for sb in app_env.seats.bookings_for(student.student_id)] == [3]


def test_update_unknown_or_conflicting(app_env):
    a = app_env.students.create_student(name="A", phone="0711111111", grade="Grade 7")
    app_env.students.create_student(name="B", phone="0722222222", grade="Grade 7")

    with pytest.raises(NotFoundError):
        app_env.students.update_student(999, name="X", phone="0799999999", grade="Grade 7")
    with pytest.raises(ValidationError):
        app_env.students.update_student(a.student_id, name="A", phone="0722222222", grade="Grade 7")


def test_delete_cascades(app_env):
    student = app_env.students.create_student(name="A", phone="0711111111", grade="Grade 7")
    app_env.students.delete_student(student.student_id)

    with pytest.raises(NotFoundError):
        app_env.students.get_student(student.student_id)
    with pytest.raises(NotFoundError):
        app_env.students.delete_student(student.student_id)
    assert app_env.users_repo.get_by_username("0711111111") is None
    assert app_env.students.find_by_phone("0711111111") is None
    assert not any(e[0] == student.student_id for e in app_env.db.enrollments)


def test_rotate_token_via_service(app_env):
    student = app_env.students.create_student(name="A", phone="0711111111", grade="Grade 7")

    new = app_env.students.rotate_token(student.student_id)

    assert new != student.qr_token
    assert app_env.students.current_token(student.student_id) == new


def test_list_students_shows_classes(app_env):
    app_env.students.create_student(name="A", phone="0711111111", grade="Grade 7")

    rows = app_env.students.list_students()

    assert rows[0].classes == "Grade 7"
