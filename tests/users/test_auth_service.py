from __future__ import annotations

import pytest
from werkzeug.security import generate_password_hash

from src.class_manager.class_manager.core.enums import Role
from src.class_manager.class_manager.core.exceptions import AuthenticationError, NotFoundError
from src.class_manager.class_manager.users.model import User


@pytest.fixture
def admin(app_env):
    return app_env.users_repo.add(
        User(user_id=100, username="admin", password_hash=generate_password_hash("admin123"), role=Role.ADMIN)
    )


def test_admin_login(app_env, admin):
    s_user = app_env.auth.authenticate("admin", "admin123", Role.ADMIN)

    assert s_user.role == Role.ADMIN
    assert s_user.student_id is None


def test_student_login_with_default_password(app_env):
    student = app_env.students.create_student(name="Nadun Perera", phone="0711111111", grade="Grade 7")

    s_user = app_env.auth.authenticate("0711111111", "1234", Role.STUDENT)

    assert s_user.student_id == student.student_id
    assert s_user.name == "Nadun Perera"
    assert s_user.grade == "Grade 7"


def test_bad_credentials_share_one_message(app_env, admin):
    with pytest.raises(AuthenticationError, match="Invalid credentials"):
        app_env.auth.authenticate("admin", "wrong")
    with pytest.raises(AuthenticationError, match="Invalid credentials"):
        app_env.auth.authenticate("nobody", "admin123")


def test_role_mismatch(app_env, admin):
    with pytest.raises(AuthenticationError, match="Role does not match"):
        app_env.auth.authenticate("admin", "admin123", Role.STUDENT)


def test_inactive_and_placeholder_hash(app_env):
    app_env.users_repo.add(
        User(user_id=101, username="old", password_hash=generate_password_hash("x"), role=Role.ADMIN, is_active=False)
    )
    app_env.users_repo.add(User(user_id=102, username="broken", password_hash="CHANGE_ME", role=Role.ADMIN))

    with pytest.raises(AuthenticationError):
        app_env.auth.authenticate("old", "x")
    with pytest.raises(AuthenticationError):
        app_env.auth.authenticate("broken", "CHANGE_ME")


def test_reset_student_password(app_env):
    student = app_env.students.create_student(name="A", phone="0711111111", grade="Grade 7")
    app_env.users_repo.set_student_password(student.student_id, generate_password_hash("changed"))

    app_env.auth.reset_student_password(student.student_id)

    assert app_env.auth.authenticate("0711111111", "1234").student_id == student.student_id
    with pytest.raises(NotFoundError):
        app_env.auth.reset_student_password(999)
