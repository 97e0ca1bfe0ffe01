from __future__ import annotations

from flask import Flask, jsonify, session

from ..common.http import as_bool, body, json_errors, login_required
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    @app.route("/login", methods=["POST"], endpoint="login")
    @json_errors
    def login():
        data = body()
        role_s = (data.get("role") or "").strip()
        try:
            role = Role(role_s) if role_s else None
        except ValueError:
            raise ValidationError("Invalid role")

        s_user = container.auth_service.authenticate(data.get("username", ""), data.get("password", ""), role)

        session.clear()
        session.permanent = as_bool(data.get("remember_me"))
        session["user_id"] = s_user.user_id
        session["username"] = s_user.username
        session["role"] = s_user.role.value
        session["name"] = s_user.name
        if s_user.role == Role.STUDENT:
            session["student_id"] = s_user.student_id
            session["grade"] = s_user.grade

        return jsonify({"ok": True, "role": s_user.role.value, "name": s_user.name})

    @app.route("/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return jsonify({"ok": True})

    @app.route("/api/me", methods=["GET"], endpoint="me")
    @login_required
    def me():
        return jsonify(
            {
                "userId": session.get("user_id"),
                "username": session.get("username"),
                "role": session.get("role"),
                "name": session.get("name"),
                "studentId": session.get("student_id"),
                "grade": session.get("grade"),
            }
        )
