from __future__ import annotations

import csv
import io

from flask import Flask, current_app, jsonify, send_file

from ..common.http import admin_required, as_bool, body, json_errors, serialize
from ..container import Container
from ..tokens.qr import render_png, scan_url


def register(app: Flask, container: Container) -> None:
    students = container.student_service

    @app.route("/api/students", methods=["GET"], endpoint="api_students")
    @admin_required
    @json_errors
    def list_students():
        return jsonify(serialize(list(students.list_students())))

    @app.route("/api/students", methods=["POST"], endpoint="api_students_create")
    @admin_required
    @json_errors
    def create_student():
        data = body()
        student = students.create_student(
            name=data.get("name", ""),
            phone=data.get("phone", ""),
            grade=data.get("grade", ""),
            is_free=as_bool(data.get("is_free")),
        )
        return jsonify(serialize(student)), 201

    @app.route("/api/students/<int:student_id>", methods=["GET"], endpoint="api_student")
    @admin_required
    @json_errors
    def get_student(student_id: int):
        return jsonify(serialize(students.get_student(student_id)))

    @app.route("/api/students/<int:student_id>", methods=["PUT"], endpoint="api_student_update")
    @admin_required
    @json_errors
    def update_student(student_id: int):
        data = body()
        student = students.update_student(
            student_id,
            name=data.get("name", ""),
            phone=data.get("phone", ""),
            grade=data.get("grade", ""),
            is_free=as_bool(data.get("is_free")),
        )
        return jsonify(serialize(student))

    @app.route("/api/students/<int:student_id>", methods=["DELETE"], endpoint="api_student_delete")
    @admin_required
    @json_errors
    def delete_student(student_id: int):
        students.delete_student(student_id)
        return "", 204

    @app.route("/api/students/<int:student_id>/reset-password", methods=["POST"], endpoint="api_student_reset_password")
    @admin_required
    @json_errors
    def reset_password(student_id: int):
        container.auth_service.reset_student_password(student_id)
        return jsonify({"ok": True})

    @app.route("/api/students/<int:student_id>/qr", methods=["POST"], endpoint="api_student_rotate_qr")
    @admin_required
    @json_errors
    def rotate_qr(student_id: int):
        return jsonify({"qr_token": students.rotate_token(student_id)})

    @app.route("/api/students/<int:student_id>/qr.png", methods=["GET"], endpoint="api_student_qr_png")
    @admin_required
    @json_errors
    def qr_png(student_id: int):
        token = students.current_token(student_id)
        content = scan_url(current_app.config.get("PUBLIC_BASE_URL"), token)
        return send_file(io.BytesIO(render_png(content)), mimetype="image/png", download_name=f"student_{student_id}_qr.png")

    @app.route("/admin/export/students.csv", methods=["GET"], endpoint="export_students_csv")
    @admin_required
    @json_errors
    def export_students_csv():
        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=["student_id", "name", "phone", "grade", "is_free", "classes", "created_at"])
        writer.writeheader()
        for row in students.list_students():
            writer.writerow(serialize(row))

        return app.response_class(
            out.getvalue().encode("utf-8-sig"),
            mimetype="text/csv",
            headers={"Content-Disposition": "attachment; filename=students.csv"},
        )
