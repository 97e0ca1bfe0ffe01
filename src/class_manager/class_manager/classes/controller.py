from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import admin_required, body, json_errors, serialize
from ..container import Container


def register(app: Flask, container: Container) -> None:
    classes = container.class_service

    @app.route("/api/classes", methods=["GET"], endpoint="api_classes")
    @admin_required
    @json_errors
    def list_classes():
        return jsonify(serialize(list(classes.list_classes())))

    @app.route("/api/classes/<int:class_id>", methods=["PUT"], endpoint="api_class_update")
    @admin_required
    @json_errors
    def update_class(class_id: int):
        cls = classes.update_fee(class_id, body().get("monthly_fee"))
        return jsonify(serialize(cls))

    @app.route("/api/classes/<int:class_id>/students", methods=["GET"], endpoint="api_class_students")
    @admin_required
    @json_errors
    def class_students(class_id: int):
        return jsonify(serialize(list(classes.class_students(class_id))))

    @app.route("/api/enrollments", methods=["POST"], endpoint="api_enroll")
    @admin_required
    @json_errors
    def enroll():
        data = body()
        created = classes.enroll(student_id=data.get("student_id"), class_id=data.get("class_id"))
        return jsonify({"ok": True, "created": created}), 201

    @app.route("/api/enrollments", methods=["DELETE"], endpoint="api_unenroll")
    @admin_required
    @json_errors
    def unenroll():
        data = body()
        removed = classes.unenroll(student_id=data.get("student_id"), class_id=data.get("class_id"))
        return jsonify({"ok": True, "removed": removed})
