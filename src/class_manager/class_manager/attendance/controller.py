from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date, today_local
from ..common.http import admin_required, as_bool, body, json_errors, serialize
from ..container import Container
from ..core.exceptions import ValidationError


def _date_arg(value):
    return parse_iso_date(value) if value else today_local()


def register(app: Flask, container: Container) -> None:
    attendance = container.attendance_service

    @app.route("/api/scan", methods=["POST"], endpoint="api_scan")
    @admin_required
    @json_errors
    def scan():
        token = (body().get("token") or "").strip()
        if not token:
            raise ValidationError("token required")
        return jsonify(attendance.scan(token).to_dict())

    @app.route("/scan/<token>/auto", methods=["POST"], endpoint="scan_auto")
    @admin_required
    @json_errors
    def scan_auto(token: str):
        return jsonify(attendance.scan(token).to_dict())

    @app.route("/api/attendance", methods=["GET"], endpoint="api_attendance")
    @admin_required
    @json_errors
    def roster():
        on = _date_arg(request.args.get("date"))
        rows = attendance.roster(class_id=request.args.get("class_id"), on=on)
        return jsonify({"date": on.isoformat(), "rows": serialize(list(rows))})

    @app.route("/api/attendance/mark", methods=["POST"], endpoint="api_attendance_mark")
    @admin_required
    @json_errors
    def mark():
        data = body()
        result = attendance.mark_manual(
            student_id=data.get("student_id"),
            phone=data.get("phone"),
            class_id=data.get("class_id"),
            on=_date_arg(data.get("date")),
        )
        return jsonify(result.to_dict())

    @app.route("/api/attendance/toggle", methods=["POST"], endpoint="api_attendance_toggle")
    @admin_required
    @json_errors
    def toggle():
        data = body()
        present = as_bool(data.get("present"))
        changed = attendance.set_presence(
            student_id=data.get("student_id"),
            class_id=data.get("class_id"),
            on=_date_arg(data.get("date")),
            present=present,
        )
        return jsonify({"ok": True, "present": present, "changed": changed})
