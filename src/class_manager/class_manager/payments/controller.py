from __future__ import annotations

import csv
import io

from flask import Flask, jsonify, request

from ..common.datetime_utils import month_key, today_local
from ..common.http import admin_required, body, json_errors, serialize
from ..container import Container


def register(app: Flask, container: Container) -> None:
    payments = container.payment_service

    @app.route("/api/payments", methods=["POST"], endpoint="api_payments")
    @admin_required
    @json_errors
    def record_payment():
        data = body()
        payment = payments.record_payment(
            student_id=data.get("student_id"),
            class_id=data.get("class_id"),
            amount=data.get("amount"),
            month=data.get("month"),
            method=data.get("method"),
        )
        return jsonify({"ok": True, "payment": serialize(payment)})

    @app.route("/api/unpaid", methods=["GET"], endpoint="api_unpaid")
    @admin_required
    @json_errors
    def unpaid():
        month, rows = payments.unpaid(month=request.args.get("month"), grade=request.args.get("grade"))
        return jsonify({"month": month, "rows": serialize(list(rows))})

    @app.route("/api/finance", methods=["GET"], endpoint="api_finance")
    @admin_required
    @json_errors
    def finance():
        return jsonify(serialize(payments.finance(month=request.args.get("month"))))

    @app.route("/api/dashboard/summary", methods=["GET"], endpoint="api_dashboard_summary")
    @admin_required
    @json_errors
    def dashboard_summary():
        today = today_local()
        month = month_key(today)
        report = payments.finance(month=month)
        _, unpaid_rows = payments.unpaid(month=month)
        return jsonify(
            {
                "date": today.isoformat(),
                "month": month,
                "students": len(container.student_service.list_students()),
                "presentToday": container.attendance_service.count_for_date(today),
                "unpaidCount": len(unpaid_rows),
                "monthTotal": report.total,
            }
        )

    @app.route("/admin/export/payments.csv", methods=["GET"], endpoint="export_payments_csv")
    @admin_required
    @json_errors
    def export_payments_csv():
        out = io.StringIO()
        writer = csv.DictWriter(
            out,
            fieldnames=["month", "student_name", "phone", "class_name", "amount", "method", "created_at"],
        )
        writer.writeheader()
        for row in payments.export_rows(month=request.args.get("month")):
            writer.writerow(serialize(row))

        return app.response_class(
            out.getvalue().encode("utf-8-sig"),
            mimetype="text/csv",
            headers={"Content-Disposition": "attachment; filename=payments.csv"},
        )
