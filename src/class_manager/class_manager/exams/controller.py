from __future__ import annotations

from flask import Flask, jsonify, request, session

from ..common.http import admin_required, body, json_errors, login_required, serialize, student_required
from ..container import Container
from ..core.enums import Role
from .model import SeatLayout


def _layout_json(layout: SeatLayout, *, full: bool) -> dict:
    seats = []
    for e in layout.bookings:
        seat = {
            "bench": e.bench,
            "position": e.position,
            "studentId": e.student_id,
            "name": e.display_name,
            "cohort": e.cohort,
        }
        if full:
            seat["bookingId"] = e.booking_id
            seat["phone"] = e.phone
        seats.append(seat)
    return {
        "slot": serialize(layout.slot),
        "benches": layout.slot.capacity,
        "positionsPerBench": layout.positions_per_bench,
        "capacity": layout.capacity,
        "seats": seats,
    }


def register(app: Flask, container: Container) -> None:
    seats = container.seat_service

    @app.route("/api/exam/slots", methods=["GET"], endpoint="api_exam_slots")
    @login_required
    @json_errors
    def list_slots():
        return jsonify(
            [
                {**serialize(s.slot), "bookedCount": s.booked_count, "seatsTotal": s.seats_total}
                for s in seats.list_slots()
            ]
        )

    @app.route("/api/exam/slots/<int:slot_id>/layout", methods=["GET"], endpoint="api_exam_layout")
    @login_required
    @json_errors
    def layout(slot_id: int):
        full = session.get("role") == Role.ADMIN.value
        return jsonify(_layout_json(seats.layout(slot_id), full=full))

    @app.route("/api/exam/book", methods=["POST"], endpoint="api_exam_book")
    @student_required
    @json_errors
    def book():
        data = body()
        booking = seats.book(session.get("student_id"), data.get("slot_id"), data.get("bench"), data.get("position"))
        return jsonify({"ok": True, "booking": serialize(booking)}), 201

    @app.route("/api/exam/booking", methods=["DELETE"], endpoint="api_exam_cancel")
    @student_required
    @json_errors
    def cancel():
        slot_id = body().get("slot_id") or request.args.get("slot_id")
        if slot_id:
            removed = 1 if seats.cancel(session.get("student_id"), slot_id) else 0
        else:
            removed = seats.cancel_all(session.get("student_id"))
        return jsonify({"ok": True, "removed": removed})

    @app.route("/api/student/exam/booking", methods=["GET"], endpoint="api_student_exam_booking")
    @student_required
    @json_errors
    def my_bookings():
        return jsonify(
            [
                {**serialize(sb.booking), "label": sb.label}
                for sb in seats.bookings_for(session.get("student_id"))
            ]
        )

    @app.route("/api/exam/admin/bookings/<int:booking_id>", methods=["DELETE"], endpoint="api_exam_admin_release")
    @admin_required
    @json_errors
    def admin_release(booking_id: int):
        seats.admin_release(booking_id)
        return jsonify({"ok": True})
