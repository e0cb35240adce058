from __future__ import annotations

from flask import Flask

from ..common.http import current_caller, json_body, json_endpoint, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    attendance = container.attendance_service

    @app.route("/api/sessions/<session_id>/attendance", methods=["GET"], endpoint="session_attendance")
    @json_endpoint
    def session_attendance(session_id: str):
        sheet = attendance.session_sheet(current_caller(container.identity), session_id)
        return ok(sheet.rows(), summary=sheet.summary.to_dict())

    @app.route("/api/sessions/<session_id>/attendance", methods=["POST"], endpoint="mark_session_attendance")
    @json_endpoint
    def mark_session_attendance(session_id: str):
        user_ids = json_body().get("user_ids")
        marked = attendance.mark_session(current_caller(container.identity), session_id, user_ids)
        return ok(message=f"Successfully marked attendance for {marked} students", attended_count=marked)

    @app.route("/api/sessions/<session_id>/attendance", methods=["DELETE"], endpoint="remove_session_attendance")
    @json_endpoint
    def remove_session_attendance(session_id: str):
        user_id = str(json_body().get("user_id") or "")
        attendance.remove_session_record(current_caller(container.identity), session_id, user_id)
        return ok(message="Attendance record removed successfully")

    @app.route("/api/events/<event_id>/attendance", methods=["GET"], endpoint="event_attendance")
    @json_endpoint
    def event_attendance(event_id: str):
        sheet = attendance.event_sheet(current_caller(container.identity), event_id)
        return ok(sheet.rows(), summary=sheet.summary.to_dict())

    @app.route("/api/events/<event_id>/attendance", methods=["POST"], endpoint="mark_event_attendance")
    @json_endpoint
    def mark_event_attendance(event_id: str):
        updated = attendance.mark_event(current_caller(container.identity), event_id, json_body().get("attendance"))
        return ok(message=f"Successfully updated attendance for {updated} students", updated_count=updated)

    @app.route("/api/events/<event_id>/attendance", methods=["PUT"], endpoint="update_event_attendance")
    @json_endpoint
    def update_event_attendance(event_id: str):
        body = json_body()
        record = attendance.mark_event_one(
            current_caller(container.identity),
            event_id,
            body.get("user_id"),
            body.get("attended"),
        )
        return ok(record.to_dict(), message="Attendance updated successfully")
