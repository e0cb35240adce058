from __future__ import annotations

from flask import Flask, request

from ..common.http import current_caller, json_body, json_endpoint, ok, paging_args
from ..container import Container


def register(app: Flask, container: Container) -> None:
    events = container.event_service

    @app.route("/api/events", methods=["GET"], endpoint="list_events")
    @json_endpoint
    def list_events():
        limit, offset = paging_args()
        views, total = events.list_events(
            current_caller(container.identity),
            club_id=request.args.get("cca_id"),
            status=request.args.get("status"),
            limit=limit,
            offset=offset,
        )
        return ok(
            [v.to_dict() for v in views],
            pagination={"total": total, "limit": limit, "offset": offset, "hasMore": offset + limit < total},
        )

    @app.route("/api/events", methods=["POST"], endpoint="create_event")
    @json_endpoint
    def create_event():
        body = json_body()
        event = events.create_event(current_caller(container.identity), str(body.get("cca_id") or ""), body)
        return ok(event.to_dict(), status=201, message="Event created successfully")

    @app.route("/api/events/<event_id>", methods=["GET"], endpoint="get_event")
    @json_endpoint
    def get_event(event_id: str):
        return ok(events.get_event(current_caller(container.identity), event_id).to_dict())

    @app.route("/api/events/<event_id>", methods=["PUT"], endpoint="update_event")
    @json_endpoint
    def update_event(event_id: str):
        event = events.update_event(current_caller(container.identity), event_id, json_body())
        return ok(event.to_dict(), message="Event updated successfully")

    @app.route("/api/events/<event_id>", methods=["DELETE"], endpoint="delete_event")
    @json_endpoint
    def delete_event(event_id: str):
        events.delete_event(current_caller(container.identity), event_id)
        return ok(message="Event deleted successfully")

    @app.route("/api/events/<event_id>/register", methods=["POST"], endpoint="register_event")
    @json_endpoint
    def register_event(event_id: str):
        record = events.register(current_caller(container.identity), event_id)
        return ok(
            {
                "registration_id": record.record_id,
                "event_id": event_id,
                "user_id": record.user_id,
                "registered_at": record.created_at.isoformat() if record.created_at else None,
            },
            message="Successfully registered for event",
        )
