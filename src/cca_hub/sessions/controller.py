from __future__ import annotations

from flask import Flask, request

from ..common.http import current_caller, json_body, json_endpoint, ok, paging_args
from ..container import Container


def register(app: Flask, container: Container) -> None:
    sessions = container.session_service

    @app.route("/api/sessions", methods=["GET"], endpoint="list_sessions")
    @json_endpoint
    def list_sessions():
        limit, offset = paging_args()
        items, total = sessions.list_sessions(
            current_caller(container.identity),
            club_id=request.args.get("cca_id"),
            limit=limit,
            offset=offset,
        )
        return ok(
            [i.to_dict() for i in items],
            pagination={"total": total, "limit": limit, "offset": offset, "hasMore": offset + limit < total},
        )

    @app.route("/api/sessions", methods=["POST"], endpoint="create_session")
    @json_endpoint
    def create_session():
        body = json_body()
        session = sessions.create_session(current_caller(container.identity), str(body.get("cca_id") or ""), body)
        return ok(session.to_dict(), status=201, message="Session created successfully")

    @app.route("/api/sessions/<session_id>", methods=["GET"], endpoint="get_session")
    @json_endpoint
    def get_session(session_id: str):
        return ok(sessions.get_session(session_id).to_dict())

    @app.route("/api/sessions/<session_id>", methods=["PUT"], endpoint="update_session")
    @json_endpoint
    def update_session(session_id: str):
        session = sessions.update_session(current_caller(container.identity), session_id, json_body())
        return ok(session.to_dict(), message="Session updated successfully")

    @app.route("/api/sessions/<session_id>", methods=["DELETE"], endpoint="delete_session")
    @json_endpoint
    def delete_session(session_id: str):
        sessions.delete_session(current_caller(container.identity), session_id)
        return ok(message="Session deleted successfully")
