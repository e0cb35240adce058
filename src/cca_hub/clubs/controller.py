from __future__ import annotations

from flask import Flask, request

from ..common.http import current_caller, json_body, json_endpoint, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    clubs = container.club_service

    @app.route("/api/ccas", methods=["GET"], endpoint="list_ccas")
    @json_endpoint
    def list_ccas():
        items = clubs.list_clubs(category=request.args.get("category"), commitment=request.args.get("commitment"))
        return ok([c.to_dict() for c in items], count=len(items))

    @app.route("/api/ccas", methods=["POST"], endpoint="create_cca")
    @json_endpoint
    def create_cca():
        club = clubs.create_club(current_caller(container.identity), json_body())
        return ok(club.to_dict(), status=201)

    @app.route("/api/ccas/<club_id>", methods=["GET"], endpoint="get_cca")
    @json_endpoint
    def get_cca(club_id: str):
        return ok(clubs.get_club(club_id).to_dict())

    @app.route("/api/ccas/<club_id>", methods=["PUT"], endpoint="update_cca")
    @json_endpoint
    def update_cca(club_id: str):
        club = clubs.update_club(current_caller(container.identity), club_id, json_body())
        return ok(club.to_dict())

    @app.route("/api/ccas/<club_id>", methods=["DELETE"], endpoint="delete_cca")
    @json_endpoint
    def delete_cca(club_id: str):
        clubs.delete_club(current_caller(container.identity), club_id)
        return ok(message="CCA and all related data deleted successfully")

    @app.route("/api/ccas/<club_id>/member-count", methods=["GET"], endpoint="cca_member_count")
    @json_endpoint
    def cca_member_count(club_id: str):
        return ok({"count": clubs.member_count(club_id)})
