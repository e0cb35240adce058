from __future__ import annotations

from flask import Flask

from ..common.http import current_caller, json_body, json_endpoint, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    memberships = container.membership_service

    @app.route("/api/ccas/<club_id>/join", methods=["POST"], endpoint="join_cca")
    @json_endpoint
    def join_cca(club_id: str):
        membership = memberships.join(current_caller(container.identity), club_id)
        return ok(membership.to_dict(), status=201, message="Successfully joined CCA")

    @app.route("/api/memberships", methods=["POST"], endpoint="add_membership")
    @json_endpoint
    def add_membership():
        body = json_body()
        membership = memberships.add_member(
            current_caller(container.identity),
            str(body.get("cca_id") or ""),
            str(body.get("user_id") or ""),
        )
        return ok(membership.to_dict(), status=201)

    @app.route("/api/cca-admin/<club_id>/members", methods=["GET"], endpoint="list_members")
    @json_endpoint
    def list_members(club_id: str):
        members = memberships.list_members(current_caller(container.identity), club_id)
        return ok([m.to_dict() for m in members], count=len(members))

    @app.route("/api/cca-admin/<club_id>/members/<user_id>", methods=["DELETE"], endpoint="remove_member")
    @json_endpoint
    def remove_member(club_id: str, user_id: str):
        memberships.remove_member(current_caller(container.identity), club_id, user_id)
        return ok(message="Student removed from CCA")

    @app.route("/api/enrollments/my-ccas", methods=["GET"], endpoint="my_ccas")
    @json_endpoint
    def my_ccas():
        clubs = memberships.my_clubs(current_caller(container.identity))
        return ok([c.to_dict() for c in clubs], count=len(clubs))
