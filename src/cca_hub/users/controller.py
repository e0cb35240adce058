from __future__ import annotations

from flask import Flask, session

from ..common.http import current_caller, fail, json_body, json_endpoint, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    @json_endpoint
    def login():
        body = json_body()
        s_user = container.auth_service.authenticate(str(body.get("username", "")), str(body.get("password", "")))

        session.clear()
        session.permanent = bool(body.get("remember_me"))
        session["user_id"] = s_user.user_id
        session["name"] = s_user.full_name
        session["role"] = s_user.role.value

        return ok(
            {
                "user_id": s_user.user_id,
                "name": s_user.full_name,
                "role": s_user.role.value,
                "cca_id": s_user.owned_club_id,
            }
        )

    @app.route("/api/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return ok(message="Logged out")

    @app.route("/api/me", methods=["GET"], endpoint="me")
    @json_endpoint
    def me():
        caller = current_caller(container.identity)
        if caller is None:
            return fail("Unauthorized - Please log in", 401)
        return ok(
            {
                "user_id": caller.user_id,
                "name": session.get("name"),
                "role": caller.role.value,
                "cca_id": caller.owned_club_id,
            }
        )

    @app.route("/api/user/update-password", methods=["POST"], endpoint="update_password")
    @json_endpoint
    def update_password():
        body = json_body()
        container.account_service.change_password(
            current_caller(container.identity),
            old_password=str(body.get("oldPassword") or ""),
            new_password=str(body.get("newPassword") or ""),
        )
        return ok(message="Password updated")

    @app.route("/api/admin/create-user", methods=["POST"], endpoint="admin_create_user")
    @json_endpoint
    def admin_create_user():
        body = json_body()
        user = container.account_service.create_account(
            current_caller(container.identity),
            username=str(body.get("username") or ""),
            password=str(body.get("password") or ""),
            full_name=str(body.get("full_name") or ""),
            role=body.get("role"),
            email=body.get("email"),
            student_id=body.get("student_id"),
            cca_id=body.get("cca_id"),
        )
        return ok(user.to_dict(), status=201)

    @app.route("/api/admin/update-cca-id", methods=["POST"], endpoint="admin_update_cca_id")
    @json_endpoint
    def admin_update_cca_id():
        body = json_body()
        user = container.account_service.assign_club(
            current_caller(container.identity),
            username=str(body.get("username") or ""),
            cca_id=str(body.get("cca_id") or ""),
        )
        return ok(user.to_dict(), message=f"Updated CCA ID for {user.username} to {user.owned_club_id}")

    @app.route("/api/admin/cca-user/<cca_id>", methods=["GET"], endpoint="admin_get_cca_user")
    @json_endpoint
    def admin_get_cca_user(cca_id: str):
        admin = container.account_service.get_club_admin(current_caller(container.identity), cca_id)
        return ok(admin.to_dict())

    @app.route("/api/admin/cca-user/<cca_id>", methods=["PUT"], endpoint="admin_update_cca_user")
    @json_endpoint
    def admin_update_cca_user(cca_id: str):
        body = json_body()
        user = container.account_service.update_club_admin(
            current_caller(container.identity),
            cca_id,
            email=body.get("email"),
            password=body.get("password"),
        )
        return ok(user.to_dict())

    @app.route("/api/admin/students", methods=["GET"], endpoint="admin_students")
    @json_endpoint
    def admin_students():
        students = container.account_service.list_students(current_caller(container.identity))
        return ok([s.to_dict() for s in students], count=len(students))

    @app.route("/api/admin/students/<user_id>", methods=["GET"], endpoint="admin_get_student")
    @json_endpoint
    def admin_get_student(user_id: str):
        student = container.account_service.get_student(current_caller(container.identity), user_id)
        return ok(student.to_dict())

    @app.route("/api/admin/students/<user_id>", methods=["PUT"], endpoint="admin_update_student")
    @json_endpoint
    def admin_update_student(user_id: str):
        body = json_body()
        user = container.account_service.update_student(
            current_caller(container.identity),
            user_id,
            full_name=body.get("name"),
            student_id=body.get("student_id"),
            email=body.get("email"),
            password=body.get("password"),
        )
        return ok(user.to_dict())
