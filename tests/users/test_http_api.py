from __future__ import annotations

from datetime import date, time, timedelta

import pytest
from werkzeug.security import generate_password_hash

from cca_hub.analytics.service import AnalyticsService
from cca_hub.attendance.service import AttendanceService
from cca_hub.clubs.model import Club
from cca_hub.clubs.service import ClubService
from cca_hub.container import Container
from cca_hub.core.enums import Category, Commitment, EventStatus, Role
from cca_hub.events.model import Event
from cca_hub.events.service import EventService
from cca_hub.main import create_app
from cca_hub.memberships.service import MembershipService
from cca_hub.sessions.service import SessionService
from cca_hub.users.model import User
from cca_hub.users.service import AccountService, AuthService, IdentityProvider
from conftest import (
    CLUB_A,
    InMemoryAttendance,
    InMemoryClubs,
    InMemoryEvents,
    InMemoryMemberships,
    InMemorySessions,
    InMemoryUsers,
)

PASSWORD = "secret123"


def _user(user_id, username, role, owned=None, active=True):
    return User(
        user_id=user_id,
        username=username,
        full_name=username.title(),
        password_hash=generate_password_hash(PASSWORD),
        role=role,
        is_active=active,
        owned_club_id=owned,
    )


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")

    events = InMemoryEvents()
    attendance = InMemoryAttendance(events)
    events._attendance = attendance
    sessions = InMemorySessions(attendance)
    memberships = InMemoryMemberships()
    clubs = InMemoryClubs(Club(club_id=CLUB_A, name="Chess", category=Category.ACADEMIC, commitment=Commitment.FLEXIBLE))
    users = InMemoryUsers(
        _user("stu-1", "student", Role.STUDENT),
        _user("adm-a", "admin", Role.CCA_ADMIN, owned=CLUB_A),
        _user("sys-1", "root", Role.SYSTEM_ADMIN),
        _user("old-1", "retired", Role.STUDENT, active=False),
    )
    events.add(
        Event(
            event_id="e1",
            club_id=CLUB_A,
            title="Simul",
            date=date(2030, 6, 1),
            start_time=time(14),
            end_time=time(17),
            location="Library",
            status=EventStatus.PUBLISHED,
            max_attendees=10,
        )
    )

    container = Container(
        conn=None,
        mongo=None,
        users_repo=users,
        clubs_repo=clubs,
        memberships_repo=memberships,
        sessions_repo=sessions,
        events_repo=events,
        attendance_repo=attendance,
        identity=IdentityProvider(users),
        auth_service=AuthService(users),
        account_service=AccountService(users, clubs),
        club_service=ClubService(clubs, memberships, sessions, events, users),
        membership_service=MembershipService(memberships, clubs, users),
        session_service=SessionService(sessions, clubs, memberships, attendance),
        event_service=EventService(events, clubs, attendance),
        attendance_service=AttendanceService(attendance, sessions, events, users),
        analytics_service=AnalyticsService(clubs, memberships, sessions, events, attendance),
    )
    app = create_app(container)
    return app.test_client()


def _login(client, username):
    return client.post("/api/auth/login", json={"username": username, "password": PASSWORD})


def test_login_and_me(client):
    resp = _login(client, "admin")
    assert resp.status_code == 200
    assert resp.get_json()["data"]["cca_id"] == CLUB_A

    me = client.get("/api/me").get_json()["data"]
    assert me["role"] == "cca_admin"


def test_bad_password_is_401(client):
    resp = client.post("/api/auth/login", json={"username": "student", "password": "nope"})
    assert resp.status_code == 401
    assert resp.get_json()["success"] is False


def test_inactive_user_cannot_log_in(client):
    assert _login(client, "retired").status_code == 401


def test_anonymous_write_is_401_with_reason(client):
    resp = client.post("/api/events/e1/register")
    body = resp.get_json()
    assert resp.status_code == 401
    assert body["reason"] == "unauthenticated"


def test_student_registers_then_duplicate_is_400(client):
    _login(client, "student")

    first = client.post("/api/events/e1/register")
    second = client.post("/api/events/e1/register")

    assert first.status_code == 200
    assert first.get_json()["data"]["event_id"] == "e1"
    assert second.status_code == 400
    assert second.get_json()["reason"] == "duplicate_registration"
    assert second.get_json()["error"] == "You are already registered for this event"


def test_student_cannot_delete_club(client):
    _login(client, "student")
    resp = client.delete(f"/api/ccas/{CLUB_A}")
    assert resp.status_code == 403
    assert resp.get_json()["reason"] == "forbidden_role"


def test_missing_club_is_404(client):
    _login(client, "root")
    resp = client.put("/api/ccas/missing", json={"name": "X"})
    assert resp.status_code == 404


def test_validation_error_is_400(client):
    _login(client, "admin")
    resp = client.post("/api/sessions", json={"cca_id": CLUB_A, "date": "2030-01-01", "start_time": "9am"})
    assert resp.status_code == 400
    assert "start_time" in resp.get_json()["error"]


def test_public_club_listing(client):
    resp = client.get("/api/ccas?category=Academic")
    body = resp.get_json()
    assert resp.status_code == 200
    assert body["count"] == 1
    assert body["data"][0]["name"] == "Chess"


def test_events_listing_shows_registration_state(client):
    _login(client, "student")
    client.post("/api/events/e1/register")

    body = client.get("/api/events").get_json()

    assert body["pagination"]["total"] == 1
    assert body["data"][0]["is_registered"] is True
    assert body["data"][0]["spots_remaining"] == 9


def test_analytics_endpoint_and_export(client):
    _login(client, "admin")

    data = client.get(f"/api/cca-admin/{CLUB_A}/analytics").get_json()["data"]
    export = client.get(f"/api/cca-admin/{CLUB_A}/analytics/export?format=csv")

    assert set(data) == {"memberCount", "sessionCount", "eventCount", "averageAttendance", "trendData"}
    assert export.status_code == 200
    assert export.headers["Content-Disposition"].startswith("attachment;")


def test_logout_clears_session(client):
    _login(client, "student")
    client.post("/api/logout")
    assert client.get("/api/me").status_code == 401


def test_login_leaves_session_lifetime_alone(client):
    app = client.application
    assert app.permanent_session_lifetime == timedelta(days=7)

    app.permanent_session_lifetime = timedelta(hours=1)
    client.post("/api/auth/login", json={"username": "student", "password": PASSWORD, "remember_me": True})

    assert app.permanent_session_lifetime == timedelta(hours=1)


def test_system_admin_sets_up_admin_for_new_club(client):
    _login(client, "root")
    new_club = client.post("/api/ccas", json={"name": "Robotics", "category": "Academic", "commitment": "Flexible"})
    club_id = new_club.get_json()["data"]["_id"]

    created = client.post(
        "/api/admin/create-user",
        json={"username": "robo", "password": "robo1234", "full_name": "Robo Admin", "role": "cca_admin"},
    )
    assigned = client.post("/api/admin/update-cca-id", json={"username": "robo", "cca_id": club_id})
    lookup = client.get(f"/api/admin/cca-user/{club_id}")

    assert created.status_code == 201
    assert created.get_json()["data"]["cca_id"] is None
    assert assigned.status_code == 200
    assert lookup.get_json()["data"]["username"] == "robo"

    client.post("/api/logout")
    client.post("/api/auth/login", json={"username": "robo", "password": "robo1234"})
    resp = client.post("/api/sessions", json={"cca_id": club_id, "date": "2030-01-01", "start_time": "09:00", "end_time": "10:00"})
    assert resp.status_code == 201


def test_admin_routes_refuse_students(client):
    _login(client, "student")

    resp = client.get("/api/admin/students")

    assert resp.status_code == 403
    assert resp.get_json()["reason"] == "forbidden_role"


def test_admin_lists_and_edits_students(client):
    _login(client, "root")

    listing = client.get("/api/admin/students").get_json()
    updated = client.put("/api/admin/students/stu-1", json={"name": "Stu Dent", "student_id": "A042"})

    assert [s["username"] for s in listing["data"]] == ["retired", "student"]
    assert updated.get_json()["data"]["student_id"] == "A042"
    assert client.get("/api/admin/students/stu-1").get_json()["data"]["name"] == "Stu Dent"
    assert client.get("/api/admin/students/adm-a").status_code == 404


def test_user_changes_own_password(client):
    _login(client, "student")

    wrong = client.post("/api/user/update-password", json={"oldPassword": "nope", "newPassword": "another1"})
    right = client.post("/api/user/update-password", json={"oldPassword": PASSWORD, "newPassword": "another1"})

    assert wrong.status_code == 400
    assert right.status_code == 200
    client.post("/api/logout")
    assert client.post("/api/auth/login", json={"username": "student", "password": "another1"}).status_code == 200
