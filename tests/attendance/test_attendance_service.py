from __future__ import annotations

from datetime import date, datetime, time

import pytest

from cca_hub.attendance.service import AttendanceService
from cca_hub.core.enums import DenyReason, EventStatus, Role
from cca_hub.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from cca_hub.events.model import Event
from cca_hub.sessions.model import SessionInput
from cca_hub.users.model import User
from conftest import CLUB_A, InMemoryAttendance, InMemoryEvents, InMemorySessions, InMemoryUsers


@pytest.fixture
def stores():
    events = InMemoryEvents()
    attendance = InMemoryAttendance(events)
    sessions = InMemorySessions(attendance)
    users = InMemoryUsers(
        *(User(user_id=f"stu-{i}", username=f"s{i}", full_name=f"Student {i}", password_hash="", role=Role.STUDENT) for i in (1, 2, 3))
    )

    session = sessions.create(
        club_id=CLUB_A,
        data=SessionInput(title="Practice", date=date(2030, 1, 6), start_time=time(18), end_time=time(20)),
    )
    attendance.create_for_session(session.session_id, ["stu-1", "stu-2", "stu-3"])

    events.add(
        Event(
            event_id="e1",
            club_id=CLUB_A,
            title="Showcase",
            date=date(2030, 1, 20),
            start_time=time(19),
            end_time=time(21),
            location="Theatre",
            status=EventStatus.PUBLISHED,
        )
    )
    for uid in ("stu-1", "stu-2"):
        attendance.register_for_event(event_id="e1", user_id=uid, now=datetime(2030, 1, 1))

    return session.session_id, attendance, AttendanceService(attendance, sessions, events, users)


def test_mark_session_sets_everyone_else_absent(stores, club_admin):
    session_id, attendance, svc = stores
    svc.mark_session(club_admin, session_id, ["stu-1", "stu-3"])

    marked = svc.mark_session(club_admin, session_id, ["stu-2"])

    by_user = {r.user_id: r for r in attendance.list_for_session(session_id)}
    assert marked == 1
    assert by_user["stu-2"].attended and by_user["stu-2"].marked_by == club_admin.user_id
    assert not by_user["stu-1"].attended and by_user["stu-1"].marked_by is None
    assert not by_user["stu-3"].attended


def test_session_sheet_has_students_and_summary(stores, club_admin):
    session_id, _, svc = stores
    svc.mark_session(club_admin, session_id, ["stu-1", "stu-2"])

    sheet = svc.session_sheet(club_admin, session_id)

    assert sheet.summary.to_dict() == {
        "total": 3,
        "total_marked": 3,
        "attended": 2,
        "absent": 1,
        "attendance_rate": 66.67,
    }
    assert {row["student"]["name"] for row in sheet.rows()} == {"Student 1", "Student 2", "Student 3"}


def test_user_ids_must_be_a_list(stores, club_admin):
    session_id, _, svc = stores
    with pytest.raises(ValidationError):
        svc.mark_session(club_admin, session_id, "stu-1")


def test_other_admin_cannot_view_sheet(stores, other_club_admin):
    session_id, _, svc = stores
    with pytest.raises(AuthorizationError) as exc:
        svc.session_sheet(other_club_admin, session_id)
    assert exc.value.reason == DenyReason.FORBIDDEN_OWNERSHIP


def test_student_cannot_mark(stores, student):
    session_id, _, svc = stores
    with pytest.raises(AuthorizationError) as exc:
        svc.mark_session(student, session_id, [])
    assert exc.value.reason == DenyReason.FORBIDDEN_ROLE


def test_remove_session_record(stores, club_admin):
    session_id, attendance, svc = stores

    svc.remove_session_record(club_admin, session_id, "stu-3")

    assert len(attendance.list_for_session(session_id)) == 2
    with pytest.raises(NotFoundError):
        svc.remove_session_record(club_admin, session_id, "stu-3")


def test_mark_event_batch(stores, club_admin):
    _, attendance, svc = stores

    updated = svc.mark_event(
        club_admin,
        "e1",
        [{"user_id": "stu-1", "attended": True}, {"user_id": "stu-2", "attended": False}, {"user_id": "stu-9", "attended": True}],
    )

    assert updated == 2
    assert attendance.get_for_event_and_user("e1", "stu-1").attended
    assert attendance.get_for_event_and_user("e1", "stu-2").marked_by == club_admin.user_id


@pytest.mark.parametrize("payload", [None, [{"user_id": "stu-1"}], [{"user_id": "stu-1", "attended": "yes"}]])
def test_mark_event_rejects_bad_payload(stores, club_admin, payload):
    _, _, svc = stores
    with pytest.raises(ValidationError):
        svc.mark_event(club_admin, "e1", payload)


def test_mark_single_event_record(stores, club_admin):
    _, _, svc = stores

    record = svc.mark_event_one(club_admin, "e1", "stu-2", True)

    assert record.attended
    with pytest.raises(NotFoundError):
        svc.mark_event_one(club_admin, "e1", "stu-3", True)


def test_event_sheet(stores, club_admin):
    _, _, svc = stores
    svc.mark_event_one(club_admin, "e1", "stu-1", True)

    sheet = svc.event_sheet(club_admin, "e1")

    assert sheet.summary.attendance_rate == 50.0
    assert len(sheet.rows()) == 2


def test_sheet_for_missing_event(stores, club_admin):
    _, _, svc = stores
    with pytest.raises(AuthorizationError) as exc:
        svc.event_sheet(club_admin, "nope")
    assert exc.value.reason == DenyReason.NOT_FOUND
