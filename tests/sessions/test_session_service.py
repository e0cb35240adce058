from __future__ import annotations

import logging
from datetime import date, time

import pytest

from cca_hub.clubs.model import Club
from cca_hub.core.enums import Category, Commitment, DenyReason
from cca_hub.core.exceptions import AuthorizationError, ValidationError
from cca_hub.sessions.service import SessionService
from conftest import CLUB_A, InMemoryAttendance, InMemoryClubs, InMemoryMemberships, InMemorySessions

PAYLOAD = {"title": "Training", "date": "2030-02-03", "start_time": "18:00", "end_time": "20:00", "location": "Pool"}


class BrokenAttendance(InMemoryAttendance):
    def create_for_session(self, session_id, user_ids):
        raise RuntimeError("connection lost")


def _service(attendance=None):
    attendance = attendance or InMemoryAttendance()
    clubs = InMemoryClubs(Club(club_id=CLUB_A, name="Swim", category=Category.SPORTS, commitment=Commitment.FLEXIBLE))
    memberships = InMemoryMemberships()
    memberships.create(club_id=CLUB_A, user_id="stu-1")
    memberships.create(club_id=CLUB_A, user_id="stu-2")
    sessions = InMemorySessions(attendance)
    return sessions, attendance, SessionService(sessions, clubs, memberships, attendance)


def test_new_session_puts_every_member_on_the_sheet(club_admin):
    _, attendance, svc = _service()

    session = svc.create_session(club_admin, CLUB_A, PAYLOAD)

    rows = attendance.list_for_session(session.session_id)
    assert sorted(r.user_id for r in rows) == ["stu-1", "stu-2"]
    assert not any(r.attended for r in rows)
    assert session.date == date(2030, 2, 3)
    assert session.start_time == time(18, 0)


def test_attendance_failure_keeps_the_session(club_admin, caplog):
    sessions, _, svc = _service(BrokenAttendance())

    with caplog.at_level(logging.ERROR, logger="cca_hub"):
        session = svc.create_session(club_admin, CLUB_A, PAYLOAD)

    assert sessions.get_by_id(session.session_id) is not None
    assert "Could not create attendance rows" in caplog.text


def test_other_admin_cannot_create(other_club_admin):
    _, _, svc = _service()
    with pytest.raises(AuthorizationError) as exc:
        svc.create_session(other_club_admin, CLUB_A, PAYLOAD)
    assert exc.value.reason == DenyReason.FORBIDDEN_OWNERSHIP


def test_create_for_missing_club_is_not_found(club_admin):
    _, _, svc = _service()
    with pytest.raises(AuthorizationError) as exc:
        svc.create_session(club_admin, "missing", PAYLOAD)
    assert exc.value.reason == DenyReason.NOT_FOUND


@pytest.mark.parametrize(
    "change",
    [{"date": ""}, {"date": "03/02/2030"}, {"start_time": "6pm"}, {"end_time": "17:00"}],
)
def test_invalid_session_payload(club_admin, change):
    _, _, svc = _service()
    with pytest.raises(ValidationError):
        svc.create_session(club_admin, CLUB_A, {**PAYLOAD, **change})


def test_update_merges_with_existing(club_admin):
    _, _, svc = _service()
    session = svc.create_session(club_admin, CLUB_A, PAYLOAD)

    updated = svc.update_session(club_admin, session.session_id, {"location": "Gym"})

    assert updated.location == "Gym"
    assert updated.title == "Training"


def test_delete_removes_attendance(club_admin):
    sessions, attendance, svc = _service()
    session = svc.create_session(club_admin, CLUB_A, PAYLOAD)

    svc.delete_session(club_admin, session.session_id)

    assert sessions.get_by_id(session.session_id) is None
    assert attendance.list_for_session(session.session_id) == []


def test_listing_counts_attendees_and_members(club_admin):
    _, attendance, svc = _service()
    session = svc.create_session(club_admin, CLUB_A, PAYLOAD)
    attendance.set_session_attendance(session_id=session.session_id, attendee_ids=["stu-1"], marked_by="adm-a", now=None)

    items, total = svc.list_sessions(club_admin, club_id=CLUB_A, limit=20, offset=0)

    assert total == 1
    assert items[0].to_dict()["attendance_count"] == 1
    assert items[0].to_dict()["total_members"] == 2


def test_listing_needs_a_caller():
    _, _, svc = _service()
    with pytest.raises(AuthorizationError) as exc:
        svc.list_sessions(None, club_id=CLUB_A, limit=20, offset=0)
    assert exc.value.reason == DenyReason.UNAUTHENTICATED
