from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional

import pytest

from cca_hub.access.model import Caller
from cca_hub.attendance.model import AttendanceMark, AttendanceRecord, Registration
from cca_hub.core.enums import EventStatus, RegistrationOutcome, Role
from cca_hub.events.model import Event, EventInput
from cca_hub.memberships.model import Membership
from cca_hub.sessions.model import Session, SessionInput
from cca_hub.users.model import StudentProfile, User

CLUB_A = "club-a"
CLUB_B = "club-b"


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 3, 2, 9, 0, 0)


@pytest.fixture
def student() -> Caller:
    return Caller(user_id="stu-1", role=Role.STUDENT)


@pytest.fixture
def club_admin() -> Caller:
    return Caller(user_id="adm-a", role=Role.CCA_ADMIN, owned_club_id=CLUB_A)


@pytest.fixture
def other_club_admin() -> Caller:
    return Caller(user_id="adm-b", role=Role.CCA_ADMIN, owned_club_id=CLUB_B)


@pytest.fixture
def system_admin() -> Caller:
    return Caller(user_id="sys-1", role=Role.SYSTEM_ADMIN)


class InMemoryClubs:
    def __init__(self, *clubs):
        self.docs = {c.club_id: c for c in clubs}

    def list(self, *, category=None, commitment=None):
        items = [
            c
            for c in self.docs.values()
            if (category is None or c.category == category) and (commitment is None or c.commitment == commitment)
        ]
        return sorted(items, key=lambda c: c.name)

    def get_by_id(self, club_id):
        return self.docs.get(club_id)

    def insert(self, club):
        self.docs[club.club_id] = club
        return club.club_id

    def replace(self, club):
        if club.club_id not in self.docs:
            return False
        self.docs[club.club_id] = club
        return True

    def delete(self, club_id):
        return self.docs.pop(club_id, None) is not None


class InMemoryUsers:
    def __init__(self, *users: User):
        self.by_id = {u.user_id: u for u in users}

    def get_by_id(self, user_id) -> Optional[User]:
        return self.by_id.get(user_id)

    def get_by_username(self, username) -> Optional[User]:
        return next((u for u in self.by_id.values() if u.username == username), None)

    def get_by_email(self, email) -> Optional[User]:
        return next((u for u in self.by_id.values() if u.email == email), None)

    def get_profiles(self, user_ids):
        return {
            uid: StudentProfile(user_id=uid, name=self.by_id[uid].full_name, student_id=self.by_id[uid].student_id or "N/A", email="")
            for uid in user_ids
            if uid in self.by_id
        }

    def create_user(self, *, username, full_name, password_hash, role, email=None, student_id=None, cca_id=None):
        user = User(
            user_id=f"u{len(self.by_id) + 1}",
            username=username,
            full_name=full_name,
            password_hash=password_hash,
            role=role,
            email=email,
            student_id=student_id,
            owned_club_id=cca_id if role == Role.CCA_ADMIN else None,
        )
        self.by_id[user.user_id] = user
        return user

    def update_account(self, user_id, **fields):
        if user_id not in self.by_id:
            return False
        self.by_id[user_id] = replace(self.by_id[user_id], **fields)
        return True

    def list_students(self):
        return sorted((u for u in self.by_id.values() if u.role == Role.STUDENT), key=lambda u: u.full_name)

    def assign_club(self, user_id, club_id):
        self.by_id[user_id] = replace(self.by_id[user_id], owned_club_id=club_id)

    def get_club_admin(self, club_id):
        admins = sorted((u for u in self.by_id.values() if u.owned_club_id == club_id), key=lambda u: u.username)
        return admins[0] if admins else None

    def unassign_club(self, club_id):
        n = 0
        for uid, u in list(self.by_id.items()):
            if u.owned_club_id == club_id:
                self.by_id[uid] = replace(u, owned_club_id=None)
                n += 1
        return n


class InMemoryMemberships:
    def __init__(self):
        self.rows: list[Membership] = []

    def get(self, *, club_id, user_id):
        return next((m for m in self.rows if m.club_id == club_id and m.user_id == user_id), None)

    def list(self, *, club_id=None, user_id=None):
        return [
            m
            for m in self.rows
            if (club_id is None or m.club_id == club_id) and (user_id is None or m.user_id == user_id)
        ]

    def count_for_club(self, club_id):
        return len(self.list(club_id=club_id))

    def create(self, *, club_id, user_id):
        m = Membership(membership_id=f"m{len(self.rows) + 1}", club_id=club_id, user_id=user_id)
        self.rows.append(m)
        return m

    def delete(self, *, club_id, user_id):
        before = len(self.rows)
        self.rows = [m for m in self.rows if not (m.club_id == club_id and m.user_id == user_id)]
        return len(self.rows) < before

    def delete_for_club(self, club_id):
        before = len(self.rows)
        self.rows = [m for m in self.rows if m.club_id != club_id]
        return before - len(self.rows)


class InMemorySessions:
    def __init__(self, attendance: Optional["InMemoryAttendance"] = None):
        self.by_id: dict[str, Session] = {}
        self._attendance = attendance

    def get_by_id(self, session_id):
        return self.by_id.get(session_id)

    def list_page(self, *, club_id, limit, offset):
        items = [s for s in self.by_id.values() if club_id is None or s.club_id == club_id]
        items.sort(key=lambda s: (s.date, s.start_time), reverse=True)
        return items[offset : offset + limit], len(items)

    def list_for_club(self, club_id):
        return sorted((s for s in self.by_id.values() if s.club_id == club_id), key=lambda s: (s.date, s.start_time))

    def create(self, *, club_id, data: SessionInput):
        s = Session(
            session_id=f"s{len(self.by_id) + 1}",
            club_id=club_id,
            title=data.title,
            date=data.date,
            start_time=data.start_time,
            end_time=data.end_time,
            location=data.location,
            notes=data.notes,
        )
        self.by_id[s.session_id] = s
        return s

    def update(self, *, session_id, data: SessionInput):
        s = self.by_id.get(session_id)
        if not s:
            return None
        self.by_id[session_id] = replace(
            s,
            title=data.title,
            date=data.date,
            start_time=data.start_time,
            end_time=data.end_time,
            location=data.location,
            notes=data.notes,
        )
        return self.by_id[session_id]

    def delete(self, session_id):
        if self._attendance:
            self._attendance.rows = [r for r in self._attendance.rows if r.session_id != session_id]
        return self.by_id.pop(session_id, None) is not None

    def delete_for_club(self, club_id):
        ids = [sid for sid, s in self.by_id.items() if s.club_id == club_id]
        for sid in ids:
            self.delete(sid)
        return len(ids)


class InMemoryEvents:
    def __init__(self, attendance: Optional["InMemoryAttendance"] = None):
        self.by_id: dict[str, Event] = {}
        self._attendance = attendance

    def add(self, event: Event) -> Event:
        self.by_id[event.event_id] = event
        return event

    def get_by_id(self, event_id):
        return self.by_id.get(event_id)

    def list_page(self, *, club_id, status, limit, offset):
        items = [
            e
            for e in self.by_id.values()
            if (club_id is None or e.club_id == club_id) and (status is None or e.status == status)
        ]
        items.sort(key=lambda e: (e.date, e.start_time))
        return items[offset : offset + limit], len(items)

    def list_for_club(self, club_id):
        return sorted((e for e in self.by_id.values() if e.club_id == club_id), key=lambda e: (e.date, e.start_time))

    def create(self, *, club_id, data: EventInput):
        return self.add(
            Event(
                event_id=f"e{len(self.by_id) + 1}",
                club_id=club_id,
                title=data.title,
                date=data.date,
                start_time=data.start_time,
                end_time=data.end_time,
                location=data.location,
                status=data.status,
                description=data.description,
                poster_url=data.poster_url,
                max_attendees=data.max_attendees,
                registration_deadline=data.registration_deadline,
            )
        )

    def update(self, *, event_id, data: EventInput):
        e = self.by_id.get(event_id)
        if not e:
            return None
        self.by_id[event_id] = replace(
            e,
            title=data.title,
            date=data.date,
            start_time=data.start_time,
            end_time=data.end_time,
            location=data.location,
            status=data.status,
            description=data.description,
            poster_url=data.poster_url,
            max_attendees=data.max_attendees,
            registration_deadline=data.registration_deadline,
        )
        return self.by_id[event_id]

    def delete(self, event_id):
        if self._attendance:
            self._attendance.rows = [r for r in self._attendance.rows if r.event_id != event_id]
        return self.by_id.pop(event_id, None) is not None

    def delete_for_club(self, club_id):
        ids = [eid for eid, e in self.by_id.items() if e.club_id == club_id]
        for eid in ids:
            self.delete(eid)
        return len(ids)


class InMemoryAttendance:
    """Mirrors the MySQL repository, including the guarded registration write."""

    def __init__(self, events: Optional[InMemoryEvents] = None):
        self.rows: list[AttendanceRecord] = []
        self.events = events

    def _next_id(self):
        return f"a{len(self.rows) + 1}"

    def list_for_session(self, session_id):
        return [r for r in self.rows if r.session_id == session_id]

    def list_for_event(self, event_id):
        return [r for r in self.rows if r.event_id == event_id]

    def list_for_activities(self, *, session_ids, event_ids):
        return [r for r in self.rows if r.session_id in session_ids or r.event_id in event_ids]

    def get_for_event_and_user(self, event_id, user_id):
        return next((r for r in self.rows if r.event_id == event_id and r.user_id == user_id), None)

    def attended_counts(self, session_ids):
        counts: dict[str, int] = {}
        for r in self.rows:
            if r.session_id in session_ids and r.attended:
                counts[r.session_id] = counts.get(r.session_id, 0) + 1
        return counts

    def registration_counts(self, event_ids):
        counts: dict[str, int] = {}
        for r in self.rows:
            if r.event_id in event_ids:
                counts[r.event_id] = counts.get(r.event_id, 0) + 1
        return counts

    def registered_event_ids(self, user_id, event_ids):
        return {r.event_id for r in self.rows if r.user_id == user_id and r.event_id in event_ids}

    def create_for_session(self, session_id, user_ids):
        created = 0
        for uid in user_ids:
            if any(r.session_id == session_id and r.user_id == uid for r in self.rows):
                continue
            self.rows.append(AttendanceRecord(record_id=self._next_id(), user_id=uid, attended=False, session_id=session_id))
            created += 1
        return created

    def register_for_event(self, *, event_id, user_id, now):
        event = self.events.get_by_id(event_id) if self.events else None
        if event is None:
            return Registration(RegistrationOutcome.EVENT_MISSING)
        if event.status != EventStatus.PUBLISHED:
            return Registration(RegistrationOutcome.EVENT_NOT_OPEN)
        if self.get_for_event_and_user(event_id, user_id):
            return Registration(RegistrationOutcome.ALREADY_REGISTERED)
        if event.registration_deadline is not None and now > event.registration_deadline:
            return Registration(RegistrationOutcome.DEADLINE_PASSED)
        if event.max_attendees and len(self.list_for_event(event_id)) >= event.max_attendees:
            return Registration(RegistrationOutcome.CAPACITY_REACHED)

        record = AttendanceRecord(record_id=self._next_id(), user_id=user_id, attended=False, event_id=event_id, created_at=now)
        self.rows.append(record)
        return Registration(RegistrationOutcome.REGISTERED, record)

    def _update(self, predicate, **changes):
        n = 0
        for i, r in enumerate(self.rows):
            if predicate(r):
                self.rows[i] = replace(r, **changes)
                n += 1
        return n

    def set_session_attendance(self, *, session_id, attendee_ids, marked_by, now):
        ids = set(attendee_ids)
        marked = self._update(
            lambda r: r.session_id == session_id and r.user_id in ids, attended=True, marked_by=marked_by, marked_at=now
        )
        self._update(
            lambda r: r.session_id == session_id and r.user_id not in ids, attended=False, marked_by=None, marked_at=None
        )
        return marked

    def delete_for_session_and_user(self, session_id, user_id):
        before = len(self.rows)
        self.rows = [r for r in self.rows if not (r.session_id == session_id and r.user_id == user_id)]
        return len(self.rows) < before

    def mark_event(self, *, event_id, marks: list[AttendanceMark], marked_by, now):
        n = 0
        for m in marks:
            n += self._update(
                lambda r, uid=m.user_id: r.event_id == event_id and r.user_id == uid,
                attended=m.attended,
                marked_by=marked_by,
                marked_at=now,
            )
        return n


class StubCursor:
    """Records statements; ``fetchone`` hands out the queued rows in order."""

    def __init__(self, rows):
        self.rows = list(rows)
        self.executed: list[tuple[str, object]] = []
        self.rowcount = 0

    def execute(self, sql, params=()):
        self.executed.append((" ".join(sql.split()), tuple(params)))

    def executemany(self, sql, seq_params):
        seq_params = list(seq_params)
        self.executed.append((" ".join(sql.split()), seq_params))
        self.rowcount = len(seq_params)

    def fetchone(self):
        return self.rows.pop(0) if self.rows else None

    def fetchall(self):
        rows, self.rows = self.rows, []
        return rows

    def close(self):
        pass

    def statements(self) -> list[str]:
        return [sql for sql, _ in self.executed]


class StubConnection:
    def __init__(self, cursor: StubCursor):
        self._cursor = cursor
        self.committed = False
        self.rolled_back = False

    def cursor(self, dictionary=True):
        return self._cursor

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        pass


class StubConnectionFactory:
    def __init__(self, *rows):
        self.cursor = StubCursor(rows)
        self.connection = StubConnection(self.cursor)

    def connect(self):
        return self.connection
