from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import utc_now
from ..core.enums import EventStatus, RegistrationOutcome
from ..database.connection import DatabaseConnection
from ..database.mysql_base import count, db_cursor, fetchall, fetchone, in_clause, new_id
from .model import AttendanceMark, AttendanceRecord, Registration
from .repository import AttendanceRepository

_COLUMNS = "id, user_id, session_id, event_id, attended, marked_by, marked_at, created_at"


def _to_record(row: dict) -> AttendanceRecord:
    session_id = row.get("session_id")
    event_id = row.get("event_id")
    return AttendanceRecord(
        record_id=str(row["id"]),
        user_id=str(row["user_id"]),
        attended=bool(row.get("attended")),
        session_id=str(session_id) if session_id is not None else None,
        event_id=str(event_id) if event_id is not None else None,
        marked_by=row.get("marked_by"),
        marked_at=row.get("marked_at"),
        created_at=row.get("created_at"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_session(self, session_id: str) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance WHERE session_id=%s ORDER BY marked_at ASC, created_at ASC",
                (session_id,),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_for_event(self, event_id: str) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance WHERE event_id=%s ORDER BY created_at ASC",
                (event_id,),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_for_activities(
        self,
        *,
        session_ids: Sequence[str],
        event_ids: Sequence[str],
    ) -> Sequence[AttendanceRecord]:
        clauses: list[str] = []
        params: list[object] = []
        if session_ids:
            clauses.append(f"session_id IN ({in_clause(session_ids)})")
            params.extend(session_ids)
        if event_ids:
            clauses.append(f"event_id IN ({in_clause(event_ids)})")
            params.extend(event_ids)
        if not clauses:
            return []

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance WHERE {' OR '.join(clauses)}", tuple(params))
            return [_to_record(r) for r in fetchall(cur)]

    def get_for_event_and_user(self, event_id: str, user_id: str) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance WHERE event_id=%s AND user_id=%s",
                (event_id, user_id),
            )
            row = fetchone(cur)
            return _to_record(row) if row else None

    def attended_counts(self, session_ids: Sequence[str]) -> dict[str, int]:
        if not session_ids:
            return {}
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT session_id, COUNT(*) AS n
                FROM attendance
                WHERE attended=1 AND session_id IN ({in_clause(session_ids)})
                GROUP BY session_id
                """,
                tuple(session_ids),
            )
            return {str(r["session_id"]): int(r["n"]) for r in fetchall(cur)}

    def registration_counts(self, event_ids: Sequence[str]) -> dict[str, int]:
        if not event_ids:
            return {}
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT event_id, COUNT(*) AS n
                FROM attendance
                WHERE event_id IN ({in_clause(event_ids)})
                GROUP BY event_id
                """,
                tuple(event_ids),
            )
            return {str(r["event_id"]): int(r["n"]) for r in fetchall(cur)}

    def registered_event_ids(self, user_id: str, event_ids: Sequence[str]) -> set[str]:
        if not event_ids:
            return set()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT event_id FROM attendance WHERE user_id=%s AND event_id IN ({in_clause(event_ids)})",
                (user_id, *event_ids),
            )
            return {str(r["event_id"]) for r in fetchall(cur)}

    def create_for_session(self, session_id: str, user_ids: Sequence[str]) -> int:
        if not user_ids:
            return 0
        now = utc_now()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                """
                INSERT IGNORE INTO attendance(id, user_id, session_id, event_id, attended, created_at)
                VALUES(%s,%s,%s,NULL,0,%s)
                """,
                [(new_id(), uid, session_id, now) for uid in user_ids],
            )
            return int(cur.rowcount)

    def register_for_event(self, *, event_id: str, user_id: str, now: datetime) -> Registration:
        with db_cursor(self._conn_factory) as (_, cur):
            # The row lock serialises concurrent registrations for the same event,
            # so the capacity count below cannot go stale before the insert.
            cur.execute(
                "SELECT max_attendees, registration_deadline, status FROM events WHERE id=%s FOR UPDATE",
                (event_id,),
            )
            event = fetchone(cur)
            if not event:
                return Registration(RegistrationOutcome.EVENT_MISSING)
            if event["status"] != EventStatus.PUBLISHED.value:
                return Registration(RegistrationOutcome.EVENT_NOT_OPEN)

            cur.execute("SELECT id FROM attendance WHERE event_id=%s AND user_id=%s", (event_id, user_id))
            if fetchone(cur):
                return Registration(RegistrationOutcome.ALREADY_REGISTERED)

            deadline = event.get("registration_deadline")
            if deadline is not None and now > deadline:
                return Registration(RegistrationOutcome.DEADLINE_PASSED)

            max_attendees = event.get("max_attendees")
            if max_attendees:
                taken = count(cur, "SELECT COUNT(*) AS n FROM attendance WHERE event_id=%s", (event_id,))
                if taken >= int(max_attendees):
                    return Registration(RegistrationOutcome.CAPACITY_REACHED)

            record = AttendanceRecord(
                record_id=new_id(),
                user_id=user_id,
                attended=False,
                event_id=event_id,
                created_at=now,
            )
            cur.execute(
                """
                INSERT INTO attendance(id, user_id, session_id, event_id, attended, created_at)
                VALUES(%s,%s,NULL,%s,0,%s)
                """,
                (record.record_id, user_id, event_id, now),
            )
            return Registration(RegistrationOutcome.REGISTERED, record)

    def set_session_attendance(
        self,
        *,
        session_id: str,
        attendee_ids: Sequence[str],
        marked_by: str,
        now: datetime,
    ) -> int:
        ids = list(dict.fromkeys(attendee_ids))
        with db_cursor(self._conn_factory) as (_, cur):
            marked = 0
            if ids:
                cur.execute(
                    f"""
                    UPDATE attendance SET attended=1, marked_by=%s, marked_at=%s
                    WHERE session_id=%s AND user_id IN ({in_clause(ids)})
                    """,
                    (marked_by, now, session_id, *ids),
                )
                marked = int(cur.rowcount)
                cur.execute(
                    f"""
                    UPDATE attendance SET attended=0, marked_by=NULL, marked_at=NULL
                    WHERE session_id=%s AND user_id NOT IN ({in_clause(ids)})
                    """,
                    (session_id, *ids),
                )
            else:
                cur.execute(
                    "UPDATE attendance SET attended=0, marked_by=NULL, marked_at=NULL WHERE session_id=%s",
                    (session_id,),
                )
            return marked

    def delete_for_session_and_user(self, session_id: str, user_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance WHERE session_id=%s AND user_id=%s", (session_id, user_id))
            return cur.rowcount > 0

    def mark_event(
        self,
        *,
        event_id: str,
        marks: Sequence[AttendanceMark],
        marked_by: str,
        now: datetime,
    ) -> int:
        if not marks:
            return 0
        updated = 0
        with db_cursor(self._conn_factory) as (_, cur):
            for mark in marks:
                cur.execute(
                    """
                    UPDATE attendance SET attended=%s, marked_by=%s, marked_at=%s
                    WHERE event_id=%s AND user_id=%s
                    """,
                    (1 if mark.attended else 0, marked_by, now, event_id, mark.user_id),
                )
                updated += int(cur.rowcount)
        return updated
