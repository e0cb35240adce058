from __future__ import annotations

from typing import Optional, Sequence

from ..common.datetime_utils import utc_now
from ..core.enums import EventStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import count, db_cursor, fetchall, fetchone, new_id, normalize_mysql_time
from .model import Event, EventInput
from .repository import EventRepository

_COLUMNS = """
    id, cca_id, title, description, date, start_time, end_time, location, poster_url,
    max_attendees, registration_deadline, status, created_at, updated_at
"""


def _to_event(row: dict) -> Event:
    max_attendees = row.get("max_attendees")
    return Event(
        event_id=str(row["id"]),
        club_id=str(row["cca_id"]),
        title=row["title"],
        date=row["date"],
        start_time=normalize_mysql_time(row["start_time"]),
        end_time=normalize_mysql_time(row["end_time"]),
        location=row["location"],
        status=EventStatus(row["status"]),
        description=row.get("description"),
        poster_url=row.get("poster_url"),
        max_attendees=int(max_attendees) if max_attendees is not None else None,
        registration_deadline=row.get("registration_deadline"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


class MySQLEventRepository(EventRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, event_id: str) -> Optional[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM events WHERE id=%s", (event_id,))
            row = fetchone(cur)
            return _to_event(row) if row else None

    def list_page(
        self,
        *,
        club_id: Optional[str],
        status: Optional[EventStatus],
        limit: int,
        offset: int,
    ) -> tuple[Sequence[Event], int]:
        clauses: list[str] = []
        params: list[object] = []
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        if club_id:
            clauses.append("cca_id=%s")
            params.append(club_id)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_cursor(self._conn_factory) as (_, cur):
            total = count(cur, f"SELECT COUNT(*) AS n FROM events {where}", params)
            cur.execute(
                f"SELECT {_COLUMNS} FROM events {where} ORDER BY date ASC, start_time ASC LIMIT %s OFFSET %s",
                tuple(params) + (int(limit), int(offset)),
            )
            return [_to_event(r) for r in fetchall(cur)], total

    def list_for_club(self, club_id: str) -> Sequence[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM events WHERE cca_id=%s ORDER BY date ASC, start_time ASC",
                (club_id,),
            )
            return [_to_event(r) for r in fetchall(cur)]

    def create(self, *, club_id: str, data: EventInput) -> Event:
        event_id = new_id()
        now = utc_now()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO events(
                    id, cca_id, title, description, date, start_time, end_time, location, poster_url,
                    max_attendees, registration_deadline, status, created_at, updated_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    event_id,
                    club_id,
                    data.title,
                    data.description,
                    data.date,
                    data.start_time,
                    data.end_time,
                    data.location,
                    data.poster_url,
                    data.max_attendees,
                    data.registration_deadline,
                    data.status.value,
                    now,
                    now,
                ),
            )
        return Event(
            event_id=event_id,
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
            created_at=now,
            updated_at=now,
        )

    def update(self, *, event_id: str, data: EventInput) -> Optional[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE events
                SET title=%s, description=%s, date=%s, start_time=%s, end_time=%s, location=%s,
                    poster_url=%s, max_attendees=%s, registration_deadline=%s, status=%s
                WHERE id=%s
                """,
                (
                    data.title,
                    data.description,
                    data.date,
                    data.start_time,
                    data.end_time,
                    data.location,
                    data.poster_url,
                    data.max_attendees,
                    data.registration_deadline,
                    data.status.value,
                    event_id,
                ),
            )
        return self.get_by_id(event_id)

    def delete(self, event_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM events WHERE id=%s", (event_id,))
            return cur.rowcount > 0

    def delete_for_club(self, club_id: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM events WHERE cca_id=%s", (club_id,))
            return int(cur.rowcount)
