from __future__ import annotations

from typing import Optional, Sequence

from ..common.datetime_utils import utc_now
from ..database.connection import DatabaseConnection
from ..database.mysql_base import count, db_cursor, fetchall, fetchone, new_id, normalize_mysql_time
from .model import Session, SessionInput
from .repository import SessionRepository

_COLUMNS = "id, cca_id, title, date, start_time, end_time, location, notes, created_at"


def _to_session(row: dict) -> Session:
    return Session(
        session_id=str(row["id"]),
        club_id=str(row["cca_id"]),
        title=row.get("title"),
        date=row["date"],
        start_time=normalize_mysql_time(row["start_time"]),
        end_time=normalize_mysql_time(row["end_time"]),
        location=row.get("location"),
        notes=row.get("notes"),
        created_at=row.get("created_at"),
    )


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, session_id: str) -> Optional[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM sessions WHERE id=%s", (session_id,))
            row = fetchone(cur)
            return _to_session(row) if row else None

    def list_page(self, *, club_id: Optional[str], limit: int, offset: int) -> tuple[Sequence[Session], int]:
        where = "WHERE cca_id=%s" if club_id else ""
        params: tuple = (club_id,) if club_id else ()

        with db_cursor(self._conn_factory) as (_, cur):
            total = count(cur, f"SELECT COUNT(*) AS n FROM sessions {where}", params)
            cur.execute(
                f"SELECT {_COLUMNS} FROM sessions {where} ORDER BY date DESC, start_time DESC LIMIT %s OFFSET %s",
                params + (int(limit), int(offset)),
            )
            return [_to_session(r) for r in fetchall(cur)], total

    def list_for_club(self, club_id: str) -> Sequence[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM sessions WHERE cca_id=%s ORDER BY date ASC, start_time ASC",
                (club_id,),
            )
            return [_to_session(r) for r in fetchall(cur)]

    def create(self, *, club_id: str, data: SessionInput) -> Session:
        session = Session(
            session_id=new_id(),
            club_id=club_id,
            title=data.title,
            date=data.date,
            start_time=data.start_time,
            end_time=data.end_time,
            location=data.location,
            notes=data.notes,
            created_at=utc_now(),
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO sessions(id, cca_id, title, date, start_time, end_time, location, notes, created_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    session.session_id,
                    club_id,
                    session.title,
                    session.date,
                    session.start_time,
                    session.end_time,
                    session.location,
                    session.notes,
                    session.created_at,
                ),
            )
        return session

    def update(self, *, session_id: str, data: SessionInput) -> Optional[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE sessions
                SET title=%s, date=%s, start_time=%s, end_time=%s, location=%s, notes=%s
                WHERE id=%s
                """,
                (data.title, data.date, data.start_time, data.end_time, data.location, data.notes, session_id),
            )
        return self.get_by_id(session_id)

    def delete(self, session_id: str) -> bool:
        # attendance rows go with it (ON DELETE CASCADE)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM sessions WHERE id=%s", (session_id,))
            return cur.rowcount > 0

    def delete_for_club(self, club_id: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM sessions WHERE cca_id=%s", (club_id,))
            return int(cur.rowcount)
