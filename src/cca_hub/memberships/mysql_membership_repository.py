from __future__ import annotations

from typing import Optional, Sequence

from ..common.datetime_utils import utc_now
from ..database.connection import DatabaseConnection
from ..database.mysql_base import count, db_cursor, fetchall, fetchone, new_id
from .model import Membership
from .repository import MembershipRepository


def _to_membership(row: dict) -> Membership:
    return Membership(
        membership_id=str(row["id"]),
        club_id=str(row["cca_id"]),
        user_id=str(row["user_id"]),
        created_at=row.get("created_at"),
    )


class MySQLMembershipRepository(MembershipRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, *, club_id: str, user_id: str) -> Optional[Membership]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id, cca_id, user_id, created_at FROM cca_membership WHERE cca_id=%s AND user_id=%s",
                (club_id, user_id),
            )
            row = fetchone(cur)
            return _to_membership(row) if row else None

    def list(self, *, club_id: Optional[str] = None, user_id: Optional[str] = None) -> Sequence[Membership]:
        clauses: list[str] = []
        params: list[object] = []
        if club_id is not None:
            clauses.append("cca_id=%s")
            params.append(club_id)
        if user_id is not None:
            clauses.append("user_id=%s")
            params.append(user_id)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT id, cca_id, user_id, created_at FROM cca_membership {where} ORDER BY created_at DESC",
                tuple(params),
            )
            return [_to_membership(r) for r in fetchall(cur)]

    def count_for_club(self, club_id: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            return count(cur, "SELECT COUNT(*) AS n FROM cca_membership WHERE cca_id=%s", (club_id,))

    def create(self, *, club_id: str, user_id: str) -> Membership:
        membership = Membership(membership_id=new_id(), club_id=club_id, user_id=user_id, created_at=utc_now())
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO cca_membership(id, cca_id, user_id, created_at) VALUES(%s,%s,%s,%s)",
                (membership.membership_id, club_id, user_id, membership.created_at),
            )
        return membership

    def delete(self, *, club_id: str, user_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM cca_membership WHERE cca_id=%s AND user_id=%s", (club_id, user_id))
            return cur.rowcount > 0

    def delete_for_club(self, club_id: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM cca_membership WHERE cca_id=%s", (club_id,))
            return int(cur.rowcount)
