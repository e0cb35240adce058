from __future__ import annotations

from typing import Optional, Sequence

from ..common.datetime_utils import utc_now
from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, new_id
from .model import StudentProfile, User
from .repository import UserRepository

_USER_COLUMNS = """
    u.user_id, u.username, u.full_name, u.email, u.student_id, u.password_hash,
    u.role, u.is_active, ad.cca_id AS owned_club_id
"""

_UPDATABLE_COLUMNS = ("full_name", "email", "student_id", "password_hash")


def _to_user(row: dict) -> User:
    return User(
        user_id=str(row["user_id"]),
        username=row["username"],
        full_name=row["full_name"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        email=row.get("email"),
        student_id=row.get("student_id"),
        is_active=bool(row.get("is_active", True)),
        owned_club_id=row.get("owned_club_id"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_USER_COLUMNS}
                FROM users u
                LEFT JOIN cca_admin_details ad ON ad.user_id = u.user_id
                WHERE u.user_id=%s
                """,
                (user_id,),
            )
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_username(self, username: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_USER_COLUMNS}
                FROM users u
                LEFT JOIN cca_admin_details ad ON ad.user_id = u.user_id
                WHERE u.username=%s
                """,
                (username,),
            )
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_USER_COLUMNS}
                FROM users u
                LEFT JOIN cca_admin_details ad ON ad.user_id = u.user_id
                WHERE u.email=%s
                """,
                (email,),
            )
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_profiles(self, user_ids: Sequence[str]) -> dict[str, StudentProfile]:
        ids = list(dict.fromkeys(user_ids))
        if not ids:
            return {}

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT user_id, full_name, student_id, email
                FROM users
                WHERE user_id IN ({in_clause(ids)})
                """,
                tuple(ids),
            )
            return {
                str(r["user_id"]): StudentProfile(
                    user_id=str(r["user_id"]),
                    name=r.get("full_name") or "Unknown",
                    student_id=r.get("student_id") or "N/A",
                    email=r.get("email") or "",
                )
                for r in fetchall(cur)
            }

    def unassign_club(self, club_id: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE cca_admin_details SET cca_id=NULL WHERE cca_id=%s", (club_id,))
            return int(cur.rowcount)

    def create_user(
        self,
        *,
        username: str,
        full_name: str,
        password_hash: str,
        role: Role,
        email: Optional[str] = None,
        student_id: Optional[str] = None,
        cca_id: Optional[str] = None,
    ) -> User:
        user_id = new_id()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(user_id, username, full_name, email, student_id, password_hash, role, is_active, created_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s,1,%s)
                """,
                (user_id, username, full_name, email, student_id, password_hash, role.value, utc_now()),
            )
            if role == Role.CCA_ADMIN:
                cur.execute(
                    "INSERT INTO cca_admin_details(user_id, cca_id) VALUES(%s,%s)",
                    (user_id, cca_id),
                )

        return User(
            user_id=user_id,
            username=username,
            full_name=full_name,
            password_hash=password_hash,
            role=role,
            email=email,
            student_id=student_id,
            owned_club_id=cca_id if role == Role.CCA_ADMIN else None,
        )

    def update_account(self, user_id: str, **fields) -> bool:
        changes = {k: v for k, v in fields.items() if k in _UPDATABLE_COLUMNS}
        if not changes:
            return False

        assignments = ", ".join(f"{column}=%s" for column in changes)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE users SET {assignments} WHERE user_id=%s",
                (*changes.values(), user_id),
            )
            return cur.rowcount > 0

    def list_students(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_USER_COLUMNS}
                FROM users u
                LEFT JOIN cca_admin_details ad ON ad.user_id = u.user_id
                WHERE u.role=%s
                ORDER BY u.full_name ASC
                """,
                (Role.STUDENT.value,),
            )
            return [_to_user(r) for r in fetchall(cur)]

    def assign_club(self, user_id: str, club_id: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO cca_admin_details(user_id, cca_id) VALUES(%s,%s)
                ON DUPLICATE KEY UPDATE cca_id=VALUES(cca_id)
                """,
                (user_id, club_id),
            )

    def get_club_admin(self, club_id: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_USER_COLUMNS}
                FROM users u
                JOIN cca_admin_details ad ON ad.user_id = u.user_id
                WHERE ad.cca_id=%s
                ORDER BY u.username ASC
                LIMIT 1
                """,
                (club_id,),
            )
            row = fetchone(cur)
            return _to_user(row) if row else None
