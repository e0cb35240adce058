from __future__ import annotations

from dataclasses import dataclass

from .analytics.service import AnalyticsService
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .clubs.mongo_club_repository import MongoClubRepository
from .clubs.service import ClubService
from .database.connection import DatabaseConnection
from .database.mongo import MongoConnection
from .events.mysql_event_repository import MySQLEventRepository
from .events.service import EventService
from .memberships.mysql_membership_repository import MySQLMembershipRepository
from .memberships.service import MembershipService
from .sessions.mysql_session_repository import MySQLSessionRepository
from .sessions.service import SessionService
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AccountService, AuthService, IdentityProvider


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection
    mongo: MongoConnection

    users_repo: MySQLUserRepository
    clubs_repo: MongoClubRepository
    memberships_repo: MySQLMembershipRepository
    sessions_repo: MySQLSessionRepository
    events_repo: MySQLEventRepository
    attendance_repo: MySQLAttendanceRepository

    identity: IdentityProvider
    auth_service: AuthService
    account_service: AccountService
    club_service: ClubService
    membership_service: MembershipService
    session_service: SessionService
    event_service: EventService
    attendance_service: AttendanceService
    analytics_service: AnalyticsService


def build_container(*, db_config: dict, mongo_uri: str, mongo_db: str) -> Container:
    conn = DatabaseConnection.from_dict(db_config)
    mongo = MongoConnection.get_instance(mongo_uri, mongo_db)

    users_repo = MySQLUserRepository(conn)
    clubs_repo = MongoClubRepository(mongo)
    memberships_repo = MySQLMembershipRepository(conn)
    sessions_repo = MySQLSessionRepository(conn)
    events_repo = MySQLEventRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)

    return Container(
        conn=conn,
        mongo=mongo,
        users_repo=users_repo,
        clubs_repo=clubs_repo,
        memberships_repo=memberships_repo,
        sessions_repo=sessions_repo,
        events_repo=events_repo,
        attendance_repo=attendance_repo,
        identity=IdentityProvider(users_repo),
        auth_service=AuthService(users_repo),
        account_service=AccountService(users_repo, clubs_repo),
        club_service=ClubService(clubs_repo, memberships_repo, sessions_repo, events_repo, users_repo),
        membership_service=MembershipService(memberships_repo, clubs_repo, users_repo),
        session_service=SessionService(sessions_repo, clubs_repo, memberships_repo, attendance_repo),
        event_service=EventService(events_repo, clubs_repo, attendance_repo),
        attendance_service=AttendanceService(attendance_repo, sessions_repo, events_repo, users_repo),
        analytics_service=AnalyticsService(clubs_repo, memberships_repo, sessions_repo, events_repo, attendance_repo),
    )
