from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from ..access.guard import require
from ..access.model import Caller, Target
from ..attendance.repository import AttendanceRepository
from ..clubs.repository import ClubRepository
from ..common.datetime_utils import parse_hhmm, parse_iso_date
from ..core.enums import Action, DenyReason
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..memberships.repository import MembershipRepository
from .model import Session, SessionInput
from .repository import SessionRepository

logger = logging.getLogger(__name__)


def parse_session_input(payload: dict) -> SessionInput:
    if not payload.get("date"):
        raise ValidationError("date is required")
    start = parse_hhmm(payload.get("start_time"), "start_time")
    end = parse_hhmm(payload.get("end_time"), "end_time")
    if end <= start:
        raise ValidationError("end_time must be after start_time")

    title = (payload.get("title") or "").strip() or None
    return SessionInput(
        title=title,
        date=parse_iso_date(str(payload["date"])),
        start_time=start,
        end_time=end,
        location=(payload.get("location") or "").strip() or None,
        notes=payload.get("notes") or None,
    )


@dataclass(frozen=True)
class SessionListItem:
    session: Session
    attendance_count: int
    total_members: int

    def to_dict(self) -> dict:
        data = self.session.to_dict()
        data["attendance_count"] = self.attendance_count
        data["total_members"] = self.total_members
        return data


class SessionService:
    def __init__(
        self,
        sessions: SessionRepository,
        clubs: ClubRepository,
        memberships: MembershipRepository,
        attendance: AttendanceRepository,
    ):
        self._sessions = sessions
        self._clubs = clubs
        self._memberships = memberships
        self._attendance = attendance

    def _session_target(self, session_id: str) -> tuple[Optional[Session], Target]:
        session = self._sessions.get_by_id(session_id)
        if not session:
            return None, Target(exists=False)
        return session, Target(club_id=session.club_id)

    def list_sessions(
        self,
        caller: Optional[Caller],
        *,
        club_id: Optional[str],
        limit: int,
        offset: int,
    ) -> tuple[Sequence[SessionListItem], int]:
        if caller is None:
            raise AuthorizationError(DenyReason.UNAUTHENTICATED)

        sessions, total = self._sessions.list_page(club_id=club_id, limit=limit, offset=offset)
        attended = self._attendance.attended_counts([s.session_id for s in sessions])

        member_counts: dict[str, int] = {}
        items = []
        for s in sessions:
            if s.club_id not in member_counts:
                member_counts[s.club_id] = self._memberships.count_for_club(s.club_id)
            items.append(
                SessionListItem(
                    session=s,
                    attendance_count=attended.get(s.session_id, 0),
                    total_members=member_counts[s.club_id],
                )
            )
        return items, total

    def get_session(self, session_id: str) -> Session:
        session = self._sessions.get_by_id(session_id)
        if not session:
            raise NotFoundError("Session not found")
        return session

    def create_session(self, caller: Optional[Caller], club_id: str, payload: dict) -> Session:
        target = Target(club_id=club_id, exists=self._clubs.get_by_id(club_id) is not None)
        caller = require(caller, Action.CREATE_SESSION, target)

        session = self._sessions.create(club_id=club_id, data=parse_session_input(payload))
        logger.info("Session %s created for CCA %s by %s", session.session_id, club_id, caller.user_id)

        # Every current member starts on the sheet as absent. The session stays
        # even if this fails; the sheet can be filled in later.
        try:
            member_ids = [m.user_id for m in self._memberships.list(club_id=club_id)]
            created = self._attendance.create_for_session(session.session_id, member_ids)
            logger.info("Created %d attendance rows for session %s", created, session.session_id)
        except Exception:
            logger.exception("Could not create attendance rows for session %s", session.session_id)

        return session

    def update_session(self, caller: Optional[Caller], session_id: str, payload: dict) -> Session:
        session, target = self._session_target(session_id)
        caller = require(caller, Action.EDIT_SESSION, target)
        assert session is not None

        merged = {
            "title": session.title,
            "date": session.date.isoformat(),
            "start_time": session.start_time.strftime("%H:%M"),
            "end_time": session.end_time.strftime("%H:%M"),
            "location": session.location,
            "notes": session.notes,
        }
        merged.update(payload)

        updated = self._sessions.update(session_id=session_id, data=parse_session_input(merged))
        if not updated:
            raise NotFoundError("Session not found")
        logger.info("Session %s updated by %s", session_id, caller.user_id)
        return updated

    def delete_session(self, caller: Optional[Caller], session_id: str) -> None:
        _, target = self._session_target(session_id)
        caller = require(caller, Action.DELETE_SESSION, target)
        self._sessions.delete(session_id)
        logger.info("Session %s deleted by %s", session_id, caller.user_id)
