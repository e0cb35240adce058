from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from ..access.guard import require
from ..access.model import Caller, Target
from ..analytics.aggregator import summarize_attendance
from ..analytics.model import AttendanceSummary
from ..common.datetime_utils import utc_now
from ..core.enums import Action
from ..core.exceptions import NotFoundError, ValidationError
from ..events.repository import EventRepository
from ..sessions.repository import SessionRepository
from ..users.repository import UserRepository
from .model import AttendanceMark, AttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttendanceSheet:
    records: Sequence[AttendanceRecord]
    students: dict
    summary: AttendanceSummary

    def rows(self) -> list[dict]:
        return [r.to_dict(self.students.get(r.user_id)) for r in self.records]


def parse_marks(value: Any) -> list[AttendanceMark]:
    if not isinstance(value, list):
        raise ValidationError("Invalid request - attendance must be an array")
    marks = []
    for i, item in enumerate(value):
        if not isinstance(item, dict) or not item.get("user_id") or not isinstance(item.get("attended"), bool):
            raise ValidationError(f"attendance[{i}] needs user_id and a boolean attended")
        marks.append(AttendanceMark(user_id=str(item["user_id"]), attended=item["attended"]))
    return marks


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        sessions: SessionRepository,
        events: EventRepository,
        users: UserRepository,
    ):
        self._attendance = attendance
        self._sessions = sessions
        self._events = events
        self._users = users

    def _session_target(self, session_id: str) -> Target:
        session = self._sessions.get_by_id(session_id)
        return Target(club_id=session.club_id) if session else Target(exists=False)

    def _event_target(self, event_id: str) -> Target:
        event = self._events.get_by_id(event_id)
        return Target(club_id=event.club_id) if event else Target(exists=False)

    def _sheet(self, records: Sequence[AttendanceRecord]) -> AttendanceSheet:
        return AttendanceSheet(
            records=records,
            students=self._users.get_profiles([r.user_id for r in records]),
            summary=summarize_attendance([r.to_row() for r in records]),
        )

    def session_sheet(self, caller: Optional[Caller], session_id: str) -> AttendanceSheet:
        require(caller, Action.VIEW_ATTENDANCE, self._session_target(session_id))
        return self._sheet(self._attendance.list_for_session(session_id))

    def event_sheet(self, caller: Optional[Caller], event_id: str) -> AttendanceSheet:
        require(caller, Action.VIEW_ATTENDANCE, self._event_target(event_id))
        return self._sheet(self._attendance.list_for_event(event_id))

    def mark_session(self, caller: Optional[Caller], session_id: str, user_ids: Any) -> int:
        """``user_ids`` attended; every other row on the session is reset to absent."""

        caller = require(caller, Action.MARK_ATTENDANCE, self._session_target(session_id))
        if not isinstance(user_ids, list):
            raise ValidationError("Invalid request - user_ids must be an array")

        marked = self._attendance.set_session_attendance(
            session_id=session_id,
            attendee_ids=[str(u) for u in user_ids],
            marked_by=caller.user_id,
            now=utc_now(),
        )
        logger.info("Session %s: %d present, marked by %s", session_id, marked, caller.user_id)
        return marked

    def remove_session_record(self, caller: Optional[Caller], session_id: str, user_id: str) -> None:
        caller = require(caller, Action.MARK_ATTENDANCE, self._session_target(session_id))
        if not user_id:
            raise ValidationError("user_id is required")
        if not self._attendance.delete_for_session_and_user(session_id, user_id):
            raise NotFoundError("Attendance record not found")
        logger.info("Session %s: attendance row for %s removed by %s", session_id, user_id, caller.user_id)

    def mark_event(self, caller: Optional[Caller], event_id: str, attendance: Any) -> int:
        caller = require(caller, Action.MARK_ATTENDANCE, self._event_target(event_id))
        marks = parse_marks(attendance)
        updated = self._attendance.mark_event(event_id=event_id, marks=marks, marked_by=caller.user_id, now=utc_now())
        logger.info("Event %s: %d attendance rows marked by %s", event_id, updated, caller.user_id)
        return updated

    def mark_event_one(self, caller: Optional[Caller], event_id: str, user_id: Any, attended: Any) -> AttendanceRecord:
        caller = require(caller, Action.MARK_ATTENDANCE, self._event_target(event_id))
        mark = parse_marks([{"user_id": user_id, "attended": attended}])[0]

        if not self._attendance.mark_event(event_id=event_id, marks=[mark], marked_by=caller.user_id, now=utc_now()):
            raise NotFoundError("Student is not registered for this event")
        record = self._attendance.get_for_event_and_user(event_id, mark.user_id)
        if not record:
            raise NotFoundError("Student is not registered for this event")
        return record
