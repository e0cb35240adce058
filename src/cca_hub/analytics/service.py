from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..access.guard import require
from ..access.model import Caller, Target
from ..attendance.repository import AttendanceRepository
from ..clubs.repository import ClubRepository
from ..core.enums import Action
from ..core.exceptions import ValidationError
from ..events.repository import EventRepository
from ..memberships.repository import MembershipRepository
from ..sessions.repository import SessionRepository
from . import export
from .aggregator import aggregate
from .model import AnalyticsResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportFile:
    content: bytes
    mimetype: str
    filename: str


class AnalyticsService:
    """Fetches a club's raw rows and hands them to the aggregator."""

    def __init__(
        self,
        clubs: ClubRepository,
        memberships: MembershipRepository,
        sessions: SessionRepository,
        events: EventRepository,
        attendance: AttendanceRepository,
    ):
        self._clubs = clubs
        self._memberships = memberships
        self._sessions = sessions
        self._events = events
        self._attendance = attendance

    def _compute(self, club_id: str) -> AnalyticsResult:
        sessions = self._sessions.list_for_club(club_id)
        events = self._events.list_for_club(club_id)
        records = self._attendance.list_for_activities(
            session_ids=[s.session_id for s in sessions],
            event_ids=[e.event_id for e in events],
        )

        result = aggregate(
            [s.to_ref() for s in sessions],
            [e.to_ref() for e in events],
            [r.to_row() for r in records],
            member_count=self._memberships.count_for_club(club_id),
        )
        if result.skipped_rows:
            logger.warning("CCA %s analytics: skipped %d malformed or orphaned attendance rows", club_id, result.skipped_rows)
        return result

    def _target(self, club_id: str) -> Target:
        return Target(club_id=club_id, exists=self._clubs.get_by_id(club_id) is not None)

    def club_analytics(self, caller: Optional[Caller], club_id: str) -> AnalyticsResult:
        require(caller, Action.VIEW_CLUB_ANALYTICS, self._target(club_id))
        return self._compute(club_id)

    def export(self, caller: Optional[Caller], club_id: str, fmt: str = "csv") -> ExportFile:
        require(caller, Action.EXPORT_CLUB_ANALYTICS, self._target(club_id))

        fmt = (fmt or "csv").lower()
        if fmt not in ("csv", "xlsx"):
            raise ValidationError("format must be csv or xlsx")

        result = self._compute(club_id)
        if fmt == "xlsx":
            return ExportFile(export.to_xlsx(result), export.XLSX_MIMETYPE, f"cca_{club_id}_analytics.xlsx")
        return ExportFile(export.to_csv(result), "text/csv", f"cca_{club_id}_analytics.csv")
