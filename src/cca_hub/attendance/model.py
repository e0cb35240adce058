from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..analytics.model import AttendanceRow
from ..core.enums import RegistrationOutcome
from ..users.model import StudentProfile


@dataclass(frozen=True)
class AttendanceRecord:
    """One row of the ``attendance`` table: a member on a session, or a registrant on an event."""

    record_id: str
    user_id: str
    attended: bool
    session_id: Optional[str] = None
    event_id: Optional[str] = None
    marked_by: Optional[str] = None
    marked_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    def to_row(self) -> AttendanceRow:
        return AttendanceRow(
            attended=self.attended,
            session_id=self.session_id,
            event_id=self.event_id,
            user_id=self.user_id,
        )

    def to_dict(self, student: Optional[StudentProfile] = None) -> dict:
        data = {
            "id": self.record_id,
            "user_id": self.user_id,
            "attended": self.attended,
            "marked_by": self.marked_by,
            "marked_at": self.marked_at.isoformat() if self.marked_at else None,
        }
        if self.session_id is not None:
            data["session_id"] = self.session_id
        if self.event_id is not None:
            data["event_id"] = self.event_id
        if student is not None:
            data["student"] = student.to_dict()
        return data


@dataclass(frozen=True)
class Registration:
    """Outcome of a guarded event registration; ``record`` is set only when it succeeded."""

    outcome: RegistrationOutcome
    record: Optional[AttendanceRecord] = None


@dataclass(frozen=True)
class AttendanceMark:
    user_id: str
    attended: bool
