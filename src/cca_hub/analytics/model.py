from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..common.datetime_utils import DateLike, iso
from ..core.enums import ActivityKind


@dataclass(frozen=True)
class ActivityRef:
    """The slice of a session or event the aggregator needs."""

    activity_id: str
    date: DateLike
    title: Optional[str] = None


@dataclass(frozen=True)
class AttendanceRow:
    """Raw attendance row. Exactly one of ``session_id`` / ``event_id`` is set."""

    attended: bool
    session_id: Optional[str] = None
    event_id: Optional[str] = None
    user_id: Optional[str] = None


@dataclass(frozen=True)
class TrendPoint:
    date: DateLike
    title: str
    kind: ActivityKind
    rate: float
    present: int
    total: int

    def to_dict(self) -> dict:
        return {
            "date": iso(self.date),
            "title": self.title,
            "type": self.kind.value,
            "rate": self.rate,
            "present": self.present,
            "total": self.total,
        }


@dataclass(frozen=True)
class AnalyticsResult:
    member_count: int
    session_count: int
    event_count: int
    average_attendance: float
    trend_data: list[TrendPoint] = field(default_factory=list)
    # Rows dropped for a missing/duplicated foreign key or an unknown activity.
    # Not serialized; the caller decides whether to log it.
    skipped_rows: int = 0

    def to_dict(self) -> dict:
        return {
            "memberCount": self.member_count,
            "sessionCount": self.session_count,
            "eventCount": self.event_count,
            "averageAttendance": self.average_attendance,
            "trendData": [p.to_dict() for p in self.trend_data],
        }


@dataclass(frozen=True)
class AttendanceSummary:
    """Per-activity roll-up shown next to an attendance sheet."""

    total: int
    total_marked: int
    attended: int
    absent: int
    attendance_rate: float

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "total_marked": self.total_marked,
            "attended": self.attended,
            "absent": self.absent,
            "attendance_rate": self.attendance_rate,
        }
