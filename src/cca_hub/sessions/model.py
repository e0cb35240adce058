from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..analytics.model import ActivityRef


@dataclass(frozen=True)
class Session:
    """Domain entity: one meeting of a club."""

    session_id: str
    club_id: str
    title: Optional[str]
    date: date
    start_time: time
    end_time: time
    location: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_ref(self) -> ActivityRef:
        return ActivityRef(activity_id=self.session_id, date=self.date, title=self.title)

    def to_dict(self) -> dict:
        return {
            "id": self.session_id,
            "cca_id": self.club_id,
            "title": self.title,
            "date": self.date.isoformat(),
            "start_time": self.start_time.strftime("%H:%M"),
            "end_time": self.end_time.strftime("%H:%M"),
            "location": self.location,
            "notes": self.notes,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class SessionInput:
    """Validated create/update payload."""

    title: Optional[str]
    date: date
    start_time: time
    end_time: time
    location: Optional[str] = None
    notes: Optional[str] = None
