from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..analytics.model import ActivityRef
from ..core.enums import EventStatus


@dataclass(frozen=True)
class Event:
    """Domain entity: a one-off club activity students register for."""

    event_id: str
    club_id: str
    title: str
    date: date
    start_time: time
    end_time: time
    location: str
    status: EventStatus
    description: Optional[str] = None
    poster_url: Optional[str] = None
    max_attendees: Optional[int] = None
    registration_deadline: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_ref(self) -> ActivityRef:
        return ActivityRef(activity_id=self.event_id, date=self.date, title=self.title)

    def to_dict(self) -> dict:
        return {
            "id": self.event_id,
            "cca_id": self.club_id,
            "title": self.title,
            "description": self.description,
            "date": self.date.isoformat(),
            "start_time": self.start_time.strftime("%H:%M"),
            "end_time": self.end_time.strftime("%H:%M"),
            "location": self.location,
            "poster_url": self.poster_url,
            "max_attendees": self.max_attendees,
            "registration_deadline": self.registration_deadline.isoformat() if self.registration_deadline else None,
            "status": self.status.value,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass(frozen=True)
class EventInput:
    """Validated create/update payload. ``registration_deadline`` is naive UTC."""

    title: str
    date: date
    start_time: time
    end_time: time
    location: str
    description: Optional[str] = None
    poster_url: Optional[str] = None
    max_attendees: Optional[int] = None
    registration_deadline: Optional[datetime] = None
    status: EventStatus = EventStatus.PUBLISHED


@dataclass(frozen=True)
class EventAvailability:
    """Registration figures shown next to an event."""

    current_registrations: int
    spots_remaining: Optional[int]
    is_full: bool

    @classmethod
    def compute(cls, event: Event, registrations: int) -> "EventAvailability":
        if not event.max_attendees:
            return cls(current_registrations=registrations, spots_remaining=None, is_full=False)
        return cls(
            current_registrations=registrations,
            spots_remaining=event.max_attendees - registrations,
            is_full=registrations >= event.max_attendees,
        )
