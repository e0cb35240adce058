from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from ..access.guard import raise_for, require
from ..access.model import Caller, Target
from ..access.policy import classify_registration
from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..clubs.repository import ClubRepository
from ..common.datetime_utils import parse_hhmm, parse_iso_date, parse_iso_datetime, to_naive_utc, utc_now
from ..common.validators import optional_positive_int, require_enum, require_non_empty
from ..core.enums import Action, EventStatus
from ..core.exceptions import NotFoundError, ValidationError
from .model import Event, EventAvailability, EventInput
from .repository import EventRepository

logger = logging.getLogger(__name__)


def parse_event_input(payload: dict) -> EventInput:
    if not payload.get("date"):
        raise ValidationError("date is required")
    start = parse_hhmm(payload.get("start_time"), "start_time")
    end = parse_hhmm(payload.get("end_time"), "end_time")
    if end <= start:
        raise ValidationError("end_time must be after start_time")

    deadline = parse_iso_datetime(payload.get("registration_deadline"))
    return EventInput(
        title=require_non_empty(payload.get("title"), "title"),
        date=parse_iso_date(str(payload["date"])),
        start_time=start,
        end_time=end,
        location=require_non_empty(payload.get("location"), "location"),
        description=payload.get("description") or None,
        poster_url=payload.get("poster_url") or None,
        max_attendees=optional_positive_int(payload.get("max_attendees"), "max_attendees"),
        registration_deadline=to_naive_utc(deadline) if deadline else None,
        status=require_enum(payload.get("status") or EventStatus.PUBLISHED.value, EventStatus, "status"),
    )


@dataclass(frozen=True)
class EventView:
    event: Event
    availability: EventAvailability
    is_registered: bool = False

    def to_dict(self) -> dict:
        data = self.event.to_dict()
        data["current_registrations"] = self.availability.current_registrations
        data["spots_remaining"] = self.availability.spots_remaining
        data["is_full"] = self.availability.is_full
        data["is_registered"] = self.is_registered
        return data


class EventService:
    def __init__(self, events: EventRepository, clubs: ClubRepository, attendance: AttendanceRepository):
        self._events = events
        self._clubs = clubs
        self._attendance = attendance

    def _views(self, events: Sequence[Event], caller: Optional[Caller]) -> list[EventView]:
        ids = [e.event_id for e in events]
        counts = self._attendance.registration_counts(ids)
        mine = self._attendance.registered_event_ids(caller.user_id, ids) if caller else set()
        return [
            EventView(
                event=e,
                availability=EventAvailability.compute(e, counts.get(e.event_id, 0)),
                is_registered=e.event_id in mine,
            )
            for e in events
        ]

    def list_events(
        self,
        caller: Optional[Caller],
        *,
        club_id: Optional[str] = None,
        status: Optional[str] = None,
        limit: int,
        offset: int,
    ) -> tuple[Sequence[EventView], int]:
        parsed = require_enum(status or EventStatus.PUBLISHED.value, EventStatus, "status")
        events, total = self._events.list_page(club_id=club_id, status=parsed, limit=limit, offset=offset)
        return self._views(events, caller), total

    def get_event(self, caller: Optional[Caller], event_id: str) -> EventView:
        event = self._events.get_by_id(event_id)
        if not event:
            raise NotFoundError("Event not found")
        return self._views([event], caller)[0]

    def create_event(self, caller: Optional[Caller], club_id: str, payload: dict) -> Event:
        target = Target(club_id=club_id, exists=self._clubs.get_by_id(club_id) is not None)
        caller = require(caller, Action.CREATE_EVENT, target)

        event = self._events.create(club_id=club_id, data=parse_event_input(payload))
        logger.info("Event %s created for CCA %s by %s", event.event_id, club_id, caller.user_id)
        return event

    def update_event(self, caller: Optional[Caller], event_id: str, payload: dict) -> Event:
        event = self._events.get_by_id(event_id)
        target = Target(club_id=event.club_id) if event else Target(exists=False)
        caller = require(caller, Action.EDIT_EVENT, target)
        assert event is not None

        current = event.to_dict()
        merged = {k: current[k] for k in (
            "title", "description", "date", "start_time", "end_time", "location",
            "poster_url", "max_attendees", "registration_deadline", "status",
        )}
        merged.update(payload)

        updated = self._events.update(event_id=event_id, data=parse_event_input(merged))
        if not updated:
            raise NotFoundError("Event not found")
        logger.info("Event %s updated by %s", event_id, caller.user_id)
        return updated

    def delete_event(self, caller: Optional[Caller], event_id: str) -> None:
        event = self._events.get_by_id(event_id)
        target = Target(club_id=event.club_id) if event else Target(exists=False)
        caller = require(caller, Action.DELETE_EVENT, target)
        self._events.delete(event_id)
        logger.info("Event %s deleted by %s", event_id, caller.user_id)

    def register(self, caller: Optional[Caller], event_id: str) -> AttendanceRecord:
        """Register the calling student for a published event."""

        event = self._events.get_by_id(event_id)
        already = bool(caller and event and self._attendance.get_for_event_and_user(event_id, caller.user_id))
        target = (
            Target(club_id=event.club_id, event_status=event.status, already_registered=already)
            if event
            else Target(exists=False)
        )
        caller = require(caller, Action.REGISTER_EVENT, target)

        # Deadline and capacity are decided under the event row lock.
        registration = self._attendance.register_for_event(event_id=event_id, user_id=caller.user_id, now=utc_now())
        raise_for(classify_registration(registration.outcome))
        assert registration.record is not None

        logger.info("User %s registered for event %s", caller.user_id, event_id)
        return registration.record
