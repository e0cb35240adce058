from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Optional, Sequence

from bson import ObjectId

from ..access.guard import require
from ..access.model import Caller, Target
from ..common.datetime_utils import parse_hhmm, utc_now
from ..common.validators import require_enum, require_non_empty
from ..core.enums import Action, Category, Commitment, Role, SportType
from ..core.exceptions import NotFoundError, ValidationError
from ..events.repository import EventRepository
from ..memberships.repository import MembershipRepository
from ..sessions.repository import SessionRepository
from ..users.repository import UserRepository
from .model import BLOCK_TYPES, WEEKDAYS, Club, ScheduleSlot
from .repository import ClubRepository

logger = logging.getLogger(__name__)

# Only a system_admin may change these.
STRUCTURAL_FIELDS = ("name", "category", "sportType")


def parse_schedule(value: Any) -> tuple[ScheduleSlot, ...]:
    if not isinstance(value, list):
        raise ValidationError("schedule must be a list")

    slots = []
    for i, raw in enumerate(value):
        if not isinstance(raw, dict):
            raise ValidationError(f"schedule[{i}] must be an object")
        day = raw.get("day")
        if day not in WEEKDAYS:
            raise ValidationError(f"schedule[{i}].day must be a weekday name")
        start = parse_hhmm(raw.get("startTime"), f"schedule[{i}].startTime")
        end = parse_hhmm(raw.get("endTime"), f"schedule[{i}].endTime")
        if end <= start:
            raise ValidationError(f"schedule[{i}] must end after it starts")
        slots.append(
            ScheduleSlot(
                day=day,
                start_time=start.strftime("%H:%M"),
                end_time=end.strftime("%H:%M"),
                location=str(raw.get("location") or "").strip(),
            )
        )
    return tuple(slots)


def parse_blocks(value: Any) -> tuple[dict, ...]:
    if not isinstance(value, list):
        raise ValidationError("blocks must be a list")
    for i, block in enumerate(value):
        if not isinstance(block, dict) or block.get("type") not in BLOCK_TYPES:
            raise ValidationError(f"blocks[{i}].type must be one of: {', '.join(BLOCK_TYPES)}")
    return tuple(dict(b) for b in value)


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def apply_changes(club: Club, changes: dict) -> Club:
    """Return ``club`` with the camelCase fields in ``changes`` applied.

    A ``None`` schedule or sportType removes the field. Moving the club off
    Schedule Based drops its schedule.
    """

    updated = club
    if "name" in changes:
        updated = replace(updated, name=require_non_empty(changes["name"], "name"))
    if "category" in changes:
        updated = replace(updated, category=require_enum(changes["category"], Category, "category"))
    if "commitment" in changes:
        updated = replace(updated, commitment=require_enum(changes["commitment"], Commitment, "commitment"))
    if "sportType" in changes:
        sport = changes["sportType"]
        updated = replace(updated, sport_type=require_enum(sport, SportType, "sportType") if sport is not None else None)
    if "heroImage" in changes:
        updated = replace(updated, hero_image=_optional_text(changes["heroImage"]))
    if "shortDescription" in changes:
        updated = replace(updated, short_description=_optional_text(changes["shortDescription"]))
    if "blocks" in changes:
        updated = replace(updated, blocks=parse_blocks(changes["blocks"] or []))

    if "schedule" in changes:
        schedule = changes["schedule"]
        updated = replace(updated, schedule=parse_schedule(schedule) if schedule is not None else None)

    if updated.commitment != Commitment.SCHEDULE_BASED:
        if changes.get("schedule") is not None:
            raise ValidationError("Only Schedule Based CCAs can have a schedule")
        updated = replace(updated, schedule=None)

    return updated


class ClubService:
    def __init__(
        self,
        clubs: ClubRepository,
        memberships: MembershipRepository,
        sessions: SessionRepository,
        events: EventRepository,
        users: UserRepository,
    ):
        self._clubs = clubs
        self._memberships = memberships
        self._sessions = sessions
        self._events = events
        self._users = users

    def list_clubs(self, *, category: Optional[str] = None, commitment: Optional[str] = None) -> Sequence[Club]:
        return self._clubs.list(
            category=require_enum(category, Category, "category") if category else None,
            commitment=require_enum(commitment, Commitment, "commitment") if commitment else None,
        )

    def get_club(self, club_id: str) -> Club:
        club = self._clubs.get_by_id(club_id)
        if not club:
            raise NotFoundError("CCA not found")
        return club

    def member_count(self, club_id: str) -> int:
        self.get_club(club_id)
        return self._memberships.count_for_club(club_id)

    def create_club(self, caller: Optional[Caller], payload: dict) -> Club:
        caller = require(caller, Action.CREATE_CLUB)

        now = utc_now()
        draft = Club(
            club_id=str(ObjectId()),
            name=require_non_empty(payload.get("name"), "name"),
            category=require_enum(payload.get("category"), Category, "category"),
            commitment=require_enum(payload.get("commitment"), Commitment, "commitment"),
            created_by=caller.user_id,
            created_at=now,
            updated_at=now,
        )
        optional = {k: payload[k] for k in ("schedule", "sportType", "heroImage", "shortDescription", "blocks") if k in payload}
        club = apply_changes(draft, optional)

        self._clubs.insert(club)
        logger.info("CCA %s (%s) created by %s", club.club_id, club.name, caller.user_id)
        return club

    def update_club(self, caller: Optional[Caller], club_id: str, payload: dict) -> Club:
        club = self._clubs.get_by_id(club_id)
        caller = require(caller, Action.EDIT_CLUB, Target(club_id=club_id, exists=club is not None))
        assert club is not None

        changes = dict(payload)
        if caller.role == Role.CCA_ADMIN:
            for key in STRUCTURAL_FIELDS:
                changes.pop(key, None)

        updated = replace(apply_changes(club, changes), updated_at=utc_now())
        if not self._clubs.replace(updated):
            raise NotFoundError("CCA not found")

        logger.info("CCA %s updated by %s (%s)", club_id, caller.user_id, ", ".join(sorted(changes)) or "no fields")
        return updated

    def delete_club(self, caller: Optional[Caller], club_id: str) -> None:
        club = self._clubs.get_by_id(club_id)
        caller = require(caller, Action.DELETE_CLUB, Target(club_id=club_id, exists=club is not None))

        # Attendance rows go with their events and sessions.
        events = self._events.delete_for_club(club_id)
        sessions = self._sessions.delete_for_club(club_id)
        members = self._memberships.delete_for_club(club_id)
        admins = self._users.unassign_club(club_id)
        self._clubs.delete(club_id)

        logger.info(
            "CCA %s deleted by %s: %d events, %d sessions, %d memberships, %d admins unassigned",
            club_id,
            caller.user_id,
            events,
            sessions,
            members,
            admins,
        )
