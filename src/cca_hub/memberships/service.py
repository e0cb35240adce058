from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from ..access.guard import require
from ..access.model import Caller, Target
from ..clubs.model import Club
from ..clubs.repository import ClubRepository
from ..core.enums import Action, DenyReason
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..users.model import StudentProfile
from ..users.repository import UserRepository
from .model import Membership
from .repository import MembershipRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MemberView:
    membership: Membership
    student: Optional[StudentProfile]

    def to_dict(self) -> dict:
        data = self.membership.to_dict()
        data["student"] = self.student.to_dict() if self.student else None
        return data


class MembershipService:
    def __init__(self, memberships: MembershipRepository, clubs: ClubRepository, users: UserRepository):
        self._memberships = memberships
        self._clubs = clubs
        self._users = users

    def _club_target(self, club_id: str) -> Target:
        return Target(club_id=club_id, exists=self._clubs.get_by_id(club_id) is not None)

    def _enroll(self, *, club_id: str, user_id: str, by: str) -> Membership:
        if self._memberships.get(club_id=club_id, user_id=user_id):
            raise ValidationError("Student is already a member of this CCA")
        membership = self._memberships.create(club_id=club_id, user_id=user_id)
        logger.info("User %s joined CCA %s (by %s)", user_id, club_id, by)
        return membership

    def join(self, caller: Optional[Caller], club_id: str) -> Membership:
        caller = require(caller, Action.JOIN_CLUB, self._club_target(club_id))
        return self._enroll(club_id=club_id, user_id=caller.user_id, by=caller.user_id)

    def add_member(self, caller: Optional[Caller], club_id: str, user_id: str) -> Membership:
        caller = require(caller, Action.ADD_MEMBER, self._club_target(club_id))
        if not self._users.get_by_id(user_id):
            raise NotFoundError("Student not found")
        return self._enroll(club_id=club_id, user_id=user_id, by=caller.user_id)

    def remove_member(self, caller: Optional[Caller], club_id: str, user_id: str) -> None:
        caller = require(caller, Action.REMOVE_MEMBER, self._club_target(club_id))
        if not self._memberships.delete(club_id=club_id, user_id=user_id):
            raise NotFoundError("Student is not enrolled in this CCA")
        logger.info("User %s removed from CCA %s by %s", user_id, club_id, caller.user_id)

    def list_members(self, caller: Optional[Caller], club_id: str) -> Sequence[MemberView]:
        require(caller, Action.VIEW_ATTENDANCE, self._club_target(club_id))
        memberships = self._memberships.list(club_id=club_id)
        profiles = self._users.get_profiles([m.user_id for m in memberships])
        return [MemberView(membership=m, student=profiles.get(m.user_id)) for m in memberships]

    def my_clubs(self, caller: Optional[Caller]) -> Sequence[Club]:
        if caller is None:
            raise AuthorizationError(DenyReason.UNAUTHENTICATED)
        clubs = []
        for m in self._memberships.list(user_id=caller.user_id):
            club = self._clubs.get_by_id(m.club_id)
            if club:
                clubs.append(club)
        return clubs
