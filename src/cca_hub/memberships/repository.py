from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Membership


class MembershipRepository(Protocol):
    def get(self, *, club_id: str, user_id: str) -> Optional[Membership]:
        raise NotImplementedError

    def list(self, *, club_id: Optional[str] = None, user_id: Optional[str] = None) -> Sequence[Membership]:
        raise NotImplementedError

    def count_for_club(self, club_id: str) -> int:
        raise NotImplementedError

    def create(self, *, club_id: str, user_id: str) -> Membership:
        raise NotImplementedError

    def delete(self, *, club_id: str, user_id: str) -> bool:
        raise NotImplementedError

    def delete_for_club(self, club_id: str) -> int:
        raise NotImplementedError
