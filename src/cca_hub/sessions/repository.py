from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Session, SessionInput


class SessionRepository(Protocol):
    def get_by_id(self, session_id: str) -> Optional[Session]:
        raise NotImplementedError

    def list_page(self, *, club_id: Optional[str], limit: int, offset: int) -> tuple[Sequence[Session], int]:
        """Newest first. Returns the page and the total row count."""

        raise NotImplementedError

    def list_for_club(self, club_id: str) -> Sequence[Session]:
        """Oldest first."""

        raise NotImplementedError

    def create(self, *, club_id: str, data: SessionInput) -> Session:
        raise NotImplementedError

    def update(self, *, session_id: str, data: SessionInput) -> Optional[Session]:
        raise NotImplementedError

    def delete(self, session_id: str) -> bool:
        raise NotImplementedError

    def delete_for_club(self, club_id: str) -> int:
        raise NotImplementedError
