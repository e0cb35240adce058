from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import EventStatus
from .model import Event, EventInput


class EventRepository(Protocol):
    def get_by_id(self, event_id: str) -> Optional[Event]:
        raise NotImplementedError

    def list_page(
        self,
        *,
        club_id: Optional[str],
        status: Optional[EventStatus],
        limit: int,
        offset: int,
    ) -> tuple[Sequence[Event], int]:
        """Soonest first. Returns the page and the total row count."""

        raise NotImplementedError

    def list_for_club(self, club_id: str) -> Sequence[Event]:
        raise NotImplementedError

    def create(self, *, club_id: str, data: EventInput) -> Event:
        raise NotImplementedError

    def update(self, *, event_id: str, data: EventInput) -> Optional[Event]:
        raise NotImplementedError

    def delete(self, event_id: str) -> bool:
        raise NotImplementedError

    def delete_for_club(self, club_id: str) -> int:
        raise NotImplementedError
