from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Category, Commitment
from .model import Club


class ClubRepository(Protocol):
    def list(self, *, category: Optional[Category] = None, commitment: Optional[Commitment] = None) -> Sequence[Club]:
        raise NotImplementedError

    def get_by_id(self, club_id: str) -> Optional[Club]:
        raise NotImplementedError

    def insert(self, club: Club) -> str:
        raise NotImplementedError

    def replace(self, club: Club) -> bool:
        """Overwrite the whole document; fields absent from ``club`` are removed."""

        raise NotImplementedError

    def delete(self, club_id: str) -> bool:
        raise NotImplementedError
