from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Membership:
    membership_id: str
    club_id: str
    user_id: str
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.membership_id,
            "cca_id": self.club_id,
            "user_id": self.user_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
