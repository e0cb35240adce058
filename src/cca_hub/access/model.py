from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import DenyReason, EventStatus, Role


@dataclass(frozen=True)
class Caller:
    """Who is asking. ``owned_club_id`` is only meaningful for ``cca_admin``."""

    user_id: str
    role: Role
    owned_club_id: Optional[str] = None


@dataclass(frozen=True)
class Target:
    """What the action is aimed at, as far as the decision needs to know."""

    club_id: Optional[str] = None
    exists: bool = True
    event_status: Optional[EventStatus] = None
    already_registered: bool = False


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: Optional[DenyReason] = None

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = Decision(allowed=True)


def deny(reason: DenyReason) -> Decision:
    return Decision(allowed=False, reason=reason)
