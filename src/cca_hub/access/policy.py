"""Authorization rules for every mutating or sensitive-read operation.

``authorize`` is a pure function: it never touches storage and never raises for
an expected denial. Services fetch whatever context the rule needs (owning club,
event status, existing registration), build a ``Target`` and act on the
returned ``Decision``.
"""

from __future__ import annotations

from typing import Optional

from ..core.enums import Action, DenyReason, EventStatus, RegistrationOutcome, Role
from .model import ALLOW, Caller, Decision, Target, deny

# Actions a cca_admin may perform on the club they administer.
CLUB_SCOPED_ADMIN_ACTIONS = frozenset(
    {
        Action.EDIT_CLUB,
        Action.ADD_MEMBER,
        Action.REMOVE_MEMBER,
        Action.CREATE_SESSION,
        Action.EDIT_SESSION,
        Action.DELETE_SESSION,
        Action.CREATE_EVENT,
        Action.EDIT_EVENT,
        Action.DELETE_EVENT,
        Action.VIEW_ATTENDANCE,
        Action.MARK_ATTENDANCE,
        Action.VIEW_CLUB_ANALYTICS,
        Action.EXPORT_CLUB_ANALYTICS,
    }
)

SYSTEM_ADMIN_ACTIONS = frozenset(
    {
        Action.CREATE_CLUB,
        Action.EDIT_CLUB,
        Action.DELETE_CLUB,
        Action.REMOVE_MEMBER,
        Action.MANAGE_ACCOUNTS,
    }
)

STUDENT_ACTIONS = frozenset({Action.JOIN_CLUB, Action.REGISTER_EVENT})

_OUTCOME_REASONS = {
    RegistrationOutcome.EVENT_MISSING: DenyReason.NOT_FOUND,
    RegistrationOutcome.EVENT_NOT_OPEN: DenyReason.EVENT_NOT_OPEN,
    RegistrationOutcome.ALREADY_REGISTERED: DenyReason.DUPLICATE_REGISTRATION,
    RegistrationOutcome.DEADLINE_PASSED: DenyReason.DEADLINE_PASSED,
    RegistrationOutcome.CAPACITY_REACHED: DenyReason.CAPACITY_REACHED,
}


def authorize(caller: Optional[Caller], action: Action, target: Optional[Target] = None) -> Decision:
    if caller is None:
        return deny(DenyReason.UNAUTHENTICATED)

    target = target or Target()

    # Role is checked before existence.
    if caller.role == Role.SYSTEM_ADMIN:
        if action not in SYSTEM_ADMIN_ACTIONS:
            return deny(DenyReason.FORBIDDEN_ROLE)
        if not target.exists:
            return deny(DenyReason.NOT_FOUND)
        return ALLOW

    if caller.role == Role.CCA_ADMIN:
        if action not in CLUB_SCOPED_ADMIN_ACTIONS:
            return deny(DenyReason.FORBIDDEN_ROLE)
        if not target.exists:
            return deny(DenyReason.NOT_FOUND)
        if caller.owned_club_id is None or target.club_id != caller.owned_club_id:
            return deny(DenyReason.FORBIDDEN_OWNERSHIP)
        return ALLOW

    if caller.role == Role.STUDENT:
        if action not in STUDENT_ACTIONS:
            return deny(DenyReason.FORBIDDEN_ROLE)
        if not target.exists:
            return deny(DenyReason.NOT_FOUND)
        if action == Action.REGISTER_EVENT:
            return _check_registration(target)
        return ALLOW

    # Unknown roles never fall through to an allow.
    return deny(DenyReason.FORBIDDEN_ROLE)


def _check_registration(target: Target) -> Decision:
    if target.event_status != EventStatus.PUBLISHED:
        return deny(DenyReason.EVENT_NOT_OPEN)
    if target.already_registered:
        return deny(DenyReason.DUPLICATE_REGISTRATION)
    return ALLOW


def classify_registration(outcome: RegistrationOutcome) -> Decision:
    """Map the write path's outcome onto a decision the caller can report."""
    if outcome == RegistrationOutcome.REGISTERED:
        return ALLOW
    return deny(_OUTCOME_REASONS[outcome])
