from __future__ import annotations

from typing import Optional

from ..core.enums import Action
from ..core.exceptions import AuthorizationError
from .model import Caller, Decision, Target
from .policy import authorize


def raise_for(decision: Decision) -> None:
    if not decision.allowed:
        raise AuthorizationError(decision.reason)


def require(caller: Optional[Caller], action: Action, target: Optional[Target] = None) -> Caller:
    """Service-side wrapper around ``authorize``: returns the caller or raises."""
    raise_for(authorize(caller, action, target))
    assert caller is not None
    return caller
