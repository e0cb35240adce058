"""JSON envelope and exception translation shared by the feature controllers."""

from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Callable, Optional

from flask import current_app, jsonify, request, session

from ..access.model import Caller
from ..core.constants import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from ..core.enums import DenyReason
from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

STATUS_BY_REASON = {
    DenyReason.UNAUTHENTICATED: 401,
    DenyReason.FORBIDDEN_ROLE: 403,
    DenyReason.FORBIDDEN_OWNERSHIP: 403,
    DenyReason.NOT_FOUND: 404,
    DenyReason.EVENT_NOT_OPEN: 400,
    DenyReason.DUPLICATE_REGISTRATION: 400,
    DenyReason.DEADLINE_PASSED: 400,
    DenyReason.CAPACITY_REACHED: 400,
}

MESSAGE_BY_REASON = {
    DenyReason.UNAUTHENTICATED: "Unauthorized - Please log in",
    DenyReason.FORBIDDEN_ROLE: "Forbidden - Your role cannot perform this action",
    DenyReason.FORBIDDEN_OWNERSHIP: "Forbidden - You can only manage your own CCA",
    DenyReason.NOT_FOUND: "Not found",
    DenyReason.EVENT_NOT_OPEN: "This event is no longer accepting registrations",
    DenyReason.DUPLICATE_REGISTRATION: "You are already registered for this event",
    DenyReason.DEADLINE_PASSED: "Registration deadline has passed",
    DenyReason.CAPACITY_REACHED: "Event is at full capacity",
}


def ok(data: Any = None, *, status: int = 200, **extra):
    payload: dict[str, Any] = {"success": True}
    if data is not None:
        payload["data"] = data
    payload.update(extra)
    return jsonify(payload), status


def fail(message: str, status: int, *, reason: Optional[DenyReason] = None):
    payload: dict[str, Any] = {"success": False, "error": message}
    if reason is not None:
        payload["reason"] = reason.value
    return jsonify(payload), status


def json_endpoint(view: Callable):
    """Translate domain exceptions raised by services into the JSON envelope."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except AuthorizationError as e:
            logger.info("Denied %s %s: %s", request.method, request.path, e.reason.value)
            message = str(e) if str(e) != e.reason.value else MESSAGE_BY_REASON[e.reason]
            return fail(message, STATUS_BY_REASON[e.reason], reason=e.reason)
        except AuthenticationError as e:
            return fail(str(e), 401)
        except NotFoundError as e:
            return fail(str(e), 404, reason=DenyReason.NOT_FOUND)
        except ValidationError as e:
            return fail(str(e), 400)
        except Exception as e:
            logger.exception("Unhandled error in %s %s", request.method, request.path)
            if bool(current_app.config.get("DEBUG", False)):
                return fail(f"Internal server error: {e}", 500)
            return fail("Internal server error", 500)

    return wrapper


def current_caller(identity) -> Optional[Caller]:
    """Caller for this request, or None when nobody is logged in."""
    return identity.get_caller(session.get("user_id"))


def json_body() -> dict:
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


def paging_args() -> tuple[int, int]:
    try:
        limit = int(request.args.get("limit") or DEFAULT_PAGE_LIMIT)
        offset = int(request.args.get("offset") or 0)
    except ValueError:
        raise ValidationError("limit/offset must be integers")
    if limit <= 0 or offset < 0:
        raise ValidationError("limit must be positive and offset non-negative")
    return min(limit, MAX_PAGE_LIMIT), offset
