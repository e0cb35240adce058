from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Account roles used for authorization."""

    STUDENT = "student"
    CCA_ADMIN = "cca_admin"
    SYSTEM_ADMIN = "system_admin"


class Action(str, Enum):
    """Operations gated by ``access.policy.authorize``."""

    CREATE_CLUB = "create-club"
    EDIT_CLUB = "edit-club"
    DELETE_CLUB = "delete-club"
    JOIN_CLUB = "join-club"
    ADD_MEMBER = "add-member"
    REMOVE_MEMBER = "remove-member"
    CREATE_SESSION = "create-session"
    EDIT_SESSION = "edit-session"
    DELETE_SESSION = "delete-session"
    CREATE_EVENT = "create-event"
    EDIT_EVENT = "edit-event"
    DELETE_EVENT = "delete-event"
    VIEW_ATTENDANCE = "view-attendance"
    MARK_ATTENDANCE = "mark-attendance"
    VIEW_CLUB_ANALYTICS = "view-club-analytics"
    EXPORT_CLUB_ANALYTICS = "export-club-analytics"
    REGISTER_EVENT = "register-event"
    MANAGE_ACCOUNTS = "manage-accounts"


class DenyReason(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN_ROLE = "forbidden_role"
    FORBIDDEN_OWNERSHIP = "forbidden_ownership"
    NOT_FOUND = "not_found"
    EVENT_NOT_OPEN = "event_not_open"
    DUPLICATE_REGISTRATION = "duplicate_registration"
    DEADLINE_PASSED = "deadline_passed"
    CAPACITY_REACHED = "capacity_reached"


class EventStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class ActivityKind(str, Enum):
    """What an attendance row belongs to. Values are the labels used in trend data."""

    SESSION = "Session"
    EVENT = "Event"


class RegistrationOutcome(str, Enum):
    """Result of the guarded event-registration write."""

    REGISTERED = "registered"
    EVENT_MISSING = "event_missing"
    EVENT_NOT_OPEN = "event_not_open"
    ALREADY_REGISTERED = "already_registered"
    DEADLINE_PASSED = "deadline_passed"
    CAPACITY_REACHED = "capacity_reached"


class Category(str, Enum):
    SPORTS = "Sports"
    ARTS_AND_CULTURE = "Arts & Culture"
    ACADEMIC = "Academic"
    COMMUNITY_SERVICE = "Community Service"
    SPECIAL_INTEREST = "Special Interest"


class Commitment(str, Enum):
    SCHEDULE_BASED = "Schedule Based"
    FLEXIBLE = "Flexible"
    EVENT_BASED = "Event Based"


class SportType(str, Enum):
    COMPETITIVE = "Competitive"
    RECREATIONAL = "Recreational"
    BOTH = "Both"
