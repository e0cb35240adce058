from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import AttendanceMark, AttendanceRecord, Registration


class AttendanceRepository(Protocol):
    def list_for_session(self, session_id: str) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_for_event(self, event_id: str) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_for_activities(
        self,
        *,
        session_ids: Sequence[str],
        event_ids: Sequence[str],
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def get_for_event_and_user(self, event_id: str, user_id: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def attended_counts(self, session_ids: Sequence[str]) -> dict[str, int]:
        """session id -> number of rows with ``attended`` set."""

        raise NotImplementedError

    def registration_counts(self, event_ids: Sequence[str]) -> dict[str, int]:
        """event id -> number of attendance rows (registrations)."""

        raise NotImplementedError

    def registered_event_ids(self, user_id: str, event_ids: Sequence[str]) -> set[str]:
        raise NotImplementedError

    def create_for_session(self, session_id: str, user_ids: Sequence[str]) -> int:
        """Insert an unattended row per user; existing rows are left alone."""

        raise NotImplementedError

    def register_for_event(self, *, event_id: str, user_id: str, now: datetime) -> Registration:
        """Check deadline, capacity and duplicates and insert, all under a lock on the event row."""

        raise NotImplementedError

    def set_session_attendance(
        self,
        *,
        session_id: str,
        attendee_ids: Sequence[str],
        marked_by: str,
        now: datetime,
    ) -> int:
        """Mark ``attendee_ids`` present and everyone else on the session absent."""

        raise NotImplementedError

    def delete_for_session_and_user(self, session_id: str, user_id: str) -> bool:
        raise NotImplementedError

    def mark_event(
        self,
        *,
        event_id: str,
        marks: Sequence[AttendanceMark],
        marked_by: str,
        now: datetime,
    ) -> int:
        raise NotImplementedError
