from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import StudentProfile, User


class UserRepository(Protocol):
    """Repository interface for accounts.

    Note (DIP): services depend on this interface, never on a concrete DB.
    """

    def get_by_id(self, user_id: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def get_profiles(self, user_ids: Sequence[str]) -> dict[str, StudentProfile]:
        raise NotImplementedError

    def create_user(
        self,
        *,
        username: str,
        full_name: str,
        password_hash: str,
        role: Role,
        email: Optional[str] = None,
        student_id: Optional[str] = None,
        cca_id: Optional[str] = None,
    ) -> User:
        """Insert an account. ``cca_id`` is stored only for ``cca_admin`` accounts."""

        raise NotImplementedError

    def update_account(self, user_id: str, **fields) -> bool:
        """Update any of ``full_name``, ``email``, ``student_id``, ``password_hash``."""

        raise NotImplementedError

    def list_students(self) -> Sequence[User]:
        raise NotImplementedError

    def assign_club(self, user_id: str, club_id: str) -> None:
        raise NotImplementedError

    def get_club_admin(self, club_id: str) -> Optional[User]:
        raise NotImplementedError

    def unassign_club(self, club_id: str) -> int:
        """Detach every cca_admin from ``club_id``; returns how many were detached."""

        raise NotImplementedError
