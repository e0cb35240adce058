from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: an account.

    Note: plain data object (no DB access code). ``owned_club_id`` is filled only
    for ``cca_admin`` accounts that have been assigned a club.
    """

    user_id: str
    username: str
    full_name: str
    password_hash: str
    role: Role
    email: Optional[str] = None
    student_id: Optional[str] = None
    is_active: bool = True
    owned_club_id: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.user_id,
            "username": self.username,
            "name": self.full_name,
            "email": self.email,
            "student_id": self.student_id,
            "role": self.role.value,
            "is_active": self.is_active,
            "cca_id": self.owned_club_id,
        }


@dataclass(frozen=True)
class StudentProfile:
    """Read-model joined onto membership and attendance listings."""

    user_id: str
    name: str
    student_id: str
    email: str

    def to_dict(self) -> dict:
        return {
            "id": self.user_id,
            "name": self.name,
            "student_id": self.student_id,
            "email": self.email,
        }
