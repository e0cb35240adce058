from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..access.guard import require
from ..access.model import Caller
from ..clubs.repository import ClubRepository
from ..common.validators import require_enum, require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import Action, DenyReason, Role
from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)


def _clean(value: object) -> Optional[str]:
    text = str(value).strip() if value is not None else ""
    return text or None


def _password_matches(user: User, password: Optional[str]) -> bool:
    try:
        return check_password_hash(user.password_hash, password or "")
    except ValueError:
        # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
        return False


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login."""

    user_id: str
    full_name: str
    role: Role
    owned_club_id: Optional[str]


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, username: str, password: str) -> SessionUser:
        user = self._users.get_by_username((username or "").strip())
        if not user or not user.is_active:
            raise AuthenticationError("Invalid username or password")

        if not _password_matches(user, password):
            raise AuthenticationError("Invalid username or password")

        logger.info("User %s logged in as %s", user.user_id, user.role.value)
        return SessionUser(
            user_id=user.user_id,
            full_name=user.full_name,
            role=user.role,
            owned_club_id=user.owned_club_id,
        )


class IdentityProvider:
    """Resolves the caller for a request from the user id held in the session.

    Role and owned club are re-read on every request so that an admin reassigned
    to another club (or deactivated) takes effect immediately.
    """

    def __init__(self, users: UserRepository):
        self._users = users

    def get_caller(self, user_id: Optional[str]) -> Optional[Caller]:
        if not user_id:
            return None

        user = self._users.get_by_id(str(user_id))
        if not user or not user.is_active:
            return None

        owned = user.owned_club_id if user.role == Role.CCA_ADMIN else None
        return Caller(user_id=user.user_id, role=user.role, owned_club_id=owned)


class AccountService:
    """Use case: accounts managed by the system admin, plus changing one's own password."""

    def __init__(self, users: UserRepository, clubs: ClubRepository):
        self._users = users
        self._clubs = clubs

    def _require_club(self, club_id: str) -> None:
        if not self._clubs.get_by_id(club_id):
            raise NotFoundError("CCA not found")

    def _credential_changes(self, user_id: str, *, email: object, password: object) -> dict:
        changes: dict = {}
        email = _clean(email)
        if email:
            existing = self._users.get_by_email(email)
            if existing and existing.user_id != user_id:
                raise ValidationError("Email already exists")
            changes["email"] = email
        if password:
            changes["password_hash"] = generate_password_hash(
                require_min_length(str(password), "password", MIN_PASSWORD_LENGTH)
            )
        return changes

    def create_account(
        self,
        caller: Optional[Caller],
        *,
        username: str,
        password: str,
        full_name: str,
        role: object,
        email: Optional[str] = None,
        student_id: Optional[str] = None,
        cca_id: Optional[str] = None,
    ) -> User:
        caller = require(caller, Action.MANAGE_ACCOUNTS)

        username = require_non_empty(username, "username")
        full_name = require_non_empty(full_name, "full_name")
        require_min_length(password, "password", MIN_PASSWORD_LENGTH)
        account_role = require_enum(role, Role, "role")

        if self._users.get_by_username(username):
            raise ValidationError("Username already exists")

        email = _clean(email)
        if email and self._users.get_by_email(email):
            raise ValidationError("Email already exists")

        cca_id = _clean(cca_id)
        if cca_id:
            if account_role != Role.CCA_ADMIN:
                raise ValidationError("cca_id can only be set for cca_admin accounts")
            self._require_club(cca_id)

        user = self._users.create_user(
            username=username,
            full_name=full_name,
            password_hash=generate_password_hash(password),
            role=account_role,
            email=email,
            student_id=_clean(student_id),
            cca_id=cca_id,
        )
        logger.info("Account %s (%s) created by %s", user.user_id, account_role.value, caller.user_id)
        return user

    def assign_club(self, caller: Optional[Caller], *, username: str, cca_id: str) -> User:
        caller = require(caller, Action.MANAGE_ACCOUNTS)

        username = require_non_empty(username, "username")
        cca_id = require_non_empty(cca_id, "cca_id")

        user = self._users.get_by_username(username)
        if not user:
            raise NotFoundError("User not found")
        if user.role != Role.CCA_ADMIN:
            raise ValidationError("Only cca_admin accounts can be assigned a CCA")
        self._require_club(cca_id)

        self._users.assign_club(user.user_id, cca_id)
        logger.info("cca_admin %s assigned to CCA %s by %s", user.user_id, cca_id, caller.user_id)
        return replace(user, owned_club_id=cca_id)

    def get_club_admin(self, caller: Optional[Caller], cca_id: str) -> User:
        require(caller, Action.MANAGE_ACCOUNTS)

        admin = self._users.get_club_admin(cca_id)
        if not admin:
            raise NotFoundError("No admin user found for this CCA")
        return admin

    def update_club_admin(
        self,
        caller: Optional[Caller],
        cca_id: str,
        *,
        email: Optional[str] = None,
        password: Optional[str] = None,
    ) -> User:
        admin = self.get_club_admin(caller, cca_id)

        changes = self._credential_changes(admin.user_id, email=email, password=password)
        if changes:
            self._users.update_account(admin.user_id, **changes)
        return self._users.get_by_id(admin.user_id) or admin

    def list_students(self, caller: Optional[Caller]) -> Sequence[User]:
        require(caller, Action.MANAGE_ACCOUNTS)
        return self._users.list_students()

    def get_student(self, caller: Optional[Caller], user_id: str) -> User:
        require(caller, Action.MANAGE_ACCOUNTS)

        user = self._users.get_by_id(user_id)
        if not user or user.role != Role.STUDENT:
            raise NotFoundError("Student not found")
        return user

    def update_student(
        self,
        caller: Optional[Caller],
        user_id: str,
        *,
        full_name: Optional[str] = None,
        student_id: Optional[str] = None,
        email: Optional[str] = None,
        password: Optional[str] = None,
    ) -> User:
        user = self.get_student(caller, user_id)

        changes = self._credential_changes(user.user_id, email=email, password=password)
        if _clean(full_name):
            changes["full_name"] = _clean(full_name)
        if _clean(student_id):
            changes["student_id"] = _clean(student_id)

        if changes:
            self._users.update_account(user.user_id, **changes)
        return self._users.get_by_id(user.user_id) or user

    def change_password(self, caller: Optional[Caller], *, old_password: str, new_password: str) -> None:
        if caller is None:
            raise AuthorizationError(DenyReason.UNAUTHENTICATED)
        if not old_password or not new_password:
            raise ValidationError("Missing password fields")

        user = self._users.get_by_id(caller.user_id)
        if not user:
            raise NotFoundError("User not found")
        if not _password_matches(user, old_password):
            raise ValidationError("Incorrect old password")

        require_min_length(new_password, "new_password", MIN_PASSWORD_LENGTH)
        self._users.update_account(user.user_id, password_hash=generate_password_hash(new_password))
        logger.info("User %s changed their password", user.user_id)
