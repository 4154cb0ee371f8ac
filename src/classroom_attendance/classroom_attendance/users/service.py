from __future__ import annotations

import logging
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import require_min_length, require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, NotFoundError, ValidationError
from ..store.entity_store import EntityStore
from .model import User

logger = logging.getLogger(__name__)


def next_numbered_id(prefix: str, existing_ids) -> str:
    """Smallest `<prefix><N>` (N >= 1) not taken yet."""

    taken = set(existing_ids)
    n = len(taken) + 1
    while f"{prefix}{n}" in taken:
        n += 1
    return f"{prefix}{n}"


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, store: EntityStore):
        self._store = store

    def authenticate(self, email: str, password: str, role: Role) -> User:
        user = next(
            (u for u in self._store.list_users() if u.email == email and u.role == role),
            None,
        )
        if not user:
            raise AuthenticationError("Invalid email, password or role")

        try:
            ok = check_password_hash(user.password, password)
        except (TypeError, ValueError):
            # e.g. placeholder or corrupted hashes
            ok = False

        if not ok:
            raise AuthenticationError("Invalid email, password or role")
        return user


class UserService:
    """Use case: register (create) and look up users."""

    def __init__(self, store: EntityStore):
        self._store = store

    def create_user(
        self,
        *,
        name: str,
        email: str,
        password: str,
        role: Role,
        department: str,
        student_class: Optional[str] = None,
        roll_number: Optional[str] = None,
    ) -> User:
        name = require_min_length(name, "Name", 2)
        email = require_non_empty(email, "Email")
        if "@" not in email:
            raise ValidationError("Invalid email address")
        require_min_length(password, "Password", 6)
        department = require_non_empty(department, "Department")

        if role == Role.STUDENT:
            student_class = require_non_empty(student_class or "", "Class")
            roll_number = roll_number.strip() if roll_number and roll_number.strip() else None
        else:
            student_class = None
            roll_number = None

        password_hash = generate_password_hash(password)

        with self._store.atomic():
            users = self._store.list_users()
            if any(u.email == email for u in users):
                raise ValidationError("An account with this email already exists")

            user = User(
                user_id=next_numbered_id("user", (u.user_id for u in users)),
                name=name,
                email=email,
                password=password_hash,
                role=role,
                department=department,
                student_class=student_class,
                roll_number=roll_number,
            )
            self._store.replace_users([*users, user])
        logger.info("Registered %s %s", role.value, user.user_id)
        return user

    def get_user(self, user_id: str) -> User:
        user = self._store.get_user(user_id)
        if not user:
            raise NotFoundError(f"User {user_id} not found")
        return user

    def list_users(self, *, role: Optional[Role] = None) -> list[User]:
        users = self._store.list_users()
        if role is None:
            return users
        return [u for u in users if u.role == role]
